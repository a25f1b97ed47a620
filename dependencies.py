# dependencies.py
"""
Shared FastAPI dependencies: bearer token verification and the current actor.
"""
import logging
import os

from dotenv import load_dotenv
from fastapi import Depends, HTTPException, Request, status
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from database import get_session
from models import User
from services.access import Actor

load_dotenv()

logger = logging.getLogger(__name__)


def _jwt_settings() -> tuple:
     return os.getenv("JWT_SECRET"), os.getenv("JWT_ALGORITHM", "HS256")


# Token Auth Dependency
def verify_token(request: Request) -> dict:
     auth = request.headers.get("Authorization")
     if not auth or not auth.startswith("Bearer "):
          raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authorized, no token")
     token = auth.split(" ", 1)[1]
     secret, algorithm = _jwt_settings()
     if not secret:
          logger.error("JWT_SECRET is not configured")
          raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authorized, token failed")
     try:
          return jwt.decode(token, secret, algorithms=[algorithm])
     except JWTError as e:
          logger.info("Rejected token: %s", e)
          raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authorized, token failed")


def get_current_actor(
     token: dict = Depends(verify_token),
     db: Session = Depends(get_session),
) -> Actor:
     """Resolve the token's user id to an active user and return it as an Actor."""
     user_id = token.get("id")
     user = db.query(User).filter(User.id == user_id).first() if user_id is not None else None
     if not user:
          raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
     if not user.is_active:
          raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User account is not active")
     return Actor(id=user.id, role=user.role)
