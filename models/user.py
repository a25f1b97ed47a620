# models/user.py
import enum

from sqlalchemy import Column, Integer, String, Boolean, DateTime, func
from .base import Base, utcnow


class UserRole(str, enum.Enum):
     ADMIN = "admin"
     PARENT = "parent"  # guardian of one or more students


class User(Base):
     """
     User model - identities owned by the roster/auth collaborator.
     Only the fields needed for access scoping and report display are mapped.
     """
     __tablename__ = "users"

     id = Column(Integer, primary_key=True, autoincrement=True)
     email = Column(String(255), unique=True, nullable=False, index=True)
     first_name = Column(String(100), nullable=False)
     last_name = Column(String(100), nullable=False)
     phone = Column(String(50), nullable=True)
     role = Column(String(50), nullable=False, index=True)  # admin, parent
     is_active = Column(Boolean, default=True, nullable=False)
     created_at = Column(DateTime, default=utcnow, server_default=func.now(), nullable=False)

     def __repr__(self):
          return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"

     @property
     def full_name(self) -> str:
          return f"{self.first_name} {self.last_name}"
