# routers/fees.py
"""
Fee structure API.

Fee structures are reference data: invoice items may name a fee_id and get
their description and amount pre-filled from it.
"""
import logging
from typing import Optional, List
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from database import get_session
from dependencies import get_current_actor
from exceptions import NotFoundError
from models import Fee
from schemas.fee import FeeCreate, FeeResponse, FeeUpdate
from services.access import Actor, require_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/fees", tags=["fees"])


def _join_classes(classes: List[str]) -> Optional[str]:
     cleaned = [c.strip() for c in classes if c and c.strip()]
     return ",".join(cleaned) or None


def _get_fee_or_404(db: Session, fee_id: int) -> Fee:
     fee = db.query(Fee).filter(Fee.id == fee_id).first()
     if not fee:
          raise NotFoundError("Fee structure not found")
     return fee


@router.get(
     "",
     response_model=List[FeeResponse],
     summary="List fee structures"
)
def list_fees(
     active: Optional[bool] = Query(None, description="Filter by active flag"),
     class_name: Optional[str] = Query(None, alias="class", description="Fees applicable to this class"),
     academic_year: Optional[str] = Query(None, description="Filter by academic year"),
     db: Session = Depends(get_session),
     actor: Actor = Depends(get_current_actor)
):
     """
     A fee matches a class filter when the class is listed in its
     applicable classes, or when it applies to "all".
     """
     query = db.query(Fee)
     if active is not None:
          query = query.filter(Fee.is_active == active)
     if academic_year:
          query = query.filter(Fee.academic_year == academic_year)

     fees = query.order_by(Fee.name.asc(), Fee.id.asc()).all()
     if class_name:
          fees = [fee for fee in fees if fee.applies_to(class_name)]

     return [_build_fee_response(fee) for fee in fees]


@router.post(
     "",
     response_model=FeeResponse,
     status_code=status.HTTP_201_CREATED,
     summary="Create a fee structure"
)
def create_fee(
     fee_data: FeeCreate,
     db: Session = Depends(get_session),
     actor: Actor = Depends(get_current_actor)
):
     require_admin(actor, "manage fee structures")

     fee = Fee(
          name=fee_data.name,
          description=fee_data.description,
          amount=fee_data.amount,
          frequency=fee_data.frequency,
          applicable_classes=_join_classes(fee_data.applicable_classes),
          academic_year=fee_data.academic_year,
          is_active=fee_data.is_active,
     )
     db.add(fee)
     db.commit()
     db.refresh(fee)

     logger.info("Created fee structure %s (%s %s)", fee.id, fee.name, fee.amount)
     return _build_fee_response(fee)


@router.get(
     "/{fee_id}",
     response_model=FeeResponse,
     summary="Get fee structure by ID"
)
def get_fee(
     fee_id: int,
     db: Session = Depends(get_session),
     actor: Actor = Depends(get_current_actor)
):
     return _build_fee_response(_get_fee_or_404(db, fee_id))


@router.put(
     "/{fee_id}",
     response_model=FeeResponse,
     summary="Update fee structure"
)
def update_fee(
     fee_id: int,
     fee_data: FeeUpdate,
     db: Session = Depends(get_session),
     actor: Actor = Depends(get_current_actor)
):
     """
     Only provided fields are updated. Existing invoice items keep the
     amounts they were created with.
     """
     require_admin(actor, "manage fee structures")

     fee = _get_fee_or_404(db, fee_id)
     changes = fee_data.model_dump(exclude_unset=True)
     if "applicable_classes" in changes:
          changes["applicable_classes"] = _join_classes(changes["applicable_classes"] or [])
     for field, value in changes.items():
          if value is None and field in ("name", "amount", "frequency", "is_active"):
               continue
          setattr(fee, field, value)

     db.commit()
     db.refresh(fee)
     return _build_fee_response(fee)


@router.delete(
     "/{fee_id}",
     status_code=status.HTTP_204_NO_CONTENT,
     summary="Delete fee structure"
)
def delete_fee(
     fee_id: int,
     db: Session = Depends(get_session),
     actor: Actor = Depends(get_current_actor)
):
     """Invoice items that referenced the fee keep their copied description and amount."""
     require_admin(actor, "manage fee structures")

     fee = _get_fee_or_404(db, fee_id)
     db.delete(fee)
     db.commit()

     logger.info("Deleted fee structure %s", fee_id)
     return None


def _build_fee_response(fee: Fee) -> FeeResponse:
     return FeeResponse(
          id=fee.id,
          name=fee.name,
          description=fee.description,
          amount=fee.amount,
          frequency=fee.frequency,
          applicable_classes=fee.classes,
          academic_year=fee.academic_year,
          is_active=fee.is_active,
          created_at=fee.created_at,
     )
