"""
Pydantic schemas for fee structures.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict

from models import FeeFrequency


class FeeCreate(BaseModel):
     name: str = Field(..., min_length=1, max_length=150)
     description: Optional[str] = None
     amount: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
     frequency: FeeFrequency
     applicable_classes: List[str] = Field(default_factory=list, description='Class names, or ["all"]')
     academic_year: Optional[str] = Field(None, max_length=20)
     is_active: bool = True

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "name": "Tuition",
                    "amount": 5000.00,
                    "frequency": "quarterly",
                    "applicable_classes": ["all"],
                    "academic_year": "2025-2026",
               }
          }
     )


class FeeUpdate(BaseModel):
     name: Optional[str] = Field(None, min_length=1, max_length=150)
     description: Optional[str] = None
     amount: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
     frequency: Optional[FeeFrequency] = None
     applicable_classes: Optional[List[str]] = None
     academic_year: Optional[str] = Field(None, max_length=20)
     is_active: Optional[bool] = None

     model_config = ConfigDict(extra="forbid")


class FeeResponse(BaseModel):
     id: int
     name: str
     description: Optional[str] = None
     amount: Decimal
     frequency: FeeFrequency
     applicable_classes: List[str] = []
     academic_year: Optional[str] = None
     is_active: bool
     created_at: datetime
