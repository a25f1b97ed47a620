import enum

from sqlalchemy import Column, Integer, String, Numeric, Boolean, Text, Enum
from .base import Base, TimestampMixin, enum_values


class FeeFrequency(str, enum.Enum):
     MONTHLY = "monthly"
     QUARTERLY = "quarterly"
     HALF_YEARLY = "half-yearly"
     YEARLY = "yearly"
     ONE_TIME = "one-time"


ALL_CLASSES = "all"


class Fee(TimestampMixin, Base):
     """
     Fee structure - reference data used to pre-fill invoice items.
     """

     id = Column(Integer, primary_key=True, autoincrement=True)
     name = Column(String(150), nullable=False)
     description = Column(Text, nullable=True)
     amount = Column(Numeric(12, 2), nullable=False)
     frequency = Column(
          Enum(FeeFrequency, name="fee_frequency", create_constraint=True, values_callable=enum_values),
          nullable=False
     )
     applicable_classes = Column(String(255), nullable=True)  # Comma-separated, "all" = every class
     academic_year = Column(String(20), nullable=True)
     is_active = Column(Boolean, default=True, nullable=False, index=True)

     def __repr__(self):
          return f"<Fee(id={self.id}, name='{self.name}', amount={self.amount})>"

     @property
     def classes(self) -> list[str]:
          if not self.applicable_classes:
               return []
          return [c.strip() for c in self.applicable_classes.split(",") if c.strip()]

     def applies_to(self, class_name: str) -> bool:
          classes = self.classes
          return ALL_CLASSES in classes or class_name in classes
