from datetime import datetime, timezone

from sqlalchemy.orm import DeclarativeBase, declared_attr
from sqlalchemy import Column, DateTime, func


def utcnow() -> datetime:
     """Naive UTC timestamp; every stored datetime uses this clock."""
     return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
     """
     Base class for all SQLAlchemy models.
     Provides common configuration and mixins.
     """

     @declared_attr.directive
     def __tablename__(cls) -> str:
          """
          Automatically generate table name from class name.
          Example: InvoiceItem -> invoice_items, NumberSequence -> number_sequences
          """
          import re
          name = re.sub(r'(?<!^)(?=[A-Z])', '_', cls.__name__).lower()
          # Pluralize (simple version)
          if name.endswith('y'):
               return name[:-1] + 'ies'
          elif name.endswith('s'):
               return name + 'es'
          return name + 's'


class TimestampMixin:
     """Adds created_at / updated_at columns."""

     created_at = Column(DateTime, default=utcnow, server_default=func.now(), nullable=False, index=True)
     updated_at = Column(DateTime, default=utcnow, server_default=func.now(), onupdate=utcnow, nullable=False)


def enum_values(enum_cls) -> list[str]:
     """Persist enum values ("partially_paid") rather than member names."""
     return [member.value for member in enum_cls]
