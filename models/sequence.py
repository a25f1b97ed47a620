"""
NumberSequence model - per-prefix, per-year counters for document numbers.

One row per (prefix, year), e.g. ("INV", 2026). last_value holds the
highest number handed out so far.
"""
from sqlalchemy import Column, Integer, String, UniqueConstraint
from .base import Base


class NumberSequence(Base):
     __table_args__ = (
          UniqueConstraint("prefix", "year", name="uq_number_sequences_prefix_year"),
     )

     id = Column(Integer, primary_key=True, autoincrement=True)
     prefix = Column(String(10), nullable=False)
     year = Column(Integer, nullable=False)
     last_value = Column(Integer, nullable=False, default=0)

     def __repr__(self):
          return f"<NumberSequence(prefix='{self.prefix}', year={self.year}, last_value={self.last_value})>"
