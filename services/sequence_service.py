"""
Document number allocation.

Numbers look like INV-2026-00001. Each (prefix, year) pair has its own
counter row in number_sequences. The counter is bumped with a single
UPDATE ... SET last_value = last_value + 1, so two transactions can never
read the same value: the second one waits on the row lock held by the
first until it commits.
"""
import logging
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models import NumberSequence, utcnow
from services.locks import sequence_locks

logger = logging.getLogger(__name__)

INVOICE_PREFIX = "INV"
PAYMENT_PREFIX = "PAY"
RECEIPT_PREFIX = "REC"

SEQUENCE_WIDTH = 5


def format_number(prefix: str, year: int, value: int) -> str:
     """format_number("INV", 2026, 7) -> "INV-2026-00007"."""
     return f"{prefix}-{year}-{str(value).zfill(SEQUENCE_WIDTH)}"


def _bump(db: Session, prefix: str, year: int) -> int:
     result = db.execute(
          update(NumberSequence)
          .where(NumberSequence.prefix == prefix, NumberSequence.year == year)
          .values(last_value=NumberSequence.last_value + 1)
          .execution_options(synchronize_session=False)
     )
     return result.rowcount


def next_value(db: Session, prefix: str, year: Optional[int] = None) -> int:
     """
     Allocate the next counter value for prefix/year.

     The first allocation of a year inserts the counter row. If another
     transaction inserted it first, the unique constraint fires and we fall
     back to the update path.
     """
     year = year or utcnow().year

     with sequence_locks.hold((prefix, year)):
          if not _bump(db, prefix, year):
               try:
                    with db.begin_nested():
                         db.add(NumberSequence(prefix=prefix, year=year, last_value=1))
                         db.flush()
                    logger.info("Started %s sequence for %s", prefix, year)
                    return 1
               except IntegrityError:
                    if not _bump(db, prefix, year):
                         raise

          value = db.execute(
               select(NumberSequence.last_value)
               .where(NumberSequence.prefix == prefix, NumberSequence.year == year)
          ).scalar_one()
          return value


def allocate_number(db: Session, prefix: str, year: Optional[int] = None) -> str:
     """Allocate and format the next document number, e.g. PAY-2026-00042."""
     year = year or utcnow().year
     number = format_number(prefix, year, next_value(db, prefix, year))
     logger.debug("Allocated %s", number)
     return number
