"""
Access filter for ledger reads.

- Admin: every invoice and payment, every report.
- Parent (guardian): only rows whose guardian_id is their own user id.
"""
from dataclasses import dataclass
from typing import Optional, Union

from sqlalchemy.orm import Query

from exceptions import AuthorizationError
from models import Invoice, Payment, UserRole


@dataclass(frozen=True)
class Actor:
     """The authenticated caller."""
     id: int
     role: str

     @property
     def is_admin(self) -> bool:
          return self.role == UserRole.ADMIN.value

     @property
     def is_guardian(self) -> bool:
          return self.role == UserRole.PARENT.value


def require_admin(actor: Actor, action: str = "perform this action") -> None:
     if not actor.is_admin:
          raise AuthorizationError(f"User role '{actor.role}' is not authorized to {action}")


def guardian_scope(actor: Actor) -> Optional[int]:
     """
     The guardian id every visible row must carry, or None for unrestricted
     access. Roles other than admin/parent see nothing (id -1 never matches).
     """
     if actor.is_admin:
          return None
     if actor.is_guardian:
          return actor.id
     return -1


def scope_invoices(query: Query, actor: Actor) -> Query:
     guardian_id = guardian_scope(actor)
     if guardian_id is None:
          return query
     return query.filter(Invoice.guardian_id == guardian_id)


def scope_payments(query: Query, actor: Actor) -> Query:
     guardian_id = guardian_scope(actor)
     if guardian_id is None:
          return query
     return query.filter(Payment.guardian_id == guardian_id)


def ensure_can_view(actor: Actor, record: Union[Invoice, Payment]) -> None:
     """Raise AuthorizationError when a guardian asks for someone else's row."""
     guardian_id = guardian_scope(actor)
     if guardian_id is not None and record.guardian_id != guardian_id:
          kind = "invoice" if isinstance(record, Invoice) else "payment"
          raise AuthorizationError(f"Not authorized to view this {kind}")
