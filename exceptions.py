# exceptions.py
"""
Billing error taxonomy.

Services raise these; main.py turns them into HTTP responses using the
status code carried by each class.
"""
from fastapi import status


class BillingError(Exception):
     """Base class for failures reported back to the caller."""

     status_code = status.HTTP_400_BAD_REQUEST

     def __init__(self, message: str):
          super().__init__(message)
          self.message = message


class ValidationError(BillingError):
     """Malformed or out-of-range input, including overpayment attempts."""

     status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(BillingError):
     """Referenced invoice, payment, fee, student or guardian does not exist."""

     status_code = status.HTTP_404_NOT_FOUND


class AuthorizationError(BillingError):
     """Caller may not view or act on the target record."""

     status_code = status.HTTP_403_FORBIDDEN


class ConflictError(BillingError):
     """Operation would break a structural invariant."""

     status_code = status.HTTP_409_CONFLICT
