# invoicing/exceptions.py
"""
Errors raised by the payment ledger and the services around it.

    InvoicingError
    +-- ValidationError        bad / non-positive amount, balance exceeded
    +-- NotFoundError          invoice or payment index does not exist
    +-- PersistenceError       the database write failed
        +-- ConcurrentUpdateError   invoice changed between read and write

ValidationError is also a django.core.exceptions.ValidationError, so forms
and views can hand it straight to form.add_error() or messages.
"""
from __future__ import annotations

from django.core.exceptions import ValidationError as DjangoValidationError


class InvoicingError(Exception):
    pass


class ValidationError(InvoicingError, DjangoValidationError):
    pass


class NotFoundError(InvoicingError, LookupError):
    pass


class PersistenceError(InvoicingError):
    pass


class ConcurrentUpdateError(PersistenceError):
    def __init__(self, invoice_id, expected_version, actual_version=None):
        self.invoice_id = invoice_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"Invoice {invoice_id} was changed by someone else "
            f"(expected version {expected_version}, found {actual_version}). "
            "Reload and try again."
        )
