# invoicing/services/ledger.py
"""
Payment ledger for a single invoice.

Every function here is pure: it takes an InvoiceSnapshot and returns the
new (payments, amount_paid, payment_status) triple without touching the
database. Persisting that triple is the caller's job
(see invoicing.services.payments).

Status is always derived from (amount_paid, amount_due) by classify_status():

    Pending  --(0 < paid < due - 0.01)-->  Partial
    Pending  --(paid >= due - 0.01)----->  Paid
    Partial  --(paid <= 0.01)----------->  Pending
    Partial  --(paid >= due - 0.01)----->  Paid
    Paid     --(0.01 < paid < due-0.01)->  Partial
    Paid     --(paid <= 0.01)----------->  Pending
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date as date_type
from decimal import Decimal

from invoicing.choices import PAYMENT_PAID, PAYMENT_PARTIAL, PAYMENT_PENDING
from invoicing.exceptions import NotFoundError, ValidationError
from invoicing.services.snapshots import InvoiceSnapshot, Payment
from invoicing.utils.finance import EPSILON, ZERO_MONEY, parse_amount, parse_local_date, to_decimal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerResult:
    payments: tuple[Payment, ...]
    amount_paid: Decimal
    payment_status: str

    def payments_as_dicts(self) -> list[dict]:
        return [p.to_dict() for p in self.payments]


def classify_status(amount_paid, amount_due) -> str:
    """
    The one and only payment-status rule. Every writer goes through here.
    """
    paid = to_decimal(amount_paid)
    due = to_decimal(amount_due)
    # Nothing paid is Pending even when nothing is due (new or zero-total invoices).
    if paid <= EPSILON:
        return PAYMENT_PENDING
    if paid >= due - EPSILON:
        return PAYMENT_PAID
    return PAYMENT_PARTIAL


def remaining_balance(invoice: InvoiceSnapshot) -> Decimal:
    return invoice.amount_due - invoice.amount_paid


def _sum_payments(payments) -> Decimal:
    return sum((p.amount for p in payments), ZERO_MONEY)


def _check_index(invoice: InvoiceSnapshot, index) -> int:
    if isinstance(index, bool) or not isinstance(index, int):
        raise NotFoundError(f"Payment index {index!r} is not valid.")
    if index < 0 or index >= len(invoice.payments):
        raise NotFoundError(
            f"Invoice {invoice.invoice_number or invoice.pk} has no payment at position {index}."
        )
    return index


def _check_against_balance(invoice: InvoiceSnapshot, amount: Decimal, available: Decimal) -> None:
    # Nothing left to pay: the cent of tolerance does not apply.
    if available <= 0 or amount > available + EPSILON:
        logger.warning(
            "Rejected payment of %s on invoice %s: exceeds remaining balance %s",
            amount, invoice.pk, available,
        )
        raise ValidationError(
            f"Payment of {amount:.2f} exceeds remaining balance of {available:.2f}.",
            code="exceeds_remaining_balance",
        )


def _coerce_date(value) -> date_type | None:
    parsed = parse_local_date(value)
    if value not in (None, "") and parsed is None:
        raise ValidationError(f"'{value}' is not a valid payment date.", code="invalid_date")
    return parsed


def record_payment(invoice: InvoiceSnapshot, amount, date, note: str = "") -> LedgerResult:
    """
    Append a payment to the ledger.

    Raises ValidationError if the amount is not a positive number or is more
    than the remaining balance (plus one cent of tolerance).
    """
    amount = parse_amount(amount)
    _check_against_balance(invoice, amount, remaining_balance(invoice))

    payments = invoice.payments + (Payment(date=_coerce_date(date), amount=amount, note=note or ""),)
    amount_paid = invoice.amount_paid + amount
    return LedgerResult(
        payments=payments,
        amount_paid=amount_paid,
        payment_status=classify_status(amount_paid, invoice.amount_due),
    )


def edit_payment(invoice: InvoiceSnapshot, index: int, amount, date, note: str = "") -> LedgerResult:
    """
    Replace the payment at `index` in place.

    The balance check adds the old amount back first, so lowering or keeping
    a payment on a fully paid invoice is allowed. amount_paid is recomputed
    from the whole ledger rather than adjusted by a delta.
    """
    index = _check_index(invoice, index)
    amount = parse_amount(amount)
    old = invoice.payments[index]
    _check_against_balance(invoice, amount, remaining_balance(invoice) + old.amount)

    payments = list(invoice.payments)
    payments[index] = Payment(date=_coerce_date(date), amount=amount, note=note or "")
    payments = tuple(payments)
    amount_paid = _sum_payments(payments)
    return LedgerResult(
        payments=payments,
        amount_paid=amount_paid,
        payment_status=classify_status(amount_paid, invoice.amount_due),
    )


def delete_payment(invoice: InvoiceSnapshot, index: int) -> LedgerResult:
    """Remove the payment at `index`. amount_paid never drops below zero."""
    index = _check_index(invoice, index)
    removed = invoice.payments[index]
    payments = invoice.payments[:index] + invoice.payments[index + 1:]
    amount_paid = max(ZERO_MONEY, invoice.amount_paid - removed.amount)
    return LedgerResult(
        payments=payments,
        amount_paid=amount_paid,
        payment_status=classify_status(amount_paid, invoice.amount_due),
    )
