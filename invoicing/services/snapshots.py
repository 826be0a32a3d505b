# invoicing/services/snapshots.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from invoicing.choices import INVOICE_REGISTERED, PAYMENT_PENDING
from invoicing.utils.finance import ZERO_MONEY, parse_local_date, quantize_money, to_decimal


@dataclass(frozen=True)
class Payment:
    """One entry of an invoice's payment ledger."""

    date: date | None
    amount: Decimal
    note: str = ""

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat() if self.date else None,
            "amount": str(quantize_money(self.amount)),
            "note": self.note or "",
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Payment":
        return cls(
            date=parse_local_date(data.get("date")),
            amount=quantize_money(data.get("amount")),
            note=data.get("note") or "",
        )


@dataclass(frozen=True)
class InvoiceSnapshot:
    """
    Read-only view of one invoice, as the ledger and the aggregation engine
    see it. Built from a model row with Invoice.to_snapshot(); tests build
    them directly.
    """

    pk: int | None = None
    invoice_number: str = ""
    project_id: int | None = None
    project_name: str = ""
    client_id: int | None = None
    client_detail: str = ""
    issue_date: date | None = None
    due_date: date | None = None
    status: str = INVOICE_REGISTERED
    amount_due: Decimal = ZERO_MONEY
    amount_paid: Decimal = ZERO_MONEY
    payment_status: str = PAYMENT_PENDING
    payments: tuple[Payment, ...] = field(default_factory=tuple)
    updated_at: datetime | None = None
    version: int = 1

    def __post_init__(self):
        # Accept loose inputs (ints, floats, ISO strings) and normalise once.
        object.__setattr__(self, "amount_due", to_decimal(self.amount_due))
        object.__setattr__(self, "amount_paid", to_decimal(self.amount_paid))
        object.__setattr__(self, "issue_date", parse_local_date(self.issue_date))
        object.__setattr__(self, "due_date", parse_local_date(self.due_date))
        object.__setattr__(self, "payments", tuple(self.payments))
