# invoicing/services/totals.py
from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, NamedTuple

from django.conf import settings

from invoicing.exceptions import ValidationError
from invoicing.utils.finance import ZERO_MONEY, quantize_money, to_decimal

# Flat rate; there is no tax engine.
TAX_RATE = Decimal("0")


class InvoiceTotals(NamedTuple):
    subtotal: Decimal
    tax: Decimal
    amount_due: Decimal


def _item_value(item, name):
    if isinstance(item, dict):
        return item.get(name)
    return getattr(item, name, None)


def compute_totals(items: Iterable) -> InvoiceTotals:
    """
    subtotal = sum(qty * rate), tax = subtotal * TAX_RATE, amount_due = subtotal + tax.

    `items` may be model instances or dicts with qty / rate.
    The three numbers are always produced together.
    """
    subtotal = ZERO_MONEY
    for item in items:
        qty = to_decimal(_item_value(item, "qty"))
        rate = to_decimal(_item_value(item, "rate"))
        if qty < 0 or rate < 0:
            raise ValidationError("Quantity and rate cannot be negative.", code="negative_line_item")
        subtotal += qty * rate

    subtotal = quantize_money(subtotal)
    tax = quantize_money(subtotal * TAX_RATE)
    return InvoiceTotals(subtotal=subtotal, tax=tax, amount_due=subtotal + tax)


def default_due_date(issue_date: date) -> date:
    net_days = getattr(settings, "INVOICING_DEFAULT_NET_DAYS", 7)
    return issue_date + timedelta(days=net_days)
