# invoicing/utils/finance.py
from __future__ import annotations

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from invoicing.exceptions import ValidationError

# Tolerance for comparing money amounts (one cent).
EPSILON = Decimal("0.01")
CENTS = Decimal("0.01")
ZERO_MONEY = Decimal("0.00")

MONTH_LABELS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


def to_decimal(value) -> Decimal:
    """
    Coerce an int / float / str / Decimal amount to Decimal. None and "" are 0.
    Floats go through str() so 0.1 stays 0.1.
    """
    if value is None or value == "":
        return ZERO_MONEY
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    try:
        return Decimal(str(value).strip())
    except InvalidOperation as exc:
        raise ValidationError(f"'{value}' is not a valid amount.", code="invalid_amount") from exc


def quantize_money(value) -> Decimal:
    return to_decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def parse_amount(value) -> Decimal:
    """
    Parse a user-entered payment amount.
    Must be a finite number greater than zero once rounded to cents.
    """
    try:
        amount = to_decimal(value)
    except ValidationError:
        raise ValidationError("Please enter a valid payment amount.", code="invalid_amount")

    if not amount.is_finite():
        raise ValidationError("Please enter a valid payment amount.", code="invalid_amount")

    amount = amount.quantize(CENTS, rounding=ROUND_HALF_UP)
    if amount <= 0:
        raise ValidationError("Payment amount must be greater than zero.", code="non_positive_amount")
    return amount


def parse_local_date(value) -> date | None:
    """
    Interpret an issue/payment date as a local calendar date.

    A bare YYYY-MM-DD is taken as-is (local midnight), so it never slides to
    the previous day in zones behind UTC. Aware datetimes are converted to
    the current timezone before taking the date.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        if timezone.is_aware(value):
            return timezone.localtime(value).date()
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    if "T" not in text and " " not in text:
        try:
            parsed = parse_date(text)
        except ValueError:
            return None
        if parsed is not None:
            return parsed

    try:
        dt = parse_datetime(text)
    except ValueError:
        return None
    if dt is None:
        return None
    if timezone.is_aware(dt):
        return timezone.localtime(dt).date()
    return dt.date()


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    """(2024, 1, -1) -> (2023, 12)"""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def month_label(month: int) -> str:
    return MONTH_LABELS[month - 1]
