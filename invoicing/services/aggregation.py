# invoicing/services/aggregation.py
"""
Dashboard and rollup figures derived from a collection of invoices.

Nothing here reads or writes the database: callers pass in the invoices
(InvoiceSnapshot objects, or Invoice rows, which expose the same attributes)
and get plain numbers back. Drafts never count toward money totals.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable

from invoicing.choices import (
    ACTIVITY_INVOICE_PAID,
    ACTIVITY_INVOICE_SENT,
    INVOICE_DRAFT,
    PAYMENT_PAID,
)
from invoicing.utils.finance import ZERO_MONEY, month_label, parse_local_date, shift_month, to_decimal

MIN_MONTHS = 2
MAX_MONTHS = 24
DEFAULT_TIMEFRAME = "6m"
RECENT_ACTIVITY_LIMIT = 5

TIMEFRAME_MONTHS = {
    "1m": 2,   # a single month still needs two points to draw a line
    "3m": 3,
    "6m": 6,
    "1y": 12,
    "all": 24,
}

HUNDRED = Decimal("100")


@dataclass(frozen=True)
class MonthBucket:
    label: str
    year: int
    month: int
    revenue: Decimal = ZERO_MONEY


@dataclass(frozen=True)
class TrendSummary:
    revenue_trend: Decimal
    pending_trend: Decimal
    current_revenue: Decimal
    previous_revenue: Decimal
    current_pending: Decimal
    previous_pending: Decimal


@dataclass(frozen=True)
class ClientRollup:
    total_billed: Decimal
    total_paid: Decimal
    project_count: int
    invoice_count: int


@dataclass(frozen=True)
class ProjectRollup:
    total_billed: Decimal
    total_paid: Decimal
    invoice_count: int


@dataclass(frozen=True)
class ActivityItem:
    invoice_id: int | None
    kind: str
    title: str
    subtitle: str
    timestamp: datetime | None
    amount: Decimal


@dataclass(frozen=True)
class DashboardSummary:
    timeframe: str
    total_revenue: Decimal
    total_pending: Decimal
    revenue_trend: Decimal
    pending_trend: Decimal
    monthly: list[MonthBucket] = field(default_factory=list)
    recent_activity: list[ActivityItem] = field(default_factory=list)
    total_projects: int = 0
    total_clients: int = 0


# -----------------------------------------------------------------------------
# Totals
# -----------------------------------------------------------------------------
def is_billable(invoice) -> bool:
    return invoice.status != INVOICE_DRAFT


def _paid(invoice) -> Decimal:
    return to_decimal(invoice.amount_paid)


def _pending(invoice) -> Decimal:
    return to_decimal(invoice.amount_due) - to_decimal(invoice.amount_paid)


def revenue_totals(invoices: Iterable) -> tuple[Decimal, Decimal]:
    """(total_revenue, total_pending) over non-draft invoices."""
    revenue = ZERO_MONEY
    pending = ZERO_MONEY
    for inv in invoices:
        if not is_billable(inv):
            continue
        revenue += _paid(inv)
        pending += _pending(inv)
    return revenue, pending


# -----------------------------------------------------------------------------
# Monthly series
# -----------------------------------------------------------------------------
def months_for_timeframe(timeframe: str | None) -> int:
    return TIMEFRAME_MONTHS.get((timeframe or "").strip(), TIMEFRAME_MONTHS[DEFAULT_TIMEFRAME])


def month_buckets(months: int, today: date) -> list[MonthBucket]:
    """
    Empty buckets for the last `months` calendar months, oldest first,
    ending with the month containing `today`. Clamped to 2..24.
    """
    months = max(MIN_MONTHS, min(MAX_MONTHS, int(months)))
    buckets = []
    for offset in range(months - 1, -1, -1):
        year, month = shift_month(today.year, today.month, -offset)
        buckets.append(MonthBucket(label=month_label(month), year=year, month=month))
    return buckets


def monthly_revenue(invoices: Iterable, months: int, today: date) -> list[MonthBucket]:
    """
    Paid amounts bucketed by local issue month. Invoices issued outside the
    window, or without an issue date, are skipped.
    """
    buckets = month_buckets(months, today)
    totals = {(b.year, b.month): ZERO_MONEY for b in buckets}

    for inv in invoices:
        if not is_billable(inv):
            continue
        issued = parse_local_date(inv.issue_date)
        if issued is None:
            continue
        key = (issued.year, issued.month)
        if key in totals:
            totals[key] += _paid(inv)

    return [
        MonthBucket(label=b.label, year=b.year, month=b.month, revenue=totals[(b.year, b.month)])
        for b in buckets
    ]


# -----------------------------------------------------------------------------
# Trends
# -----------------------------------------------------------------------------
def calc_trend(current, previous) -> Decimal:
    """
    Percentage change from `previous` to `current`.
    From zero: 100 if anything came in, else 0.
    """
    current = to_decimal(current)
    previous = to_decimal(previous)
    if previous == 0:
        return HUNDRED if current > 0 else Decimal("0")
    return (current - previous) / previous * HUNDRED


def month_over_month(invoices: Iterable, today: date) -> TrendSummary:
    """
    Revenue and pending trend, this calendar month against the previous one.
    Only invoices issued in exactly those two months are considered.
    """
    current_key = (today.year, today.month)
    previous_key = shift_month(today.year, today.month, -1)

    current_revenue = previous_revenue = ZERO_MONEY
    current_pending = previous_pending = ZERO_MONEY

    for inv in invoices:
        if not is_billable(inv):
            continue
        issued = parse_local_date(inv.issue_date)
        if issued is None:
            continue
        key = (issued.year, issued.month)
        if key == current_key:
            current_revenue += _paid(inv)
            current_pending += _pending(inv)
        elif key == previous_key:
            previous_revenue += _paid(inv)
            previous_pending += _pending(inv)

    return TrendSummary(
        revenue_trend=calc_trend(current_revenue, previous_revenue),
        pending_trend=calc_trend(current_pending, previous_pending),
        current_revenue=current_revenue,
        previous_revenue=previous_revenue,
        current_pending=current_pending,
        previous_pending=previous_pending,
    )


# -----------------------------------------------------------------------------
# Rollups
# -----------------------------------------------------------------------------
def _matches(invoice, fk_attr: str, legacy_attr: str, target) -> bool:
    # Stable id first; rows saved before the FK existed fall back to the
    # frozen name string (exact, case-sensitive).
    fk = getattr(invoice, fk_attr, None)
    if fk is not None:
        return fk == target.pk
    return bool(target.name) and (getattr(invoice, legacy_attr, "") or "") == target.name


def invoices_for_client(client, invoices: Iterable) -> list:
    return [
        inv for inv in invoices
        if is_billable(inv) and _matches(inv, "client_id", "client_detail", client)
    ]


def invoices_for_project(project, invoices: Iterable) -> list:
    return [
        inv for inv in invoices
        if is_billable(inv) and _matches(inv, "project_id", "project_name", project)
    ]


def client_rollup(client, invoices: Iterable) -> ClientRollup:
    matched = invoices_for_client(client, invoices)
    project_names = {(inv.project_name or "").strip() for inv in matched}
    project_names.discard("")
    return ClientRollup(
        total_billed=sum((to_decimal(inv.amount_due) for inv in matched), ZERO_MONEY),
        total_paid=sum((_paid(inv) for inv in matched), ZERO_MONEY),
        project_count=len(project_names),
        invoice_count=len(matched),
    )


def project_rollup(project, invoices: Iterable) -> ProjectRollup:
    matched = invoices_for_project(project, invoices)
    return ProjectRollup(
        total_billed=sum((to_decimal(inv.amount_due) for inv in matched), ZERO_MONEY),
        total_paid=sum((_paid(inv) for inv in matched), ZERO_MONEY),
        invoice_count=len(matched),
    )


# -----------------------------------------------------------------------------
# Activity feed
# -----------------------------------------------------------------------------
def recent_activity(invoices: Iterable, limit: int = RECENT_ACTIVITY_LIMIT) -> list[ActivityItem]:
    """
    The `limit` most recently updated invoices, each shown with its current
    payment status. One entry per invoice, not per payment.
    """
    rows = sorted(
        invoices,
        key=lambda inv: (inv.updated_at is not None, inv.updated_at or datetime.min),
        reverse=True,
    )[:limit]

    items = []
    for inv in rows:
        paid = inv.payment_status == PAYMENT_PAID
        amount = to_decimal(inv.amount_due)
        items.append(
            ActivityItem(
                invoice_id=inv.pk,
                kind=ACTIVITY_INVOICE_PAID if paid else ACTIVITY_INVOICE_SENT,
                title=f"Invoice {inv.invoice_number} {'Paid' if paid else 'Updated'}",
                subtitle=f"{inv.project_name or ''} - ${amount:,.2f}",
                timestamp=inv.updated_at,
                amount=amount,
            )
        )
    return items


# -----------------------------------------------------------------------------
# Everything the dashboard shows
# -----------------------------------------------------------------------------
def dashboard_summary(
    invoices: Iterable,
    *,
    today: date,
    timeframe: str = DEFAULT_TIMEFRAME,
    total_projects: int = 0,
    total_clients: int = 0,
    activity_limit: int = RECENT_ACTIVITY_LIMIT,
) -> DashboardSummary:
    invoices = list(invoices)
    total_revenue, total_pending = revenue_totals(invoices)
    trends = month_over_month(invoices, today)

    if timeframe not in TIMEFRAME_MONTHS:
        timeframe = DEFAULT_TIMEFRAME

    return DashboardSummary(
        timeframe=timeframe,
        total_revenue=total_revenue,
        total_pending=total_pending,
        revenue_trend=trends.revenue_trend,
        pending_trend=trends.pending_trend,
        monthly=monthly_revenue(invoices, months_for_timeframe(timeframe), today),
        recent_activity=recent_activity(invoices, activity_limit),
        total_projects=total_projects,
        total_clients=total_clients,
    )
