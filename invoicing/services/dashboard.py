# invoicing/services/dashboard.py
from __future__ import annotations

import logging
from datetime import date

from django.conf import settings
from django.core.cache import cache
from django.utils import timezone

from invoicing.services.aggregation import DashboardSummary, dashboard_summary

logger = logging.getLogger(__name__)


def _version_key(user_id) -> str:
    return f"invoicing:dashboard:version:{user_id}"


def _summary_key(user_id, version, timeframe: str, today: date) -> str:
    return f"invoicing:dashboard:{user_id}:{version}:{timeframe}:{today.isoformat()}"


def _current_version(user_id) -> int:
    return cache.get_or_set(_version_key(user_id), 1, None)


def invalidate_dashboard(user_id) -> None:
    """
    Called whenever one of the user's invoices, clients or projects changes.
    Bumping the version orphans every cached summary for that user.
    """
    key = _version_key(user_id)
    try:
        cache.incr(key)
    except ValueError:
        cache.set(key, 2, None)


def user_invoice_snapshots(user):
    from invoicing.models import Invoice

    return [inv.to_snapshot() for inv in Invoice.objects.filter(user=user).order_by("-issue_date", "-pk")]


def build_dashboard(user, timeframe: str = "6m", today: date | None = None) -> DashboardSummary:
    """
    Recompute the dashboard from the user's full invoice set.
    Cached until the next change to that user's data.
    """
    from invoicing.models import Client, Project

    today = today or timezone.localdate()
    version = _current_version(user.pk)
    key = _summary_key(user.pk, version, timeframe, today)

    summary = cache.get(key)
    if summary is not None:
        return summary

    summary = dashboard_summary(
        user_invoice_snapshots(user),
        today=today,
        timeframe=timeframe,
        total_projects=Project.objects.filter(user=user).count(),
        total_clients=Client.objects.filter(user=user).count(),
        activity_limit=getattr(settings, "INVOICING_RECENT_ACTIVITY_LIMIT", 5),
    )
    cache.set(key, summary, getattr(settings, "INVOICING_DASHBOARD_CACHE_SECONDS", 300))
    logger.debug("Dashboard recomputed for user %s (version %s, %s)", user.pk, version, timeframe)
    return summary
