# invoicing/services/numbering.py
from __future__ import annotations

import logging
import random
import re

from django.utils import timezone

from invoicing.exceptions import InvoicingError

logger = logging.getLogger(__name__)

INVOICE_NUMBER_RE = re.compile(r"^INV-#(?P<year>\d{4})-(?P<seq>\d{4})$")
MAX_ATTEMPTS = 20


def format_invoice_number(year: int, suffix: int) -> str:
    return f"INV-#{year}-{suffix:04d}"


def generate_invoice_number(user, year: int | None = None, *, rng=None) -> str:
    """
    Returns a display number like INV-#2024-0842.

    The suffix is random (1000-9999), so it is checked against the user's
    existing numbers before being handed out; the (user, invoice_number)
    unique constraint on Invoice catches anything that slips through a race.
    """
    from invoicing.models import Invoice

    year = year or timezone.localdate().year
    rng = rng or random

    taken = set(
        Invoice.objects
        .filter(user=user, invoice_number__startswith=f"INV-#{year}-")
        .values_list("invoice_number", flat=True)
    )

    for _ in range(MAX_ATTEMPTS):
        candidate = format_invoice_number(year, rng.randint(1000, 9999))
        if candidate not in taken:
            return candidate

    logger.error("Could not find a free invoice number for user %s in %s", getattr(user, "pk", user), year)
    raise InvoicingError(f"Could not generate a unique invoice number for {year}; try again.")
