# invoicing/services/invoices.py
from __future__ import annotations

import logging

from django.db import DatabaseError, transaction
from django.db.models import Max

from invoicing.choices import INVOICE_DRAFT, INVOICE_REGISTERED
from invoicing.exceptions import PersistenceError
from invoicing.models import CompanyProfile, Invoice

logger = logging.getLogger(__name__)

SAVE_ACTIONS = {
    "save_draft": INVOICE_DRAFT,
    "register": INVOICE_REGISTERED,
}


def default_company(user) -> CompanyProfile | None:
    return CompanyProfile.get_default(user)


def status_for_action(action: str | None, current: str | None = None) -> str:
    """Map the submit button that was pressed to a lifecycle status."""
    if action in SAVE_ACTIONS:
        return SAVE_ACTIONS[action]
    return current or INVOICE_DRAFT


def save_invoice(form, items_formset, *, user, status: str) -> Invoice:
    """
    Create or update an invoice from a validated header form and items formset.

    Client and project details are copied in when the invoice is created or
    the selection changes. The issuer block is re-frozen while the invoice is
    a draft, and afterwards only when the issuing company is switched.
    Totals are recomputed from the saved items in the same transaction.
    Database failures come back as PersistenceError with nothing written.
    """
    try:
        with transaction.atomic():
            invoice: Invoice = form.save(commit=False)
            adding = invoice._state.adding
            invoice.user = user
            invoice.status = status

            client = form.cleaned_data.get("client")
            if adding or "client" in form.changed_data:
                invoice.snapshot_from_client(client)

            company = form.cleaned_data.get("company") or invoice.company or default_company(user)
            invoice.snapshot_from_profile(company, overwrite=(status == INVOICE_DRAFT))

            invoice.save()

            items_formset.instance = invoice
            next_position = (invoice.items.aggregate(m=Max("position"))["m"] or 0) + 1
            items = items_formset.save(commit=False)
            for item in items:
                item.invoice = invoice
                if item.pk is None:
                    item.position = next_position
                    next_position += 1
                item.save()
            for item in items_formset.deleted_objects:
                item.delete()

            totals = invoice.recalculate_totals(save=True)
    except DatabaseError as exc:
        logger.exception("Saving invoice %s for user %s failed", form.instance.invoice_number, user.pk)
        raise PersistenceError("Could not save the invoice. Please try again.") from exc

    logger.info(
        "Saved invoice %s (%s) for user %s: amount due %s",
        invoice.invoice_number, invoice.status, user.pk, totals.amount_due,
    )
    return invoice


def delete_invoice(invoice: Invoice) -> None:
    number = invoice.invoice_number
    invoice.delete()
    logger.info("Deleted invoice %s", number)

