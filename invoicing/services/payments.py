# invoicing/services/payments.py
"""
Write-through for payment ledger changes.

Each call reads the invoice, runs the pure ledger function, and writes back
{payments, amount_paid, payment_status, updated_at} in one transaction.
The write is a compare-and-swap on Invoice.version, so two people editing
the same invoice's payments cannot silently overwrite each other.
Nothing is retried; failures go back to the caller as-is.
"""
from __future__ import annotations

import logging

from django.db import DatabaseError, transaction
from django.db.models import F
from django.utils import timezone

from invoicing.exceptions import ConcurrentUpdateError, NotFoundError, PersistenceError
from invoicing.models import Invoice
from invoicing.services import ledger
from invoicing.signals import ledger_updated

logger = logging.getLogger(__name__)


def _apply(user, invoice_id, operation: str, compute, expected_version=None) -> Invoice:
    try:
        with transaction.atomic():
            invoice = (
                Invoice.objects
                .select_for_update()
                .filter(pk=invoice_id, user=user)
                .first()
            )
            if invoice is None:
                raise NotFoundError(f"Invoice {invoice_id} does not exist.")

            if expected_version is not None and int(expected_version) != invoice.version:
                raise ConcurrentUpdateError(invoice.pk, expected_version, invoice.version)

            result = compute(invoice.to_snapshot())

            written = (
                Invoice.objects
                .filter(pk=invoice.pk, version=invoice.version)
                .update(
                    payments=result.payments_as_dicts(),
                    amount_paid=result.amount_paid,
                    payment_status=result.payment_status,
                    updated_at=timezone.now(),
                    version=F("version") + 1,
                )
            )
            if written != 1:
                raise ConcurrentUpdateError(invoice.pk, invoice.version)

            invoice.refresh_from_db()
    except DatabaseError as exc:
        logger.exception("Saving %s on invoice %s failed", operation, invoice_id)
        raise PersistenceError(f"Could not save the payment change on invoice {invoice_id}.") from exc

    logger.info(
        "%s on invoice %s: paid %s of %s, status %s",
        operation, invoice.invoice_number, invoice.amount_paid, invoice.amount_due, invoice.payment_status,
    )
    ledger_updated.send(sender=Invoice, invoice=invoice, operation=operation)
    return invoice


def record_invoice_payment(user, invoice_id, amount, date, note: str = "", expected_version=None) -> Invoice:
    return _apply(
        user,
        invoice_id,
        "record_payment",
        lambda snap: ledger.record_payment(snap, amount, date, note),
        expected_version=expected_version,
    )


def edit_invoice_payment(user, invoice_id, index, amount, date, note: str = "", expected_version=None) -> Invoice:
    return _apply(
        user,
        invoice_id,
        "edit_payment",
        lambda snap: ledger.edit_payment(snap, index, amount, date, note),
        expected_version=expected_version,
    )


def delete_invoice_payment(user, invoice_id, index, expected_version=None) -> Invoice:
    return _apply(
        user,
        invoice_id,
        "delete_payment",
        lambda snap: ledger.delete_payment(snap, index),
        expected_version=expected_version,
    )
