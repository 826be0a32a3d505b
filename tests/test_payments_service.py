"""
Persisted ledger writes: the (payments, amount_paid, payment_status) triple
is written together, guarded by the invoice version.
"""

from datetime import date
from decimal import Decimal

import pytest
from django.db import DatabaseError
from django.db.models import F

from invoicing.choices import PAYMENT_PAID, PAYMENT_PARTIAL, PAYMENT_PENDING
from invoicing.exceptions import ConcurrentUpdateError, NotFoundError, PersistenceError, ValidationError
from invoicing.models import Invoice
from invoicing.services import ledger
from invoicing.services.payments import (
    _apply,
    delete_invoice_payment,
    edit_invoice_payment,
    record_invoice_payment,
)
from invoicing.signals import ledger_updated

pytestmark = pytest.mark.django_db


@pytest.fixture
def invoice(user, make_invoice):
    return make_invoice(user, items=[(1, "500.00")])


class TestRecordInvoicePayment:

    def test_writes_triple_and_bumps_version(self, user, invoice):
        updated = record_invoice_payment(user, invoice.pk, Decimal("300"), date(2024, 1, 10), "deposit")

        row = Invoice.objects.get(pk=invoice.pk)
        assert row.amount_paid == Decimal("300.00")
        assert row.payment_status == PAYMENT_PARTIAL
        assert row.payments == [{"date": "2024-01-10", "amount": "300.00", "note": "deposit"}]
        assert row.version == invoice.version + 1
        assert updated.version == row.version

    def test_full_settlement(self, user, invoice):
        record_invoice_payment(user, invoice.pk, "300", "2024-01-10")
        updated = record_invoice_payment(user, invoice.pk, "200", "2024-01-15")

        assert updated.amount_paid == Decimal("500.00")
        assert updated.payment_status == PAYMENT_PAID

    def test_rejected_payment_changes_nothing(self, user, invoice):
        record_invoice_payment(user, invoice.pk, "500", "2024-01-10")
        before = Invoice.objects.get(pk=invoice.pk)

        with pytest.raises(ValidationError):
            record_invoice_payment(user, invoice.pk, "50", "2024-01-11")

        after = Invoice.objects.get(pk=invoice.pk)
        assert after.version == before.version
        assert after.payments == before.payments
        assert after.amount_paid == Decimal("500.00")

    def test_other_users_invoice_is_not_found(self, other_user, invoice):
        with pytest.raises(NotFoundError):
            record_invoice_payment(other_user, invoice.pk, "10", "2024-01-10")

    def test_missing_invoice_is_not_found(self, user):
        with pytest.raises(NotFoundError):
            record_invoice_payment(user, 999999, "10", "2024-01-10")

    def test_sends_ledger_updated(self, user, invoice):
        received = []

        def listener(sender, invoice, operation, **kwargs):
            received.append((invoice.pk, operation))

        ledger_updated.connect(listener)
        try:
            record_invoice_payment(user, invoice.pk, "10", "2024-01-10")
        finally:
            ledger_updated.disconnect(listener)

        assert received == [(invoice.pk, "record_payment")]


class TestEditAndDelete:

    def test_edit_then_delete(self, user, invoice):
        record_invoice_payment(user, invoice.pk, "300", "2024-01-10")
        record_invoice_payment(user, invoice.pk, "200", "2024-01-15")

        edited = edit_invoice_payment(user, invoice.pk, 1, "100", "2024-01-15")
        assert edited.amount_paid == Decimal("400.00")
        assert edited.payment_status == PAYMENT_PARTIAL

        deleted = delete_invoice_payment(user, invoice.pk, 0)
        assert deleted.amount_paid == Decimal("100.00")
        assert [p["amount"] for p in deleted.payments] == ["100.00"]

        emptied = delete_invoice_payment(user, invoice.pk, 0)
        assert emptied.amount_paid == Decimal("0.00")
        assert emptied.payment_status == PAYMENT_PENDING
        assert emptied.payments == []

    def test_bad_index(self, user, invoice):
        with pytest.raises(NotFoundError):
            delete_invoice_payment(user, invoice.pk, 0)


class TestConcurrency:

    def test_stale_expected_version_is_refused(self, user, invoice):
        seen_version = invoice.version
        record_invoice_payment(user, invoice.pk, "100", "2024-01-10", expected_version=seen_version)

        with pytest.raises(ConcurrentUpdateError) as exc_info:
            record_invoice_payment(user, invoice.pk, "100", "2024-01-11", expected_version=seen_version)

        assert exc_info.value.expected_version == seen_version
        assert Invoice.objects.get(pk=invoice.pk).amount_paid == Decimal("100.00")

    def test_write_loses_race(self, user, invoice):
        def compute_while_someone_else_writes(snapshot):
            Invoice.objects.filter(pk=snapshot.pk).update(version=F("version") + 1)
            return ledger.record_payment(snapshot, "10", "2024-01-10")

        with pytest.raises(ConcurrentUpdateError):
            _apply(user, invoice.pk, "record_payment", compute_while_someone_else_writes)

        row = Invoice.objects.get(pk=invoice.pk)
        assert row.payments == []
        assert row.version == invoice.version

    def test_database_failure_becomes_persistence_error(self, user, invoice, monkeypatch):
        def broken_refresh(self, *args, **kwargs):
            raise DatabaseError("connection lost")

        monkeypatch.setattr(Invoice, "refresh_from_db", broken_refresh)

        with pytest.raises(PersistenceError):
            record_invoice_payment(user, invoice.pk, "10", "2024-01-10")

        monkeypatch.undo()
        row = Invoice.objects.get(pk=invoice.pk)
        assert row.payments == []
        assert row.amount_paid == Decimal("0.00")
