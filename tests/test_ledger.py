"""
Payment ledger: record / edit / delete and the shared status rule.

All tests work on in-memory snapshots; nothing here touches the database.
"""

from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from invoicing.choices import PAYMENT_PAID, PAYMENT_PARTIAL, PAYMENT_PENDING
from invoicing.exceptions import NotFoundError, ValidationError
from invoicing.services.ledger import (
    classify_status,
    delete_payment,
    edit_payment,
    record_payment,
    remaining_balance,
)


def applied(snapshot, result):
    """Fold a LedgerResult back into a snapshot, as the persistence layer would."""
    return replace(
        snapshot,
        payments=result.payments,
        amount_paid=result.amount_paid,
        payment_status=result.payment_status,
    )


class TestClassifyStatus:

    @pytest.mark.parametrize(
        "paid, due, expected",
        [
            ("0", "500.00", PAYMENT_PENDING),
            ("0.01", "500.00", PAYMENT_PENDING),
            ("0.02", "500.00", PAYMENT_PARTIAL),
            ("499.98", "500.00", PAYMENT_PARTIAL),
            ("499.99", "500.00", PAYMENT_PAID),
            ("500.00", "500.00", PAYMENT_PAID),
            ("500.01", "500.00", PAYMENT_PAID),
        ],
    )
    def test_three_way_rule(self, paid, due, expected):
        assert classify_status(Decimal(paid), Decimal(due)) == expected

    def test_exact_payment_is_paid(self):
        assert classify_status(Decimal("123.45"), Decimal("123.45")) == PAYMENT_PAID

    def test_two_cents_short_is_partial(self):
        assert classify_status(Decimal("123.43"), Decimal("123.45")) == PAYMENT_PARTIAL

    def test_nothing_paid_is_pending(self):
        assert classify_status(Decimal("0"), Decimal("123.45")) == PAYMENT_PENDING

    def test_accepts_loose_inputs(self):
        assert classify_status(300, "500") == PAYMENT_PARTIAL
        assert classify_status(None, 0) == PAYMENT_PENDING

    def test_nothing_paid_and_nothing_due_is_pending(self):
        assert classify_status(Decimal("0.00"), Decimal("0.00")) == PAYMENT_PENDING

    def test_any_payment_on_zero_total_is_paid(self):
        assert classify_status(Decimal("5.00"), Decimal("0.00")) == PAYMENT_PAID

    def test_same_inputs_same_answer(self):
        first = classify_status(Decimal("250"), Decimal("500"))
        assert all(classify_status(Decimal("250"), Decimal("500")) == first for _ in range(5))


class TestRecordPayment:

    def test_first_partial_payment(self, make_snapshot):
        invoice = make_snapshot(amount_due="500.00")

        result = record_payment(invoice, Decimal("300"), "2024-01-10")

        assert result.amount_paid == Decimal("300.00")
        assert result.payment_status == PAYMENT_PARTIAL
        assert len(result.payments) == 1
        assert result.payments[0].date == date(2024, 1, 10)
        assert result.payments[0].amount == Decimal("300.00")

    def test_second_payment_settles_invoice(self, make_snapshot):
        invoice = make_snapshot(amount_due="500.00")
        invoice = applied(invoice, record_payment(invoice, Decimal("300"), "2024-01-10"))

        result = record_payment(invoice, Decimal("200"), "2024-01-15")

        assert result.amount_paid == Decimal("500.00")
        assert result.payment_status == PAYMENT_PAID
        assert [p.amount for p in result.payments] == [Decimal("300.00"), Decimal("200.00")]

    def test_payment_on_settled_invoice_is_rejected(self, make_snapshot):
        invoice = make_snapshot(amount_due="500.00")
        invoice = applied(invoice, record_payment(invoice, Decimal("300"), "2024-01-10"))
        invoice = applied(invoice, record_payment(invoice, Decimal("200"), "2024-01-15"))

        with pytest.raises(ValidationError) as exc_info:
            record_payment(invoice, Decimal("50"), "2024-01-20")

        assert exc_info.value.code == "exceeds_remaining_balance"
        # The snapshot is untouched.
        assert invoice.amount_paid == Decimal("500.00")
        assert len(invoice.payments) == 2

    def test_one_cent_of_tolerance(self, make_snapshot):
        invoice = make_snapshot(amount_due="100.00")

        result = record_payment(invoice, Decimal("100.01"), "2024-02-01")

        assert result.amount_paid == Decimal("100.01")
        assert result.payment_status == PAYMENT_PAID

    def test_two_cents_over_is_rejected(self, make_snapshot):
        invoice = make_snapshot(amount_due="100.00")

        with pytest.raises(ValidationError):
            record_payment(invoice, Decimal("100.02"), "2024-02-01")

    def test_zero_balance_invoice_rejects_any_payment(self, make_snapshot):
        invoice = make_snapshot(amount_due="0.00")

        with pytest.raises(ValidationError):
            record_payment(invoice, Decimal("0.01"), "2024-02-01")

    @pytest.mark.parametrize("amount", ["0", "-5", "0.004", "abc", "NaN", "Infinity", None, ""])
    def test_invalid_amounts(self, make_snapshot, amount):
        invoice = make_snapshot(amount_due="100.00")

        with pytest.raises(ValidationError):
            record_payment(invoice, amount, "2024-02-01")

    def test_amount_is_rounded_to_cents(self, make_snapshot):
        invoice = make_snapshot(amount_due="100.00")

        result = record_payment(invoice, "10.005", "2024-02-01")

        assert result.amount_paid == Decimal("10.01")

    def test_invalid_date_is_rejected(self, make_snapshot):
        invoice = make_snapshot(amount_due="100.00")

        with pytest.raises(ValidationError):
            record_payment(invoice, Decimal("10"), "not-a-date")

    def test_note_is_kept(self, make_snapshot):
        invoice = make_snapshot(amount_due="100.00")

        result = record_payment(invoice, Decimal("10"), date(2024, 2, 1), note="Check #1042")

        assert result.payments[0].note == "Check #1042"


class TestEditPayment:

    def test_lowering_a_payment_on_paid_invoice(self, make_snapshot):
        invoice = make_snapshot(
            amount_due="500.00",
            payments=[{"date": "2024-01-10", "amount": "300"}, {"date": "2024-01-15", "amount": "200"}],
        )
        assert remaining_balance(invoice) == Decimal("0.00")

        result = edit_payment(invoice, 1, Decimal("100"), "2024-01-15")

        assert result.amount_paid == Decimal("400.00")
        assert result.payment_status == PAYMENT_PARTIAL
        assert [p.amount for p in result.payments] == [Decimal("300.00"), Decimal("100.00")]

    def test_keeping_the_same_amount_on_paid_invoice(self, make_snapshot):
        invoice = make_snapshot(
            amount_due="500.00",
            payments=[{"date": "2024-01-10", "amount": "300"}, {"date": "2024-01-15", "amount": "200"}],
        )

        result = edit_payment(invoice, 0, Decimal("300"), "2024-01-11", note="corrected date")

        assert result.amount_paid == Decimal("500.00")
        assert result.payment_status == PAYMENT_PAID
        assert result.payments[0].date == date(2024, 1, 11)
        assert result.payments[0].note == "corrected date"

    def test_raising_past_the_rebased_balance_is_rejected(self, make_snapshot):
        invoice = make_snapshot(
            amount_due="500.00",
            payments=[{"date": "2024-01-10", "amount": "300"}],
        )

        # Old 300 added back: 500 available.
        edit_payment(invoice, 0, Decimal("500.01"), "2024-01-10")
        with pytest.raises(ValidationError):
            edit_payment(invoice, 0, Decimal("500.02"), "2024-01-10")

    def test_amount_paid_is_recomputed_from_the_ledger(self, make_snapshot):
        # Stored amount_paid has drifted from the ledger sum.
        invoice = make_snapshot(
            amount_due="500.00",
            payments=[{"date": "2024-01-10", "amount": "100"}, {"date": "2024-01-11", "amount": "100"}],
            amount_paid=Decimal("250.00"),
        )

        result = edit_payment(invoice, 0, Decimal("150"), "2024-01-10")

        assert result.amount_paid == Decimal("250.00")

    def test_order_is_preserved(self, make_snapshot):
        invoice = make_snapshot(
            amount_due="900.00",
            payments=[
                {"date": "2024-01-10", "amount": "100", "note": "a"},
                {"date": "2024-01-11", "amount": "200", "note": "b"},
                {"date": "2024-01-12", "amount": "300", "note": "c"},
            ],
        )

        result = edit_payment(invoice, 1, Decimal("250"), "2024-01-11", note="b2")

        assert [p.note for p in result.payments] == ["a", "b2", "c"]

    @pytest.mark.parametrize("index", [-1, 2, 99, "x", "1", None, 1.9, True])
    def test_bad_index(self, make_snapshot, index):
        invoice = make_snapshot(
            amount_due="500.00",
            payments=[{"date": "2024-01-10", "amount": "100"}, {"date": "2024-01-11", "amount": "100"}],
        )

        with pytest.raises(NotFoundError):
            edit_payment(invoice, index, Decimal("10"), "2024-01-10")


class TestDeletePayment:

    def test_deleting_first_of_two(self, make_snapshot):
        invoice = make_snapshot(
            amount_due="500.00",
            payments=[{"date": "2024-01-10", "amount": "300"}, {"date": "2024-01-15", "amount": "200"}],
        )

        result = delete_payment(invoice, 0)

        assert result.amount_paid == Decimal("200.00")
        assert result.payment_status == PAYMENT_PARTIAL
        assert [p.amount for p in result.payments] == [Decimal("200.00")]

    def test_deleting_last_payment_returns_to_pending(self, make_snapshot):
        invoice = make_snapshot(amount_due="500.00", payments=[{"date": "2024-01-10", "amount": "300"}])

        result = delete_payment(invoice, 0)

        assert result.payments == ()
        assert result.amount_paid == Decimal("0.00")
        assert result.payment_status == PAYMENT_PENDING

    def test_amount_paid_is_clamped_at_zero(self, make_snapshot):
        invoice = make_snapshot(
            amount_due="500.00",
            payments=[{"date": "2024-01-10", "amount": "300"}],
            amount_paid=Decimal("100.00"),
        )

        result = delete_payment(invoice, 0)

        assert result.amount_paid == Decimal("0.00")

    def test_bad_index(self, make_snapshot):
        invoice = make_snapshot(amount_due="500.00")

        with pytest.raises(NotFoundError):
            delete_payment(invoice, 0)

    def test_fractional_index_does_not_pick_a_payment(self, make_snapshot):
        invoice = make_snapshot(
            amount_due="500.00",
            payments=[{"date": "2024-01-10", "amount": "300"}, {"date": "2024-01-15", "amount": "200"}],
        )

        with pytest.raises(NotFoundError):
            delete_payment(invoice, 1.9)


class TestLedgerInvariants:

    def test_amount_paid_tracks_ledger_through_a_sequence(self, make_snapshot):
        invoice = make_snapshot(amount_due="1000.00")
        steps = [
            lambda inv: record_payment(inv, "250.00", "2024-03-01"),
            lambda inv: record_payment(inv, "300.00", "2024-03-02"),
            lambda inv: edit_payment(inv, 0, "400.00", "2024-03-01"),
            lambda inv: record_payment(inv, "300.01", "2024-03-03"),
            lambda inv: delete_payment(inv, 1),
            lambda inv: edit_payment(inv, 1, "0.50", "2024-03-03"),
            lambda inv: delete_payment(inv, 0),
        ]

        for step in steps:
            result = step(invoice)
            invoice = applied(invoice, result)

            ledger_sum = sum((p.amount for p in invoice.payments), Decimal("0"))
            assert abs(invoice.amount_paid - ledger_sum) <= Decimal("0.01")
            assert invoice.amount_paid >= 0
            assert invoice.amount_paid <= invoice.amount_due + Decimal("0.01")
            assert invoice.payment_status == classify_status(invoice.amount_paid, invoice.amount_due)

    def test_rejected_operations_never_push_past_the_total(self, make_snapshot):
        invoice = make_snapshot(amount_due="100.00")
        invoice = applied(invoice, record_payment(invoice, "99.99", "2024-03-01"))

        for amount in ("0.03", "1", "100"):
            with pytest.raises(ValidationError):
                record_payment(invoice, amount, "2024-03-02")

        assert invoice.amount_paid == Decimal("99.99")
