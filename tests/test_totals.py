from datetime import date
from decimal import Decimal
from types import SimpleNamespace

import pytest
from django.test import override_settings

from invoicing.exceptions import ValidationError
from invoicing.services.totals import compute_totals, default_due_date


class TestComputeTotals:

    def test_sums_lines(self):
        totals = compute_totals([
            {"qty": "2", "rate": "150.00"},
            {"qty": "1.5", "rate": "80"},
        ])

        assert totals.subtotal == Decimal("420.00")
        assert totals.tax == Decimal("0.00")
        assert totals.amount_due == Decimal("420.00")

    def test_accepts_objects(self):
        items = [SimpleNamespace(qty=Decimal("3"), rate=Decimal("33.333"))]

        totals = compute_totals(items)

        assert totals.subtotal == Decimal("100.00")

    def test_no_items(self):
        assert compute_totals([]).amount_due == Decimal("0.00")

    def test_negative_values_are_rejected(self):
        with pytest.raises(ValidationError):
            compute_totals([{"qty": "-1", "rate": "10"}])


class TestDefaultDueDate:

    def test_net_seven_by_default(self):
        assert default_due_date(date(2024, 1, 28)) == date(2024, 2, 4)

    @override_settings(INVOICING_DEFAULT_NET_DAYS=30)
    def test_configurable(self):
        assert default_due_date(date(2024, 1, 1)) == date(2024, 1, 31)
