from decimal import Decimal

import pytest
from django.http import QueryDict

from invoicing.templatetags.invoicing_tags import currency, is_negative, payment_badge, query_transform, trend


class TestCurrency:

    @pytest.mark.parametrize(
        "value, expected",
        [(Decimal("1234.5"), "$1,234.50"), ("0", "$0.00"), (-12.3, "-$12.30"), (None, "$0.00")],
    )
    def test_formats(self, value, expected):
        assert currency(value) == expected

    def test_garbage_is_passed_through(self):
        assert currency("n/a") == "n/a"


class TestTrendFilters:

    def test_trend_is_absolute(self):
        assert trend(Decimal("-12.345")) == "12.3%"
        assert trend(50) == "50.0%"

    def test_is_negative(self):
        assert is_negative(Decimal("-0.1"))
        assert not is_negative(0)


def test_payment_badge():
    assert payment_badge("Paid") == "bg-success"
    assert payment_badge("Unknown") == "bg-secondary"


def test_query_transform_keeps_filters():
    query = QueryDict("status=Draft&page=1")

    result = query_transform(query, page=3)

    assert QueryDict(result)["status"] == "Draft"
    assert QueryDict(result)["page"] == "3"
