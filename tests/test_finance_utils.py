"""Money and date helpers."""

from datetime import date, datetime, timezone as dt_timezone
from decimal import Decimal

import pytest
from django.test import override_settings

from invoicing.exceptions import ValidationError
from invoicing.utils.finance import (
    month_label,
    parse_amount,
    parse_local_date,
    quantize_money,
    shift_month,
    to_decimal,
)


class TestToDecimal:

    def test_float_goes_through_str(self):
        assert to_decimal(0.1) == Decimal("0.1")

    def test_blank_is_zero(self):
        assert to_decimal(None) == Decimal("0")
        assert to_decimal("") == Decimal("0")

    def test_strings_are_stripped(self):
        assert to_decimal(" 12.50 ") == Decimal("12.50")

    def test_garbage_raises(self):
        with pytest.raises(ValidationError):
            to_decimal("twelve")


class TestQuantizeMoney:

    @pytest.mark.parametrize(
        "value, expected",
        [("1.005", "1.01"), ("1.004", "1.00"), ("2", "2.00"), (2.675, "2.68")],
    )
    def test_half_up(self, value, expected):
        assert quantize_money(value) == Decimal(expected)


class TestParseAmount:

    def test_valid(self):
        assert parse_amount("99.99") == Decimal("99.99")

    def test_message_for_non_numeric(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_amount("1,000")
        assert exc_info.value.messages == ["Please enter a valid payment amount."]

    def test_message_for_non_positive(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_amount("-1")
        assert exc_info.value.messages == ["Payment amount must be greater than zero."]


class TestParseLocalDate:

    def test_bare_date(self):
        assert parse_local_date("2024-03-01") == date(2024, 3, 1)

    def test_date_passthrough(self):
        assert parse_local_date(date(2024, 3, 1)) == date(2024, 3, 1)

    @override_settings(TIME_ZONE="America/New_York")
    def test_aware_datetime_uses_local_zone(self):
        # 02:00 UTC on the 1st is still the evening of Feb 29 in New York.
        value = datetime(2024, 3, 1, 2, 0, tzinfo=dt_timezone.utc)
        assert parse_local_date(value) == date(2024, 2, 29)

    @override_settings(TIME_ZONE="America/New_York")
    def test_bare_date_never_slides_back(self):
        assert parse_local_date("2024-03-01") == date(2024, 3, 1)

    def test_iso_datetime_string(self):
        assert parse_local_date("2024-03-01T09:30:00") == date(2024, 3, 1)

    @pytest.mark.parametrize("value", [None, "", "yesterday", "2024-13-40"])
    def test_unparseable(self, value):
        assert parse_local_date(value) is None


class TestMonths:

    @pytest.mark.parametrize(
        "year, month, delta, expected",
        [
            (2024, 1, -1, (2023, 12)),
            (2024, 3, -14, (2023, 1)),
            (2023, 12, 1, (2024, 1)),
            (2024, 6, 0, (2024, 6)),
        ],
    )
    def test_shift_month(self, year, month, delta, expected):
        assert shift_month(year, month, delta) == expected

    def test_month_label(self):
        assert month_label(1) == "Jan"
        assert month_label(12) == "Dec"
