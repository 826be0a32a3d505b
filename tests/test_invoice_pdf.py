from datetime import date
from decimal import Decimal

import pytest

from invoicing.models import Invoice
from invoicing.services.invoice_pdf import build_render_context, render_invoice_html

pytestmark = pytest.mark.django_db


class TestRenderContext:

    def test_totals_are_precomputed(self, user, make_invoice):
        invoice = make_invoice(user, items=[(2, "75.00"), (1, "10.00")], issue_date=date(2024, 2, 1))
        Invoice.objects.filter(pk=invoice.pk).update(
            amount_paid=Decimal("60.00"),
            payments=[{"date": "2024-02-03", "amount": "60.00", "note": "card"}],
        )
        invoice.refresh_from_db()

        ctx = build_render_context(invoice)

        assert ctx["invoice"]["amount_due"] == Decimal("160.00")
        assert ctx["invoice"]["balance_due"] == Decimal("100.00")
        assert ctx["invoice"]["payment_terms_days"] == 7
        assert [row["line_total"] for row in ctx["items"]] == [Decimal("150.00"), Decimal("10.00")]
        assert ctx["payments"][0].note == "card"

    def test_frozen_issuer_wins(self, user, make_invoice, make_company):
        old = make_company(user, company_name="Old Name Co")
        invoice = make_invoice(user)
        invoice.snapshot_from_profile(old)
        invoice.save()
        old.company_name = "New Name Co"
        old.save()
        old.set_default()

        ctx = build_render_context(invoice)

        assert ctx["issuer"]["company_name"] == "Old Name Co"

    def test_default_profile_fills_missing_issuer(self, user, make_invoice, make_company):
        make_company(user, company_name="Studio North").set_default()
        invoice = make_invoice(user)

        assert build_render_context(invoice)["issuer"]["company_name"] == "Studio North"

    def test_no_profile_at_all(self, user, make_invoice):
        assert build_render_context(make_invoice(user))["issuer"] == {}

    def test_html_mentions_number_and_balance(self, user, make_invoice):
        invoice = make_invoice(user, items=[(1, "1234.50")])

        html = render_invoice_html(invoice)

        assert invoice.invoice_number in html
        assert "$1,234.50" in html
