from __future__ import annotations

from django.template.loader import render_to_string

from invoicing.models import CompanyProfile, Invoice

PDF_TEMPLATE = "invoicing/invoices/invoice_pdf.html"


def _issuer_for(invoice: Invoice) -> dict:
    """
    The frozen snapshot wins; invoices saved before a company existed fall
    back to the user's current default profile.
    """
    if invoice.has_from_snapshot():
        return invoice.issuer_snapshot()

    profile = CompanyProfile.get_default(invoice.user)
    if profile is None:
        return {}
    return {
        "company_name": profile.company_name,
        "address": profile.address,
        "city_state_zip": profile.city_state_zip,
        "phone": profile.phone,
        "email": profile.email,
        "website": profile.website,
    }


def build_render_context(invoice: Invoice) -> dict:
    """
    Everything needed to print the invoice, already computed.
    Templates should not do arithmetic.
    """
    items = [
        {
            "description": item.description,
            "qty": item.qty,
            "rate": item.rate,
            "line_total": item.line_total,
        }
        for item in invoice.items.all()
    ]
    return {
        "invoice": {
            "pk": invoice.pk,
            "invoice_number": invoice.invoice_number,
            "project_name": invoice.project_name,
            "client_detail": invoice.client_detail,
            "client_contact": invoice.client_contact,
            "client_address": invoice.client_address,
            "issue_date": invoice.issue_date,
            "due_date": invoice.due_date,
            "status": invoice.status,
            "payment_status": invoice.payment_status,
            "subtotal": invoice.subtotal,
            "tax": invoice.tax,
            "amount_due": invoice.amount_due,
            "amount_paid": invoice.amount_paid,
            "balance_due": invoice.balance_due,
            "payment_terms_days": invoice.payment_terms_days,
        },
        "items": items,
        "payments": invoice.ledger_entries(),
        "issuer": _issuer_for(invoice),
    }


def render_invoice_html(invoice: Invoice, request=None) -> str:
    return render_to_string(PDF_TEMPLATE, build_render_context(invoice), request=request)


def render_invoice_pdf(invoice: Invoice, *, base_url: str | None = None, request=None) -> bytes:
    # WeasyPrint loads Pango/cairo on import; only pay for that when printing.
    from weasyprint import HTML

    html = render_invoice_html(invoice, request=request)
    return HTML(string=html, base_url=base_url).write_pdf()
