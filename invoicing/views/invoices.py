# invoicing/views/invoices.py
from __future__ import annotations

import logging

from django.conf import settings
from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.contrib.auth.mixins import LoginRequiredMixin
from django.core.exceptions import ValidationError
from django.db.models import Q
from django.http import HttpRequest, HttpResponse
from django.shortcuts import get_object_or_404, redirect, render
from django.urls import reverse_lazy
from django.views.generic import DeleteView, DetailView, ListView

from ..choices import INVOICE_STATUS_CHOICES, PAYMENT_STATUS_CHOICES
from ..exceptions import InvoicingError
from ..forms.invoices.invoices import InvoiceForm, InvoiceItemFormSet
from ..forms.payments.payments import PaymentDeleteForm, PaymentForm
from ..models import Invoice
from ..services.invoice_pdf import render_invoice_pdf
from ..services.invoices import delete_invoice, save_invoice, status_for_action
from ..services.ledger import remaining_balance

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------
def _require_invoice_owned_by_user(request: HttpRequest, pk: int) -> Invoice:
    return get_object_or_404(
        Invoice.objects.select_related("client", "project", "company"),
        pk=pk,
        user=request.user,
    )


def _add_errors(form, exc: ValidationError) -> None:
    if hasattr(exc, "error_dict"):
        for field, errors in exc.message_dict.items():
            form.add_error(field if field in form.fields else None, errors)
    else:
        form.add_error(None, exc.messages)


# -----------------------------------------------------------------------------
# List
# -----------------------------------------------------------------------------
class InvoiceListView(LoginRequiredMixin, ListView):
    model = Invoice
    template_name = "invoicing/invoices/invoice_list.html"
    context_object_name = "invoices"

    def get_paginate_by(self, queryset):
        return getattr(settings, "INVOICING_INVOICES_PER_PAGE", 7)

    def get_queryset(self):
        qs = (
            Invoice.objects.filter(user=self.request.user)
            .select_related("client", "project")
            .order_by("-issue_date", "-pk")
        )

        status = (self.request.GET.get("status") or "").strip()
        payment_status = (self.request.GET.get("payment_status") or "").strip()
        q = (self.request.GET.get("q") or "").strip()

        if status:
            qs = qs.filter(status=status)
        if payment_status:
            qs = qs.filter(payment_status=payment_status)
        if q:
            qs = qs.filter(
                Q(invoice_number__icontains=q)
                | Q(project_name__icontains=q)
                | Q(client_detail__icontains=q)
                | Q(client__name__icontains=q)
            )
        return qs

    def get_context_data(self, **kwargs):
        ctx = super().get_context_data(**kwargs)
        ctx["current_page"] = "invoices"
        ctx["status_choices"] = INVOICE_STATUS_CHOICES
        ctx["payment_status_choices"] = PAYMENT_STATUS_CHOICES
        ctx["selected_status"] = (self.request.GET.get("status") or "").strip()
        ctx["selected_payment_status"] = (self.request.GET.get("payment_status") or "").strip()
        ctx["q"] = (self.request.GET.get("q") or "").strip()
        return ctx


# -----------------------------------------------------------------------------
# Detail
# -----------------------------------------------------------------------------
class InvoiceDetailView(LoginRequiredMixin, DetailView):
    model = Invoice
    template_name = "invoicing/invoices/invoice_detail.html"
    context_object_name = "invoice"

    def get_object(self, queryset=None):
        return _require_invoice_owned_by_user(self.request, self.kwargs["pk"])

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        invoice: Invoice = context["invoice"]
        snapshot = invoice.to_snapshot()

        context["current_page"] = "invoices"
        context["items"] = invoice.items.all()
        context["payments"] = list(enumerate(snapshot.payments))
        context["remaining"] = remaining_balance(snapshot)
        context["payment_form"] = PaymentForm(initial={"version": invoice.version})
        context["delete_form"] = PaymentDeleteForm(initial={"version": invoice.version})
        return context


# -----------------------------------------------------------------------------
# Create / Update (FBVs for predictable formset handling)
# -----------------------------------------------------------------------------
def _invoice_form_view(request: HttpRequest, invoice: Invoice, *, success_message: str) -> HttpResponse:
    if request.method == "POST":
        form = InvoiceForm(request.POST, instance=invoice, user=request.user)
        items_formset = InvoiceItemFormSet(request.POST, instance=invoice, prefix="items")

        if form.is_valid() and items_formset.is_valid():
            status = status_for_action(request.POST.get("action"), invoice.status)
            try:
                saved = save_invoice(form, items_formset, user=request.user, status=status)
            except ValidationError as exc:
                _add_errors(form, exc)
            except InvoicingError as exc:
                messages.error(request, str(exc))
            else:
                messages.success(request, success_message.format(number=saved.invoice_number))
                return redirect("invoicing:invoice_detail", pk=saved.pk)
    else:
        form = InvoiceForm(instance=invoice, user=request.user)
        items_formset = InvoiceItemFormSet(instance=invoice, prefix="items")

    return render(
        request,
        "invoicing/invoices/invoice_form.html",
        {
            "form": form,
            "items_formset": items_formset,
            "invoice": invoice if invoice.pk else None,
            "current_page": "invoices",
        },
    )


@login_required
def invoice_create(request: HttpRequest) -> HttpResponse:
    return _invoice_form_view(
        request,
        Invoice(user=request.user),
        success_message="Invoice {number} created.",
    )


@login_required
def invoice_update(request: HttpRequest, pk: int) -> HttpResponse:
    invoice = _require_invoice_owned_by_user(request, pk)
    return _invoice_form_view(request, invoice, success_message="Invoice {number} updated.")


# -----------------------------------------------------------------------------
# Delete
# -----------------------------------------------------------------------------
class InvoiceDeleteView(LoginRequiredMixin, DeleteView):
    model = Invoice
    template_name = "invoicing/invoices/invoice_confirm_delete.html"
    success_url = reverse_lazy("invoicing:invoice_list")
    context_object_name = "invoice"

    def get_queryset(self):
        return Invoice.objects.filter(user=self.request.user)

    def form_valid(self, form):
        invoice = self.get_object()
        number = invoice.invoice_number
        delete_invoice(invoice)
        messages.success(self.request, f"Invoice {number} deleted.")
        return redirect(self.success_url)


# -----------------------------------------------------------------------------
# PDF
# -----------------------------------------------------------------------------
@login_required
def invoice_pdf_view(request: HttpRequest, pk: int) -> HttpResponse:
    invoice = _require_invoice_owned_by_user(request, pk)

    try:
        pdf_bytes = render_invoice_pdf(
            invoice,
            base_url=request.build_absolute_uri("/"),
            request=request,
        )
    except Exception:
        logger.exception("PDF render failed for invoice %s", invoice.pk)
        messages.error(request, "Could not generate the PDF for this invoice.")
        return redirect("invoicing:invoice_detail", pk=invoice.pk)

    response = HttpResponse(pdf_bytes, content_type="application/pdf")
    disposition = "attachment" if request.GET.get("download") else "inline"
    response["Content-Disposition"] = f'{disposition}; filename="{invoice.invoice_number}.pdf"'
    return response
