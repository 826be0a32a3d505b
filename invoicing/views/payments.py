# invoicing/views/payments.py
from __future__ import annotations

import logging

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.http import Http404, HttpRequest, HttpResponse
from django.shortcuts import get_object_or_404, redirect, render
from django.views.decorators.http import require_POST

from ..exceptions import NotFoundError, PersistenceError, ValidationError
from ..forms.payments.payments import PaymentDeleteForm, PaymentForm
from ..models import Invoice
from ..services.payments import delete_invoice_payment, edit_invoice_payment, record_invoice_payment

logger = logging.getLogger(__name__)


def _form_errors(form) -> str:
    return " ".join(str(e) for errors in form.errors.values() for e in errors)


def _run(request: HttpRequest, pk: int, operation, success_message: str) -> HttpResponse:
    """
    Execute one ledger operation and turn its failures into flash messages.
    Invoices the user does not own (or that vanished) are a 404.
    """
    try:
        invoice = operation()
    except NotFoundError as exc:
        raise Http404(str(exc)) from exc
    except ValidationError as exc:
        messages.error(request, " ".join(exc.messages))
    except PersistenceError as exc:
        messages.error(request, str(exc))
    else:
        messages.success(request, success_message.format(number=invoice.invoice_number))
    return redirect("invoicing:invoice_detail", pk=pk)


@login_required
@require_POST
def payment_add(request: HttpRequest, pk: int) -> HttpResponse:
    form = PaymentForm(request.POST)
    if not form.is_valid():
        messages.error(request, _form_errors(form) or "Please enter a valid payment amount.")
        return redirect("invoicing:invoice_detail", pk=pk)

    data = form.cleaned_data
    return _run(
        request,
        pk,
        lambda: record_invoice_payment(
            request.user,
            pk,
            data["amount"],
            data["date"],
            data.get("note") or "",
            expected_version=data.get("version"),
        ),
        "Payment recorded on {number}.",
    )


@login_required
def payment_edit(request: HttpRequest, pk: int, index: int) -> HttpResponse:
    invoice = get_object_or_404(Invoice, pk=pk, user=request.user)
    entries = invoice.ledger_entries()
    if index < 0 or index >= len(entries):
        raise Http404("No such payment.")

    if request.method == "POST":
        form = PaymentForm(request.POST)
        if form.is_valid():
            data = form.cleaned_data
            return _run(
                request,
                pk,
                lambda: edit_invoice_payment(
                    request.user,
                    pk,
                    index,
                    data["amount"],
                    data["date"],
                    data.get("note") or "",
                    expected_version=data.get("version"),
                ),
                "Payment updated on {number}.",
            )
    else:
        payment = entries[index]
        form = PaymentForm(
            initial={
                "amount": payment.amount,
                "date": payment.date,
                "note": payment.note,
                "version": invoice.version,
            }
        )

    return render(
        request,
        "invoicing/payments/payment_form.html",
        {"form": form, "invoice": invoice, "index": index, "current_page": "invoices"},
    )


@login_required
@require_POST
def payment_delete(request: HttpRequest, pk: int, index: int) -> HttpResponse:
    form = PaymentDeleteForm(request.POST)
    expected_version = form.cleaned_data.get("version") if form.is_valid() else None
    return _run(
        request,
        pk,
        lambda: delete_invoice_payment(request.user, pk, index, expected_version=expected_version),
        "Payment removed from {number}.",
    )
