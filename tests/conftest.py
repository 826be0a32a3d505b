"""
Shared fixtures.

Pure calculator tests build InvoiceSnapshot objects directly with
``make_snapshot``; database tests use the model factories below.
"""

from datetime import date
from decimal import Decimal

import pytest
from django.core.cache import cache

from invoicing.choices import INVOICE_REGISTERED
from invoicing.models import Client, CompanyProfile, Invoice, InvoiceItem, Project
from invoicing.services.snapshots import InvoiceSnapshot, Payment
from invoicing.utils.finance import parse_local_date


@pytest.fixture(autouse=True)
def clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def make_snapshot():
    def _make(amount_due="500.00", payments=(), **kwargs):
        payments = tuple(
            p if isinstance(p, Payment) else Payment(
                date=parse_local_date(p.get("date")),
                amount=Decimal(str(p["amount"])),
                note=p.get("note", ""),
            )
            for p in payments
        )
        paid = sum((p.amount for p in payments), Decimal("0.00"))
        kwargs.setdefault("amount_paid", paid)
        kwargs.setdefault("pk", 1)
        kwargs.setdefault("invoice_number", "INV-#2024-0001")
        return InvoiceSnapshot(amount_due=amount_due, payments=payments, **kwargs)

    return _make


@pytest.fixture
def user(django_user_model):
    return django_user_model.objects.create_user(username="owner", password="pw-owner-123")


@pytest.fixture
def other_user(django_user_model):
    return django_user_model.objects.create_user(username="intruder", password="pw-intruder-123")


@pytest.fixture
def make_client():
    def _make(user, name="Acme Corp", **kwargs):
        kwargs.setdefault("email", "billing@acme.test")
        return Client.objects.create(user=user, name=name, **kwargs)

    return _make


@pytest.fixture
def make_project():
    def _make(user, name="Website Redesign", client=None, **kwargs):
        return Project.objects.create(user=user, name=name, client=client, **kwargs)

    return _make


@pytest.fixture
def make_company():
    def _make(user, company_name="Studio North", **kwargs):
        return CompanyProfile.objects.create(user=user, company_name=company_name, **kwargs)

    return _make


@pytest.fixture
def make_invoice():
    """
    Create a saved invoice with one line item per (qty, rate) pair and
    totals already recalculated.
    """

    def _make(user, items=((1, "500.00"),), *, status=INVOICE_REGISTERED, issue_date=None, **kwargs):
        invoice = Invoice.objects.create(
            user=user,
            status=status,
            issue_date=issue_date or date(2024, 1, 5),
            **kwargs,
        )
        for position, (qty, rate) in enumerate(items, start=1):
            InvoiceItem.objects.create(
                invoice=invoice,
                description=f"Line {position}",
                qty=Decimal(str(qty)),
                rate=Decimal(str(rate)),
                position=position,
            )
        invoice.recalculate_totals(save=True)
        return invoice

    return _make
