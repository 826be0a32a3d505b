# invoicing/forms/invoices/invoices.py

from __future__ import annotations

from django import forms
from django.core.exceptions import ValidationError
from django.forms import BaseInlineFormSet, ModelChoiceField, inlineformset_factory

from invoicing.models import Client, CompanyProfile, Invoice, InvoiceItem, Project


# -----------------------------------------------------------------------------
# Choice fields
# -----------------------------------------------------------------------------
class ClientChoiceField(ModelChoiceField):
    """
    Purely controls how each Client appears in the <select>.
    Does NOT affect what gets saved.
    """

    def label_from_instance(self, obj):
        name = (getattr(obj, "name", "") or "").strip()
        return name or "Unnamed Client"


# -----------------------------------------------------------------------------
# Invoice header form
# -----------------------------------------------------------------------------
class InvoiceForm(forms.ModelForm):
    client = ClientChoiceField(queryset=Client.objects.none())

    class Meta:
        model = Invoice
        fields = [
            "client",
            "project",
            "project_name",
            "company",
            "issue_date",
            "due_date",
        ]
        labels = {
            "company": "Issuing company",
            "project_name": "Project / description",
        }
        widgets = {
            "issue_date": forms.DateInput(attrs={"type": "date"}),
            "due_date": forms.DateInput(attrs={"type": "date"}),
        }

    def __init__(self, *args, user=None, **kwargs):
        super().__init__(*args, **kwargs)

        self.fields["project"].required = False
        self.fields["project_name"].required = False
        self.fields["company"].required = False
        self.fields["due_date"].required = False
        self.fields["due_date"].help_text = "Leave blank for the default payment terms."

        # Scope dropdowns by owner
        if user is not None:
            self.fields["client"].queryset = Client.objects.filter(user=user).order_by("name")
            self.fields["project"].queryset = Project.objects.filter(user=user).order_by("name")
            self.fields["company"].queryset = (
                CompanyProfile.objects.filter(user=user).order_by("-is_default", "company_name")
            )

    def clean(self):
        cleaned = super().clean()

        # If a project is picked and no description typed, use the project's name.
        project = cleaned.get("project")
        if project and not (cleaned.get("project_name") or "").strip():
            cleaned["project_name"] = project.name

        issue_date = cleaned.get("issue_date")
        due_date = cleaned.get("due_date")
        if issue_date and due_date and due_date < issue_date:
            self.add_error("due_date", "Due date cannot be before the issue date.")

        return cleaned


# -----------------------------------------------------------------------------
# Line items
# -----------------------------------------------------------------------------
class InvoiceItemForm(forms.ModelForm):
    class Meta:
        model = InvoiceItem
        fields = ["description", "qty", "rate"]
        widgets = {
            "description": forms.TextInput(attrs={"class": "form-control"}),
            "qty": forms.NumberInput(attrs={"class": "form-control", "step": "0.01", "min": "0"}),
            "rate": forms.NumberInput(attrs={"class": "form-control", "step": "0.01", "min": "0"}),
        }


class BaseInvoiceItemFormSet(BaseInlineFormSet):
    """
    Requires at least one meaningful (non-deleted) line item.
    """

    def clean(self):
        super().clean()
        if any(self.errors):
            return

        has_item = False
        for form in self.forms:
            if not hasattr(form, "cleaned_data"):
                continue
            if form.cleaned_data.get("DELETE"):
                continue
            if (form.cleaned_data.get("description") or "").strip():
                has_item = True
                break

        if not has_item:
            raise ValidationError("Add at least one line item.")


InvoiceItemFormSet = inlineformset_factory(
    parent_model=Invoice,
    model=InvoiceItem,
    form=InvoiceItemForm,
    formset=BaseInvoiceItemFormSet,
    extra=1,
    can_delete=True,
)
