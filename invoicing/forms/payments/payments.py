from decimal import Decimal

from django import forms
from django.utils import timezone


class PaymentForm(forms.Form):
    """
    Input for recording or editing one payment. Balance checks happen in the
    ledger, not here; `version` carries the invoice version the user saw.
    """

    amount = forms.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal("0.01"),
        widget=forms.NumberInput(attrs={"step": "0.01", "min": "0.01"}),
    )
    date = forms.DateField(widget=forms.DateInput(attrs={"type": "date"}))
    note = forms.CharField(max_length=255, required=False)
    version = forms.IntegerField(widget=forms.HiddenInput, required=False)

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        if not self.is_bound and "date" not in self.initial:
            self.initial["date"] = timezone.localdate()


class PaymentDeleteForm(forms.Form):
    version = forms.IntegerField(widget=forms.HiddenInput, required=False)
