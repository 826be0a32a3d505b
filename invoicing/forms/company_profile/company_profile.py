from django import forms

from ...models import CompanyProfile


class CompanyProfileForm(forms.ModelForm):
    """
    is_default is not edited here; use the "Set as default" action so the
    switch happens atomically.
    """

    class Meta:
        model = CompanyProfile
        fields = [
            "company_name",
            "address",
            "city_state_zip",
            "phone",
            "email",
            "website",
        ]
        labels = {
            "city_state_zip": "City, State ZIP",
        }
        widgets = {
            "company_name": forms.TextInput(attrs={"placeholder": "Enter your company name"}),
            "email": forms.EmailInput(attrs={"placeholder": "contact@company.com"}),
        }

    def clean_company_name(self):
        name = (self.cleaned_data.get("company_name") or "").strip()
        if not name:
            raise forms.ValidationError("Company name is required.")
        return name
