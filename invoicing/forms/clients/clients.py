from django import forms

from ...models import Client




class ClientForm(forms.ModelForm):
    class Meta:
        model = Client
        fields = ['name', 'contact', 'email', 'phone', 'address', 'status']
        widgets = {
            'address': forms.Textarea(attrs={'rows': 3}),
        }
