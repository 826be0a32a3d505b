from django import forms

from ...models import Client, Project




class ProjectForm(forms.ModelForm):
    class Meta:
        model = Project
        fields = ['name', 'description', 'client', 'status']
        widgets = {
            'description': forms.Textarea(attrs={'rows': 3}),
        }

    def __init__(self, *args, user=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['client'].required = False
        if user is not None:
            self.fields['client'].queryset = Client.objects.filter(user=user).order_by('name')
