from django import forms

from .models import Client


class ClientForm(forms.ModelForm):
    class Meta:
        model = Client
        fields = ['name', 'phone', 'email', 'birth_date', 'notes', 'accepts_messages']

    def clean_name(self):
        return self.cleaned_data['name'].strip()
