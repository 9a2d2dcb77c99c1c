from django import forms

from .models import Professional


class ProfessionalForm(forms.ModelForm):
    class Meta:
        model = Professional
        fields = ['name', 'email', 'phone', 'specialties', 'commission_percent', 'is_active']

    def clean_name(self):
        name = self.cleaned_data['name'].strip()
        if not name:
            raise forms.ValidationError("Enter the professional's name.")
        return name

    def clean_specialties(self):
        value = self.cleaned_data.get('specialties') or ''
        return ', '.join(s.strip() for s in value.split(',') if s.strip())
