from django import forms

from .models import Service


class ServiceForm(forms.ModelForm):
    class Meta:
        model = Service
        fields = ['name', 'category', 'price', 'duration_minutes', 'notes', 'is_active']

    def clean_duration_minutes(self):
        duration = self.cleaned_data['duration_minutes']
        if duration == 0:
            raise forms.ValidationError('Duration must be at least one minute.')
        return duration
