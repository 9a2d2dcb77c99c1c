"""
Appointments Forms
"""
from django import forms

from salon.catalog.models import Service
from .models import Appointment


class AppointmentAdminForm(forms.ModelForm):
    """Admin form with services grouped by category in the dropdown"""

    class Meta:
        model = Appointment
        fields = [
            'client',
            'service',
            'professional',
            'start_time',
            'end_time',
            'status',
            'attendance_confirmed',
            'price',
            'payment_status',
            'payment_method',
            'paid_at',
            'notes',
        ]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['service'].choices = self._grouped_service_choices()

    def _grouped_service_choices(self):
        services = Service.objects.select_related('category').order_by('category__name', 'name')

        grouped_choices = [('', 'Select a service...')]
        categories = {}
        for service in services:
            category_name = service.category.name if service.category else 'Other'
            categories.setdefault(category_name, []).append((service.id, service.name))

        for category_name, service_list in sorted(categories.items()):
            grouped_choices.append((category_name, service_list))
        return grouped_choices

    def clean(self):
        cleaned_data = super().clean()
        start = cleaned_data.get('start_time')
        end = cleaned_data.get('end_time')
        if start and end and end <= start:
            raise forms.ValidationError('The appointment must end after it starts.')
        return cleaned_data
