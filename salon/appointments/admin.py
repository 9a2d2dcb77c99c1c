from django.contrib import admin

from .forms import AppointmentAdminForm
from .models import Appointment


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    form = AppointmentAdminForm
    list_display = ('start_time', 'end_time', 'client', 'service', 'professional', 'status', 'payment_status')
    list_filter = ('status', 'payment_status', 'professional', 'service')
    search_fields = ('client__name', 'client__phone', 'service__name')
    raw_id_fields = ('client',)
    date_hierarchy = 'start_time'
