from django.contrib import admin

from .models import Professional


@admin.register(Professional)
class ProfessionalAdmin(admin.ModelAdmin):
    list_display = ('name', 'email', 'phone', 'commission_percent', 'is_active')
    list_filter = ('is_active',)
    search_fields = ('name', 'email', 'phone', 'specialties')
