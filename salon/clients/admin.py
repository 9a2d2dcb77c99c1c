from django.contrib import admin

from .models import Client


@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    list_display = ('name', 'phone', 'email', 'birth_date', 'accepts_messages')
    list_filter = ('accepts_messages',)
    search_fields = ('name', 'phone', 'email')
