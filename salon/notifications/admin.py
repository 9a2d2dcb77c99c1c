from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from .models import MessageHistory


@admin.register(MessageHistory)
class MessageHistoryAdmin(admin.ModelAdmin):
    list_display = ('sent_at', 'client', 'type', 'channel', 'status', 'provider')
    list_filter = ('status', 'type', 'channel')
    search_fields = ('client__name', 'client__phone', 'content', 'external_id')
    raw_id_fields = ('client', 'appointment')
    readonly_fields = ('sent_at',)
    date_hierarchy = 'sent_at'

    fieldsets = (
        (_('Recipient'), {'fields': ('client', 'appointment')}),
        (_('Message'), {'fields': ('type', 'channel', 'content')}),
        (_('Delivery'), {'fields': ('status', 'sent_at', 'provider', 'external_id', 'error_message')}),
    )
