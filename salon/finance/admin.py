from django.contrib import admin

from .models import CashSession, Payable, Receivable


@admin.register(Receivable)
class ReceivableAdmin(admin.ModelAdmin):
    list_display = ('description', 'client_name', 'amount', 'due_date', 'status', 'payment_method', 'paid_at')
    list_filter = ('status', 'payment_method', 'due_date')
    search_fields = ('description', 'client_name', 'service_name')
    raw_id_fields = ('appointment', 'client')
    date_hierarchy = 'due_date'


@admin.register(Payable)
class PayableAdmin(admin.ModelAdmin):
    list_display = ('description', 'category', 'amount', 'due_date', 'status', 'paid_at')
    list_filter = ('status', 'category')
    search_fields = ('description',)


@admin.register(CashSession)
class CashSessionAdmin(admin.ModelAdmin):
    list_display = ('opened_at', 'opened_by', 'opening_amount', 'closed_at', 'closed_by', 'closing_amount', 'status')
    list_filter = ('status',)
    readonly_fields = ('opened_at',)
