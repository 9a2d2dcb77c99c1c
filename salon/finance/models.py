from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from .payments import PaymentMethod


class ReceivableQuerySet(models.QuerySet):
    def pending(self):
        return self.filter(status=Receivable.STATUS_PENDING)

    def overdue(self, as_of=None):
        """Pending receivables whose due date is before `as_of`"""
        as_of = as_of or timezone.localdate()
        return self.filter(status=Receivable.STATUS_PENDING, due_date__lt=as_of)


class Receivable(models.Model):
    STATUS_PENDING = 'pending'
    STATUS_PAID = 'paid'
    STATUS_CHOICES = [
        (STATUS_PENDING, _('Pending')),
        (STATUS_PAID, _('Paid')),
    ]

    appointment = models.ForeignKey(
        'appointments.Appointment',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='receivables',
    )
    client = models.ForeignKey(
        'clients.Client',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='receivables',
    )
    client_name = models.CharField(_('Client'), max_length=120, blank=True)
    service_name = models.CharField(_('Service'), max_length=120, blank=True)
    description = models.CharField(_('Description'), max_length=255, blank=True)

    amount = models.DecimalField(_('Amount'), max_digits=10, decimal_places=2)
    service_date = models.DateField(_('Service date'), null=True, blank=True)
    due_date = models.DateField(_('Due date'))
    status = models.CharField(_('Status'), max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING)
    payment_method = models.CharField(
        _('Payment method'), max_length=16, choices=PaymentMethod.choices, blank=True
    )
    paid_at = models.DateTimeField(_('Paid at'), null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ReceivableQuerySet.as_manager()

    class Meta:
        db_table = 'financial_receivables'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', 'due_date'], name='receivable_status_due_idx'),
            models.Index(fields=['appointment'], name='receivable_appointment_idx'),
        ]

    def __str__(self):
        return f'{self.description or self.client_name} - {self.amount} ({self.status})'


class Payable(models.Model):
    STATUS_PENDING = 'pending'
    STATUS_PAID = 'paid'
    STATUS_CHOICES = [
        (STATUS_PENDING, _('Pending')),
        (STATUS_PAID, _('Paid')),
    ]

    description = models.CharField(_('Description'), max_length=255)
    category = models.CharField(_('Category'), max_length=60, default='General')
    amount = models.DecimalField(_('Amount'), max_digits=10, decimal_places=2)
    due_date = models.DateField(_('Due date'))
    status = models.CharField(_('Status'), max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING)
    paid_at = models.DateTimeField(_('Paid at'), null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'financial_payables'
        ordering = ['-created_at']

    def __str__(self):
        return f'{self.description} - {self.amount} ({self.status})'


class CashSession(models.Model):
    STATUS_OPEN = 'open'
    STATUS_CLOSED = 'closed'
    STATUS_CHOICES = [
        (STATUS_OPEN, _('Open')),
        (STATUS_CLOSED, _('Closed')),
    ]

    opening_amount = models.DecimalField(_('Opening amount'), max_digits=10, decimal_places=2)
    closing_amount = models.DecimalField(
        _('Closing amount'), max_digits=10, decimal_places=2, null=True, blank=True
    )
    opened_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name='cash_sessions_opened',
    )
    closed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='cash_sessions_closed',
    )
    opened_at = models.DateTimeField(_('Opened at'), default=timezone.now)
    closed_at = models.DateTimeField(_('Closed at'), null=True, blank=True)
    status = models.CharField(_('Status'), max_length=8, choices=STATUS_CHOICES, default=STATUS_OPEN)

    class Meta:
        db_table = 'cash_sessions'
        ordering = ['-opened_at']
        constraints = [
            # At most one open session at a time
            models.UniqueConstraint(
                fields=['status'],
                condition=Q(status='open'),
                name='single_open_cash_session',
            ),
        ]

    def __str__(self):
        return f'Cash session {self.opened_at:%d/%m/%Y %H:%M} ({self.status})'
