from django.db import models
from django.utils.translation import gettext_lazy as _

from salon.finance.payments import PaymentMethod


class Appointment(models.Model):
    STATUS_SCHEDULED = 'scheduled'
    STATUS_CONFIRMED = 'confirmed'
    STATUS_RESCHEDULED = 'rescheduled'
    STATUS_CANCELLED = 'cancelled'
    STATUS_COMPLETED = 'completed'
    STATUS_NO_SHOW = 'no_show'
    STATUS_CHOICES = [
        (STATUS_SCHEDULED, _('Scheduled')),
        (STATUS_CONFIRMED, _('Confirmed')),
        (STATUS_RESCHEDULED, _('Rescheduled')),
        (STATUS_CANCELLED, _('Cancelled')),
        (STATUS_COMPLETED, _('Completed')),
        (STATUS_NO_SHOW, _('No show')),
    ]
    # Statuses an appointment can still be attended from
    ACTIVE_STATUSES = (STATUS_SCHEDULED, STATUS_CONFIRMED, STATUS_RESCHEDULED)

    PAYMENT_UNPAID = 'unpaid'
    PAYMENT_PAID = 'paid'
    PAYMENT_OPEN_ACCOUNT = 'open_account'
    PAYMENT_STATUS_CHOICES = [
        (PAYMENT_UNPAID, _('Unpaid')),
        (PAYMENT_PAID, _('Paid')),
        (PAYMENT_OPEN_ACCOUNT, _('Open account')),
    ]

    # Orphaned references are tolerated and rendered with fallback labels
    client = models.ForeignKey(
        'clients.Client', on_delete=models.SET_NULL, null=True, related_name='appointments'
    )
    service = models.ForeignKey(
        'catalog.Service', on_delete=models.SET_NULL, null=True, related_name='appointments'
    )
    professional = models.ForeignKey(
        'staff.Professional', on_delete=models.SET_NULL, null=True, related_name='appointments'
    )

    start_time = models.DateTimeField(_('Start'))
    end_time = models.DateTimeField(_('End'))
    rescheduled_from = models.DateTimeField(_('Previous start'), null=True, blank=True)

    status = models.CharField(_('Status'), max_length=16, choices=STATUS_CHOICES, default=STATUS_CONFIRMED)
    attendance_confirmed = models.BooleanField(_('Attendance confirmed'), default=False)

    # Service price at booking time; receivables are posted with this amount
    price = models.DecimalField(_('Price'), max_digits=8, decimal_places=2, default=0)
    payment_status = models.CharField(
        _('Payment status'), max_length=16, choices=PAYMENT_STATUS_CHOICES, default=PAYMENT_UNPAID
    )
    payment_method = models.CharField(
        _('Payment method'), max_length=16, choices=PaymentMethod.choices, blank=True
    )
    paid_at = models.DateTimeField(_('Paid at'), null=True, blank=True)

    notes = models.TextField(_('Notes'), blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-start_time']
        indexes = [
            models.Index(fields=['start_time'], name='appointment_start_idx'),
            models.Index(fields=['status', 'start_time'], name='appointment_status_start_idx'),
            models.Index(fields=['professional', 'start_time'], name='appointment_prof_start_idx'),
        ]

    def __str__(self):
        return f'{self.client_label} - {self.service_label} @ {self.start_time:%d/%m %H:%M}'

    @property
    def client_label(self):
        return self.client.name if self.client else 'Client'

    @property
    def service_label(self):
        return self.service.name if self.service else 'Service'

    @property
    def professional_label(self):
        return self.professional.name if self.professional else 'Professional'

    @property
    def is_terminal(self):
        return self.status == self.STATUS_CANCELLED
