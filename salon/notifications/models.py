from django.db import models
from django.utils.translation import gettext_lazy as _


class MessageHistory(models.Model):
    """One row per delivery attempt; the only durable record of sends"""

    TYPE_CHOICES = [
        ('appointment_confirmation', _('Appointment confirmation')),
        ('appointment_reminder_24h', _('24h reminder')),
        ('birthday', _('Birthday')),
        ('overdue_invoice', _('Overdue invoice')),
        ('reschedule_confirmation', _('Reschedule confirmation')),
        ('general', _('General')),
    ]

    CHANNEL_CHOICES = [
        ('whatsapp', 'WhatsApp'),
    ]

    STATUS_SENT = 'sent'
    STATUS_FAILED = 'failed'
    STATUS_SKIPPED = 'skipped'
    STATUS_CHOICES = [
        (STATUS_SENT, _('Sent')),
        (STATUS_FAILED, _('Failed')),
        (STATUS_SKIPPED, _('Skipped')),
    ]

    client = models.ForeignKey(
        'clients.Client',
        on_delete=models.CASCADE,
        related_name='messages',
    )
    appointment = models.ForeignKey(
        'appointments.Appointment',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='messages',
    )

    type = models.CharField(_('Type'), max_length=32, choices=TYPE_CHOICES)
    channel = models.CharField(_('Channel'), max_length=16, choices=CHANNEL_CHOICES, default='whatsapp')
    content = models.TextField(_('Content'))
    status = models.CharField(_('Status'), max_length=16, choices=STATUS_CHOICES)
    sent_at = models.DateTimeField(_('Sent at'), auto_now_add=True)

    # Provider tracking
    provider = models.CharField(_('Provider'), max_length=32, blank=True)
    external_id = models.CharField(
        _('External ID'),
        max_length=100,
        blank=True,
        help_text=_('Twilio Message SID or mock id'),
    )
    error_message = models.TextField(_('Error Message'), blank=True)

    class Meta:
        db_table = 'message_history'
        verbose_name = _('Message')
        verbose_name_plural = _('Message history')
        ordering = ['-sent_at']
        indexes = [
            models.Index(fields=['client', '-sent_at'], name='message_client_sent_idx'),
            models.Index(fields=['status', '-sent_at'], name='message_status_sent_idx'),
            models.Index(fields=['type', '-sent_at'], name='message_type_sent_idx'),
        ]

    def __str__(self):
        return f'{self.type} to {self.client} - {self.status}'
