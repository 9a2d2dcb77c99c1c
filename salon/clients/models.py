from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class ClientQuerySet(models.QuerySet):
    def birthdays_on(self, day):
        """Clients whose birth month/day matches `day` (year ignored)"""
        return self.filter(
            birth_date__isnull=False,
            birth_date__month=day.month,
            birth_date__day=day.day,
        )

    def with_delinquency(self, as_of=None):
        """
        Annotate overdue_count and oldest_due_date from pending receivables
        due before `as_of`. overdue days are derived from oldest_due_date.
        """
        as_of = as_of or timezone.localdate()
        overdue = models.Q(
            receivables__status='pending',
            receivables__due_date__lt=as_of,
        )
        return self.annotate(
            overdue_count=models.Count('receivables', filter=overdue),
            oldest_due_date=models.Min('receivables__due_date', filter=overdue),
        )


class Client(models.Model):
    name = models.CharField(_('Name'), max_length=120)
    phone = models.CharField(_('Phone'), max_length=32, blank=True, db_index=True)
    email = models.EmailField(_('Email'), blank=True)
    birth_date = models.DateField(_('Birth date'), null=True, blank=True)
    notes = models.TextField(_('Notes'), blank=True)
    accepts_messages = models.BooleanField(
        _('Accepts messages'),
        default=True,
        help_text=_('Client agreed to receive WhatsApp messages'),
    )
    created_at = models.DateTimeField(auto_now_add=True)

    objects = ClientQuerySet.as_manager()

    class Meta:
        ordering = ['name']

    def __str__(self):
        return f'{self.name} ({self.phone})' if self.phone else self.name
