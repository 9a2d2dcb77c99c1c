from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _


class Professional(models.Model):
    """A professional who can be booked for appointments"""

    name = models.CharField(_('Name'), max_length=120)
    email = models.EmailField(_('Email'), blank=True)
    phone = models.CharField(_('Phone'), max_length=32, blank=True)
    specialties = models.TextField(
        _('Specialties'),
        blank=True,
        help_text=_('Comma separated, e.g. Haircut, Coloring, Manicure'),
    )
    commission_percent = models.DecimalField(
        _('Commission (%)'),
        max_digits=5,
        decimal_places=2,
        default=Decimal('0'),
        validators=[MinValueValidator(0), MaxValueValidator(100)],
    )
    is_active = models.BooleanField(_('Active'), default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name

    @property
    def specialty_list(self):
        return [s.strip() for s in self.specialties.split(',') if s.strip()]

    def commission_for(self, amount):
        """Commission owed on `amount` at this professional's rate"""
        return (Decimal(amount) * self.commission_percent / Decimal('100')).quantize(Decimal('0.01'))
