from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _


class ServiceCategory(models.Model):
    name = models.CharField(_('Category'), max_length=80, unique=True)

    class Meta:
        ordering = ['name']
        verbose_name_plural = _('Service categories')

    def __str__(self):
        return self.name


class Service(models.Model):
    category = models.ForeignKey(
        ServiceCategory,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='services',
    )
    name = models.CharField(_('Service'), max_length=120)
    price = models.DecimalField(
        _('Price'), max_digits=8, decimal_places=2, validators=[MinValueValidator(0)]
    )
    duration_minutes = models.PositiveIntegerField(_('Duration (minutes)'), default=60)
    notes = models.TextField(_('Notes'), blank=True)
    is_active = models.BooleanField(_('Active'), default=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name
