from django.db import models
from django.utils.translation import gettext_lazy as _


class PaymentMethod(models.TextChoices):
    CREDIT_CARD = 'credit_card', _('Credit card')
    DEBIT_CARD = 'debit_card', _('Debit card')
    PIX = 'pix', _('Pix')
    CASH = 'cash', _('Cash')
    # Settlement deferred to an agreed due date
    ACCOUNT = 'account', _('Open account')


def payment_method_label(value):
    if value in PaymentMethod.values:
        return str(PaymentMethod(value).label)
    return str(_('Not informed'))
