"""
Outbound WhatsApp gateways.

A notifier takes a destination phone, a message body and free-form metadata
and returns a NotifyResult. It never raises for delivery problems: failures
come back as ok=False with the error text, and the caller records them.
There is no queue and no retry.
"""
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Optional

from django.conf import settings
from django.utils.module_loading import import_string

from twilio.rest import Client as TwilioClient

from salon.core.exceptions import NotifyError

logger = logging.getLogger(__name__)


@dataclass
class NotifyResult:
    ok: bool
    provider: str = ''
    external_id: Optional[str] = None
    error: Optional[str] = None


def normalize_phone(phone):
    """Digits only; empty string when nothing usable is left"""
    return ''.join(ch for ch in (phone or '') if ch.isdigit())


def to_e164(phone, country_code=None):
    """
    Format a stored phone as E.164

    Numbers saved with a leading + already carry their country code; other
    numbers get the salon's default country code.
    """
    digits = normalize_phone(phone)
    if not digits:
        return ''
    if phone.strip().startswith('+'):
        return f'+{digits}'
    country_code = country_code or getattr(settings, 'SALON_DEFAULT_COUNTRY_CODE', '55')
    return f"+{country_code}{digits.lstrip('0')}"


class Notifier:
    provider = ''

    def send(self, to: str, body: str, metadata: Optional[Dict[str, Any]] = None) -> NotifyResult:
        try:
            return self.deliver(to, body, metadata or {})
        except NotifyError as exc:
            logger.error(f'{self.provider} failed to send to {to}: {exc}')
            return NotifyResult(ok=False, provider=self.provider, error=str(exc))

    def deliver(self, to, body, metadata):
        raise NotImplementedError


class ConsoleNotifier(Notifier):
    """Logs the message instead of sending it"""

    provider = 'mock-whatsapp'

    def deliver(self, to, body, metadata):
        logger.info(f'[WhatsApp mock] to={to} metadata={metadata} body={body[:80]}')
        return NotifyResult(ok=True, provider=self.provider, external_id=f'mock-{uuid.uuid4().hex[:12]}')


class TwilioWhatsAppNotifier(Notifier):
    """Sends WhatsApp messages through the Twilio REST API"""

    provider = 'twilio-whatsapp'

    def __init__(self):
        self.twilio_client = None
        self.from_number = getattr(settings, 'TWILIO_WHATSAPP_NUMBER', '')
        account_sid = getattr(settings, 'TWILIO_ACCOUNT_SID', '')
        auth_token = getattr(settings, 'TWILIO_AUTH_TOKEN', '')
        if account_sid and auth_token:
            self.twilio_client = TwilioClient(account_sid, auth_token)

    def deliver(self, to, body, metadata):
        if not self.twilio_client:
            raise NotifyError('Twilio client not configured')
        if not self.from_number:
            raise NotifyError('TWILIO_WHATSAPP_NUMBER not configured')

        phone = to_e164(to)
        if not phone:
            raise NotifyError(f'Invalid phone number: {to!r}')

        try:
            message = self.twilio_client.messages.create(
                body=body,
                from_=f'whatsapp:{to_e164(self.from_number)}',
                to=f'whatsapp:{phone}',
            )
        except Exception as exc:
            raise NotifyError(f'Twilio error: {exc}') from exc

        logger.info(f'WhatsApp message sent to {phone}. SID: {message.sid}')
        return NotifyResult(ok=True, provider=self.provider, external_id=message.sid)


def get_notifier():
    """Instantiate the backend named by SALON_NOTIFIER_BACKEND"""
    backend = getattr(settings, 'SALON_NOTIFIER_BACKEND', 'salon.notifications.notifier.ConsoleNotifier')
    return import_string(backend)()
