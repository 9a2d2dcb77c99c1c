import logging
from typing import Any, Dict, Optional

from django.db import DatabaseError

from salon.core.exceptions import PersistenceError

from .messages import appointment_context, generate_message
from .models import MessageHistory
from .notifier import get_notifier, normalize_phone

logger = logging.getLogger(__name__)

# Shorter numbers cannot be reached on WhatsApp
MIN_PHONE_DIGITS = 10


class NotificationService:
    """Sends WhatsApp messages to clients and records every attempt"""

    def __init__(self, notifier=None):
        self._notifier = notifier

    @property
    def notifier(self):
        # Resolved lazily so settings overrides apply
        return self._notifier or get_notifier()

    def _log(self, client, message_type, content, status, appointment=None, result=None):
        try:
            return MessageHistory.objects.create(
                client=client,
                appointment=appointment,
                type=message_type,
                channel='whatsapp',
                content=content,
                status=status,
                provider=(result.provider if result else '') or '',
                external_id=(result.external_id if result else '') or '',
                error_message=(result.error if result else '') or '',
            )
        except DatabaseError as exc:
            logger.error(f'Failed to record {message_type} message for client {client.pk}: {exc}')
            raise PersistenceError('Could not record the message history') from exc

    def send_to_client(
        self,
        client,
        message_type: str,
        content: str,
        appointment=None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> MessageHistory:
        """
        Send `content` to a client over WhatsApp

        Clients without a usable phone, or who opted out of messages, are
        skipped without calling the gateway. Every outcome (sent, failed or
        skipped) is written to the message history.
        """
        phone = normalize_phone(client.phone)
        if len(phone) < MIN_PHONE_DIGITS:
            logger.info(f'Skipping {message_type} for {client.name} (ID: {client.id}) - no valid phone')
            return self._log(client, message_type, content, MessageHistory.STATUS_SKIPPED, appointment)
        if not client.accepts_messages:
            logger.info(f'Skipping {message_type} for {client.name} (ID: {client.id}) - client opted out')
            return self._log(client, message_type, content, MessageHistory.STATUS_SKIPPED, appointment)

        meta = {'clientId': str(client.id), 'type': message_type}
        meta.update(metadata or {})
        result = self.notifier.send(to=client.phone, body=content, metadata=meta)

        if result.ok:
            logger.info(f'{message_type} sent to {client.name} (ID: {client.id})')
            status = MessageHistory.STATUS_SENT
        else:
            logger.warning(f'{message_type} to {client.name} (ID: {client.id}) failed: {result.error}')
            status = MessageHistory.STATUS_FAILED
        return self._log(client, message_type, content, status, appointment, result)

    def send_appointment_confirmation(self, appointment, message_type='appointment_confirmation'):
        """Booking or reschedule confirmation, depending on `message_type`"""
        client = appointment.client
        if client is None:
            logger.info(f'Appointment {appointment.pk} has no client, {message_type} not sent')
            return None

        content = generate_message(message_type, **appointment_context(appointment))
        return self.send_to_client(
            client,
            message_type,
            content,
            appointment=appointment,
            metadata={'appointmentId': str(appointment.pk)},
        )

    def send_bulk_message(self, clients, content):
        """
        Send the same free-text message to several clients

        {client_name} in the text is replaced per client.

        Returns:
            Dict with sent/failed/skipped counts
        """
        results = {'sent': 0, 'failed': 0, 'skipped': 0}
        for client in clients:
            personalized = generate_message('general', content=content.replace('{client_name}', client.name))
            log = self.send_to_client(client, 'general', personalized)
            results[log.status] += 1
        logger.info(f'Bulk message sent: {results}')
        return results


# Singleton instance
notification_service = NotificationService()
