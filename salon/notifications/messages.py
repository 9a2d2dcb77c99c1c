"""
WhatsApp message bodies, one per message type.

Available variables: {client_name}, {date}, {time}, {service},
{professional}, {overdue_days}, {content}
"""
from django.utils import timezone

TEMPLATES = {
    'appointment_confirmation': (
        'Hello {client_name}! Your appointment is confirmed for {date} at {time}. '
        'Service: {service}. Professional: {professional}. Any questions, just get in touch!'
    ),
    'appointment_reminder_24h': (
        'Hello {client_name}! Reminder: you have an appointment tomorrow at {time}. '
        'Service: {service}. See you then!'
    ),
    'birthday': (
        'Happy birthday, {client_name}! The whole salon team wishes you an amazing day. '
        'How about celebrating with a special treatment?'
    ),
    'overdue_invoice': (
        'Hello {client_name}, we noticed a bill open for {overdue_days} days. '
        'Can we help you settle it?'
    ),
    'reschedule_confirmation': (
        'Hello {client_name}! Your appointment was moved to {date} at {time}. '
        'Service: {service}. Any questions, just get in touch!'
    ),
}


class _Defaults(dict):
    def __missing__(self, key):
        return ''


def generate_message(message_type, **data):
    """
    Render the body for `message_type`

    Unknown types (and 'general') return the free text passed as `content`.
    Missing variables render as empty strings.
    """
    template = TEMPLATES.get(message_type)
    if template is None:
        return data.get('content', '')
    return template.format_map(_Defaults(data))


def appointment_context(appointment):
    """Template variables for an appointment, in the salon's local time"""
    start = timezone.localtime(appointment.start_time)
    return {
        'client_name': appointment.client_label,
        'date': start.strftime('%d/%m/%Y'),
        'time': start.strftime('%H:%M'),
        'service': appointment.service_label,
        'professional': appointment.professional_label,
    }
