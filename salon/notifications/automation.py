"""
Daily automation scans.

Each scan takes a snapshot of matching records, then for every match runs
one send-then-log cycle through the notification service, one at a time.
Re-running a scan inside the same eligibility window sends again: nothing
is checked against the message history before sending.
"""
import logging
from datetime import timedelta

from django.utils import timezone

from salon.appointments.models import Appointment
from salon.clients.models import Client
from salon.finance.delinquency import overdue_days
from salon.finance.models import Receivable

from .messages import appointment_context, generate_message
from .services import notification_service

logger = logging.getLogger(__name__)

REMINDER_LEAD = timedelta(hours=24)
REMINDER_WINDOW = timedelta(hours=1)
OVERDUE_REMINDER_DAYS = 30


def _tally(results, log):
    results[log.status] += 1


def _empty_results():
    return {'sent': 0, 'failed': 0, 'skipped': 0}


def send_24h_reminders(now=None):
    """Remind clients of active appointments starting in [now+24h, now+25h)"""
    now = now or timezone.now()
    window_start = now + REMINDER_LEAD
    window_end = window_start + REMINDER_WINDOW

    appointments = Appointment.objects.select_related('client', 'service', 'professional').filter(
        start_time__gte=window_start,
        start_time__lt=window_end,
        status__in=Appointment.ACTIVE_STATUSES,
        client__isnull=False,
    )

    results = _empty_results()
    for appointment in appointments:
        content = generate_message('appointment_reminder_24h', **appointment_context(appointment))
        log = notification_service.send_to_client(
            appointment.client,
            'appointment_reminder_24h',
            content,
            appointment=appointment,
            metadata={'appointmentId': str(appointment.pk)},
        )
        _tally(results, log)

    logger.info(f'24h reminders: {results}')
    return results


def send_birthday_greetings(today=None):
    """Greet every client whose birth month/day is today"""
    today = today or timezone.localdate()

    results = _empty_results()
    for client in Client.objects.birthdays_on(today):
        content = generate_message('birthday', client_name=client.name)
        _tally(results, notification_service.send_to_client(client, 'birthday', content))

    logger.info(f'Birthday greetings: {results}')
    return results


def send_overdue_reminders(today=None):
    """
    Nudge clients with a receivable open for 30 days or more

    Receivables under the threshold are skipped without a history row.
    """
    today = today or timezone.localdate()
    receivables = (
        Receivable.objects.select_related('client', 'appointment')
        .exclude(status=Receivable.STATUS_PAID)
        .filter(client__isnull=False)
        .order_by('due_date')
    )

    results = _empty_results()
    for receivable in receivables:
        days = overdue_days(receivable.status, receivable.due_date, today)
        if days < OVERDUE_REMINDER_DAYS:
            continue
        content = generate_message(
            'overdue_invoice', client_name=receivable.client.name, overdue_days=days
        )
        log = notification_service.send_to_client(
            receivable.client,
            'overdue_invoice',
            content,
            appointment=receivable.appointment,
            metadata={'receivableId': str(receivable.pk)},
        )
        _tally(results, log)

    logger.info(f'Overdue reminders: {results}')
    return results


SCANS = {
    'reminders': send_24h_reminders,
    'birthdays': send_birthday_greetings,
    'overdue': send_overdue_reminders,
}


def run_daily_automations():
    """
    Run every scan in-process

    A failing scan is logged and reported as {'error': ...}; the other
    scans still run. Workers run the scans concurrently through
    tasks.run_daily_automations_task instead.
    """
    summary = {}
    for name, scan in SCANS.items():
        try:
            summary[name] = scan()
        except Exception as exc:
            logger.exception(f"Automation scan '{name}' failed")
            summary[name] = {'error': str(exc)}
    return summary
