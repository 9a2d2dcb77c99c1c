import logging

from celery import group, shared_task
from django.apps import apps

from . import automation

logger = logging.getLogger(__name__)


@shared_task
def send_appointment_confirmation_task(appointment_id, message_type='appointment_confirmation'):
    """
    Send the booking (or reschedule) confirmation of an appointment

    Fire-and-forget: no retries, the outcome lives in the message history.
    """
    from .services import notification_service

    Appointment = apps.get_model('appointments', 'Appointment')
    try:
        appointment = Appointment.objects.select_related('client', 'service', 'professional').get(
            id=appointment_id
        )
    except Appointment.DoesNotExist:
        logger.error(f'Appointment {appointment_id} not found')
        return {'error': 'Appointment not found'}

    log = notification_service.send_appointment_confirmation(appointment, message_type)
    return {'status': log.status if log else 'skipped'}


@shared_task
def send_24h_reminders_task():
    return automation.send_24h_reminders()


@shared_task
def send_birthday_greetings_task():
    return automation.send_birthday_greetings()


@shared_task
def send_overdue_reminders_task():
    return automation.send_overdue_reminders()


@shared_task
def send_bulk_message_task(client_ids, message):
    from .services import notification_service

    Client = apps.get_model('clients', 'Client')
    clients = Client.objects.filter(id__in=client_ids)
    return notification_service.send_bulk_message(clients, message)


@shared_task
def run_daily_automations_task():
    """
    Fan the three scans out to workers

    Each scan is its own task, so one failing scan does not stop the others.
    """
    job = group(
        send_24h_reminders_task.s(),
        send_birthday_greetings_task.s(),
        send_overdue_reminders_task.s(),
    )
    result = job.apply_async()
    logger.info(f'Queued daily automations (group {result.id})')
    return {'group_id': result.id}
