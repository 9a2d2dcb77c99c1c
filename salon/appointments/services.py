"""
Appointment lifecycle: booking, rescheduling, attendance, completion,
cancellation and payment posting.

Status transitions:
    scheduled/confirmed/rescheduled --reschedule--> rescheduled (client is notified)
    scheduled/confirmed/rescheduled --confirm_attendance--> confirmed
    scheduled/confirmed/rescheduled --mark_no_show--> no_show
    any non-cancelled, non-completed --complete--> completed
    any --cancel--> cancelled (terminal)
    any non-cancelled --receive_payment--> completed (payment fields posted)
"""
import logging
from datetime import date, datetime, time, timedelta

from django.conf import settings
from django.db import DatabaseError, transaction
from django.utils import timezone

from salon.catalog.models import Service
from salon.clients.models import Client
from salon.core.exceptions import NotFoundError, PersistenceError, ValidationError
from salon.finance.models import Receivable
from salon.finance.payments import PaymentMethod
from salon.staff.models import Professional

from .models import Appointment

logger = logging.getLogger(__name__)


def parse_date(value, field='date'):
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise ValidationError(f'Invalid {field}: {value!r}')


def parse_time(value, field='time'):
    if isinstance(value, time):
        return value
    try:
        return time.fromisoformat(str(value))
    except ValueError:
        raise ValidationError(f'Invalid {field}: {value!r}')


def combine(day, at):
    """Aware datetime for a local date and wall-clock time"""
    return timezone.make_aware(datetime.combine(day, at))


class AppointmentLifecycleManager:
    """Owns the status/payment state of appointments and their receivable"""

    def _get(self, appointment_id):
        try:
            return Appointment.objects.select_related('client', 'service', 'professional').get(
                pk=appointment_id
            )
        except (Appointment.DoesNotExist, ValueError, TypeError):
            raise NotFoundError(f'Appointment {appointment_id} not found')

    def _lookup(self, model, pk, label):
        try:
            return model.objects.get(pk=pk)
        except (model.DoesNotExist, ValueError, TypeError):
            raise NotFoundError(f'{label} {pk} not found')

    def _save(self, appointment, fields):
        try:
            appointment.save(update_fields=fields + ['updated_at'])
        except DatabaseError as exc:
            logger.error(f'Failed to update appointment {appointment.pk}: {exc}')
            raise PersistenceError(f'Could not save appointment {appointment.pk}') from exc
        return appointment

    def _end_time(self, start, service):
        duration = service.duration_minutes if service else 60
        return start + timedelta(minutes=duration)

    def create(self, client_id, service_id, professional_id, date, time, notes=''):
        """
        Book an appointment.

        The new appointment starts confirmed and unpaid, ends after the
        service duration and keeps the service price as its own price.
        When the client accepts messages a confirmation is queued once the
        insert commits; a failing confirmation never undoes the booking.
        """
        if not Professional.objects.exists():
            raise ValidationError('Register at least one professional before booking.')
        if not all([client_id, service_id, professional_id, date, time]):
            raise ValidationError('Client, service, professional, date and time are required.')

        client = self._lookup(Client, client_id, 'Client')
        service = self._lookup(Service, service_id, 'Service')
        professional = self._lookup(Professional, professional_id, 'Professional')

        start = combine(parse_date(date), parse_time(time))
        appointment = Appointment(
            client=client,
            service=service,
            professional=professional,
            start_time=start,
            end_time=self._end_time(start, service),
            status=Appointment.STATUS_CONFIRMED,
            attendance_confirmed=False,
            payment_status=Appointment.PAYMENT_UNPAID,
            price=service.price,
            notes=notes or '',
        )
        try:
            appointment.save()
        except DatabaseError as exc:
            logger.error(f'Failed to create appointment for client {client.pk}: {exc}')
            raise PersistenceError('Could not create the appointment') from exc

        logger.info(f'Appointment {appointment.pk} booked for {client.name} at {start:%Y-%m-%d %H:%M}')

        self._notify_on_commit(appointment)
        return appointment

    def _notify_on_commit(self, appointment, message_type='appointment_confirmation'):
        client = appointment.client
        if client and client.accepts_messages and getattr(settings, 'NOTIFICATIONS_ENABLED', True):
            transaction.on_commit(lambda: self._queue_confirmation(appointment.pk, message_type))

    def _queue_confirmation(self, appointment_id, message_type='appointment_confirmation'):
        from salon.notifications.tasks import send_appointment_confirmation_task

        try:
            send_appointment_confirmation_task.delay(appointment_id, message_type)
            logger.info(f'Queued {message_type} message for appointment {appointment_id}')
        except Exception as exc:
            # The appointment change stands even when the message cannot be queued
            logger.error(f'Could not queue {message_type} for appointment {appointment_id}: {exc}')

    def reschedule(self, appointment_id, new_date, new_time, new_professional_id=None):
        appointment = self._get(appointment_id)
        if appointment.status not in Appointment.ACTIVE_STATUSES:
            raise ValidationError(f'A {appointment.status} appointment cannot be rescheduled.')

        fields = ['start_time', 'end_time', 'rescheduled_from', 'status']
        if new_professional_id:
            appointment.professional = self._lookup(Professional, new_professional_id, 'Professional')
            fields.append('professional')

        start = combine(parse_date(new_date), parse_time(new_time))
        appointment.rescheduled_from = appointment.start_time
        appointment.start_time = start
        appointment.end_time = self._end_time(start, appointment.service)
        appointment.status = Appointment.STATUS_RESCHEDULED

        self._save(appointment, fields)
        logger.info(f'Appointment {appointment.pk} rescheduled to {start:%Y-%m-%d %H:%M}')
        self._notify_on_commit(appointment, 'reschedule_confirmation')
        return appointment

    def confirm_attendance(self, appointment_id):
        appointment = self._get(appointment_id)
        if appointment.status not in Appointment.ACTIVE_STATUSES:
            raise ValidationError(f'A {appointment.status} appointment cannot be confirmed.')

        appointment.status = Appointment.STATUS_CONFIRMED
        appointment.attendance_confirmed = True
        return self._save(appointment, ['status', 'attendance_confirmed'])

    def complete(self, appointment_id):
        appointment = self._get(appointment_id)
        if appointment.status in (Appointment.STATUS_CANCELLED, Appointment.STATUS_COMPLETED):
            raise ValidationError(f'A {appointment.status} appointment cannot be completed.')

        appointment.status = Appointment.STATUS_COMPLETED
        appointment.attendance_confirmed = True
        return self._save(appointment, ['status', 'attendance_confirmed'])

    def cancel(self, appointment_id):
        appointment = self._get(appointment_id)
        appointment.status = Appointment.STATUS_CANCELLED
        self._save(appointment, ['status'])
        logger.info(f'Appointment {appointment.pk} cancelled')
        return appointment

    def mark_no_show(self, appointment_id):
        appointment = self._get(appointment_id)
        if appointment.status not in Appointment.ACTIVE_STATUSES:
            raise ValidationError(f'A {appointment.status} appointment cannot be marked as no-show.')

        appointment.status = Appointment.STATUS_NO_SHOW
        return self._save(appointment, ['status'])

    def receive_payment(self, appointment_id, method, expected_date=None):
        """
        Post the payment of an appointment.

        Open account ('account') keeps the receivable pending until
        `expected_date`, which must be after today. Any other method settles
        it now, due on the service date. The receivable is looked up by
        appointment and updated, or created when missing, so repeated calls
        keep a single row. The appointment is forced to completed with
        attendance confirmed.

        Both writes share one transaction.

        Returns:
            (appointment, receivable)
        """
        if method not in PaymentMethod.values:
            raise ValidationError(f'Unknown payment method: {method!r}')
        open_account = method == PaymentMethod.ACCOUNT
        if open_account and not expected_date:
            raise ValidationError('Open account payments need an expected payment date.')

        appointment = self._get(appointment_id)
        if appointment.is_terminal:
            raise ValidationError('A cancelled appointment cannot receive payments.')

        now = timezone.now()
        service_date = timezone.localdate(appointment.start_time)
        if open_account:
            due_date = parse_date(expected_date, 'expected date')
            if due_date <= timezone.localdate(now):
                raise ValidationError('The expected payment date must be in the future.')
            receivable_status = Receivable.STATUS_PENDING
            payment_status = Appointment.PAYMENT_OPEN_ACCOUNT
            paid_at = None
        else:
            due_date = service_date
            receivable_status = Receivable.STATUS_PAID
            payment_status = Appointment.PAYMENT_PAID
            paid_at = now

        client_name = appointment.client_label
        service_name = appointment.service_label

        try:
            with transaction.atomic():
                receivable = (
                    Receivable.objects.select_for_update()
                    .filter(appointment=appointment)
                    .order_by('created_at')
                    .first()
                )
                if receivable is None:
                    receivable = Receivable(appointment=appointment)

                receivable.client = appointment.client
                receivable.client_name = client_name
                receivable.service_name = service_name
                receivable.description = f'{client_name} - {service_name}'
                receivable.amount = appointment.price
                receivable.service_date = service_date
                receivable.due_date = due_date
                receivable.status = receivable_status
                receivable.payment_method = method
                receivable.paid_at = paid_at
                receivable.save()

                appointment.payment_status = payment_status
                appointment.payment_method = method
                appointment.paid_at = paid_at
                appointment.status = Appointment.STATUS_COMPLETED
                appointment.attendance_confirmed = True
                appointment.save(
                    update_fields=[
                        'payment_status',
                        'payment_method',
                        'paid_at',
                        'status',
                        'attendance_confirmed',
                        'updated_at',
                    ]
                )
        except DatabaseError as exc:
            logger.error(f'Failed to post payment for appointment {appointment.pk}: {exc}')
            raise PersistenceError(f'Could not post the payment of appointment {appointment.pk}') from exc

        logger.info(
            f'Payment posted for appointment {appointment.pk}: {method} '
            f'({payment_status}, due {due_date:%Y-%m-%d})'
        )
        return appointment, receivable


# Singleton instance
appointment_manager = AppointmentLifecycleManager()
