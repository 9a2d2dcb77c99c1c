"""
Tests for the appointment lifecycle and its endpoints
"""
import json
from datetime import date, time, timedelta
from decimal import Decimal
from unittest import mock

from django.contrib.auth import get_user_model
from django.db import DatabaseError
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone

from salon.catalog.models import Service
from salon.clients.models import Client
from salon.core.exceptions import NotFoundError, PersistenceError, ValidationError
from salon.finance.models import Receivable
from salon.notifications.models import MessageHistory
from salon.staff.models import Professional
from .models import Appointment
from .services import appointment_manager, combine


class AppointmentFixturesMixin:
    def setUp(self):
        self.client_obj = Client.objects.create(name='Maria Souza', phone='11987654321')
        self.service = Service.objects.create(name='Haircut', price=Decimal('80.00'), duration_minutes=45)
        self.professional = Professional.objects.create(name='Ana', commission_percent=Decimal('40'))
        self.day = date(2026, 3, 10)

    def book(self, **overrides):
        params = {
            'client_id': self.client_obj.id,
            'service_id': self.service.id,
            'professional_id': self.professional.id,
            'date': self.day.isoformat(),
            'time': '14:00',
        }
        params.update(overrides)
        return appointment_manager.create(**params)


class AppointmentCreateTest(AppointmentFixturesMixin, TestCase):
    """Test booking"""

    def test_create_sets_defaults_and_snapshot_price(self):
        appointment = self.book()

        self.assertEqual(appointment.status, Appointment.STATUS_CONFIRMED)
        self.assertFalse(appointment.attendance_confirmed)
        self.assertEqual(appointment.payment_status, Appointment.PAYMENT_UNPAID)
        self.assertEqual(appointment.price, Decimal('80.00'))
        self.assertEqual(appointment.start_time, combine(self.day, time(14, 0)))
        self.assertEqual(appointment.end_time - appointment.start_time, timedelta(minutes=45))

    def test_price_change_does_not_touch_booked_appointment(self):
        appointment = self.book()
        self.service.price = Decimal('120.00')
        self.service.save()

        appointment.refresh_from_db()
        self.assertEqual(appointment.price, Decimal('80.00'))

    def test_create_without_professionals_fails(self):
        Professional.objects.all().delete()
        with self.assertRaises(ValidationError):
            self.book(professional_id=None)
        self.assertEqual(Appointment.objects.count(), 0)

    def test_create_with_missing_field_fails(self):
        with self.assertRaises(ValidationError):
            self.book(time='')
        self.assertEqual(Appointment.objects.count(), 0)

    def test_create_with_unknown_service_fails(self):
        with self.assertRaises(NotFoundError):
            self.book(service_id=9999)

    def test_create_with_invalid_date_fails(self):
        with self.assertRaises(ValidationError):
            self.book(date='10/03/2026')

    def test_confirmation_sent_after_commit(self):
        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            appointment = self.book()

        self.assertEqual(len(callbacks), 1)
        log = MessageHistory.objects.get(appointment=appointment)
        self.assertEqual(log.type, 'appointment_confirmation')
        self.assertEqual(log.status, MessageHistory.STATUS_SENT)
        self.assertIn('Maria Souza', log.content)
        self.assertIn('10/03/2026', log.content)
        self.assertIn('14:00', log.content)

    def test_no_confirmation_when_client_opted_out(self):
        self.client_obj.accepts_messages = False
        self.client_obj.save()

        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            self.book()

        self.assertEqual(callbacks, [])
        self.assertFalse(MessageHistory.objects.exists())

    def test_failed_confirmation_keeps_booking(self):
        with mock.patch('salon.notifications.tasks.send_appointment_confirmation_task') as task:
            task.delay.side_effect = RuntimeError('broker down')
            with self.captureOnCommitCallbacks(execute=True):
                appointment = self.book()

        self.assertTrue(Appointment.objects.filter(pk=appointment.pk).exists())

    def test_database_failure_raises_persistence_error(self):
        with mock.patch.object(Appointment, 'save', side_effect=DatabaseError('disk full')):
            with self.assertRaises(PersistenceError):
                self.book()


class AppointmentTransitionTest(AppointmentFixturesMixin, TestCase):
    """Test status transitions"""

    def setUp(self):
        super().setUp()
        self.appointment = self.book()

    def test_reschedule_keeps_previous_start(self):
        original_start = self.appointment.start_time
        other = Professional.objects.create(name='Bia')

        appointment = appointment_manager.reschedule(self.appointment.id, '2026-03-12', '09:30', other.id)

        self.assertEqual(appointment.status, Appointment.STATUS_RESCHEDULED)
        self.assertEqual(appointment.rescheduled_from, original_start)
        self.assertEqual(appointment.start_time, combine(date(2026, 3, 12), time(9, 30)))
        self.assertEqual(appointment.end_time - appointment.start_time, timedelta(minutes=45))
        self.assertEqual(appointment.professional, other)

    def test_reschedule_notifies_client_after_commit(self):
        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            appointment_manager.reschedule(self.appointment.id, '2026-03-12', '09:30')

        self.assertEqual(len(callbacks), 1)
        log = MessageHistory.objects.get(appointment=self.appointment, type='reschedule_confirmation')
        self.assertEqual(log.status, MessageHistory.STATUS_SENT)
        self.assertIn('12/03/2026', log.content)
        self.assertIn('09:30', log.content)

    def test_reschedule_skips_message_when_client_opted_out(self):
        self.client_obj.accepts_messages = False
        self.client_obj.save()

        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            appointment_manager.reschedule(self.appointment.id, '2026-03-12', '09:30')

        self.assertEqual(callbacks, [])
        self.assertFalse(MessageHistory.objects.exists())

    def test_reschedule_without_professional_keeps_current(self):
        appointment = appointment_manager.reschedule(self.appointment.id, '2026-03-12', '09:30')
        self.assertEqual(appointment.professional, self.professional)

    def test_reschedule_cancelled_fails(self):
        appointment_manager.cancel(self.appointment.id)
        with self.assertRaises(ValidationError):
            appointment_manager.reschedule(self.appointment.id, '2026-03-12', '09:30')

    def test_cancel_after_reschedule(self):
        appointment_manager.reschedule(self.appointment.id, '2026-03-12', '09:30')
        appointment = appointment_manager.cancel(self.appointment.id)
        self.assertEqual(appointment.status, Appointment.STATUS_CANCELLED)

    def test_confirm_attendance(self):
        appointment = appointment_manager.confirm_attendance(self.appointment.id)
        self.assertEqual(appointment.status, Appointment.STATUS_CONFIRMED)
        self.assertTrue(appointment.attendance_confirmed)

    def test_confirm_cancelled_fails(self):
        appointment_manager.cancel(self.appointment.id)
        with self.assertRaises(ValidationError):
            appointment_manager.confirm_attendance(self.appointment.id)

    def test_confirm_paid_appointment_fails(self):
        appointment_manager.receive_payment(self.appointment.id, 'pix')

        with self.assertRaises(ValidationError):
            appointment_manager.confirm_attendance(self.appointment.id)

        self.appointment.refresh_from_db()
        self.assertEqual(self.appointment.status, Appointment.STATUS_COMPLETED)
        self.assertEqual(self.appointment.payment_status, Appointment.PAYMENT_PAID)

    def test_no_show_cannot_be_confirmed_or_rescheduled(self):
        appointment_manager.mark_no_show(self.appointment.id)

        with self.assertRaises(ValidationError):
            appointment_manager.confirm_attendance(self.appointment.id)
        with self.assertRaises(ValidationError):
            appointment_manager.reschedule(self.appointment.id, '2026-03-12', '09:30')

        self.appointment.refresh_from_db()
        self.assertEqual(self.appointment.status, Appointment.STATUS_NO_SHOW)

    def test_complete(self):
        appointment = appointment_manager.complete(self.appointment.id)
        self.assertEqual(appointment.status, Appointment.STATUS_COMPLETED)
        self.assertTrue(appointment.attendance_confirmed)

    def test_cancel_is_terminal(self):
        appointment = appointment_manager.cancel(self.appointment.id)
        self.assertEqual(appointment.status, Appointment.STATUS_CANCELLED)
        with self.assertRaises(ValidationError):
            appointment_manager.complete(self.appointment.id)

    def test_no_show_only_from_active_statuses(self):
        appointment = appointment_manager.mark_no_show(self.appointment.id)
        self.assertEqual(appointment.status, Appointment.STATUS_NO_SHOW)

        completed = self.book(time='16:00')
        appointment_manager.complete(completed.id)
        with self.assertRaises(ValidationError):
            appointment_manager.mark_no_show(completed.id)

    def test_unknown_appointment(self):
        with self.assertRaises(NotFoundError):
            appointment_manager.cancel(424242)


class ReceivePaymentTest(AppointmentFixturesMixin, TestCase):
    """Test payment posting and the receivable it keeps"""

    def setUp(self):
        super().setUp()
        self.appointment = self.book()
        self.expected = timezone.localdate() + timedelta(days=30)

    def test_immediate_payment_settles_on_service_date(self):
        appointment, receivable = appointment_manager.receive_payment(self.appointment.id, 'pix')

        self.assertEqual(appointment.status, Appointment.STATUS_COMPLETED)
        self.assertTrue(appointment.attendance_confirmed)
        self.assertEqual(appointment.payment_status, Appointment.PAYMENT_PAID)
        self.assertEqual(appointment.payment_method, 'pix')
        self.assertIsNotNone(appointment.paid_at)

        self.assertEqual(receivable.status, Receivable.STATUS_PAID)
        self.assertEqual(receivable.amount, Decimal('80.00'))
        self.assertEqual(receivable.service_date, self.day)
        self.assertEqual(receivable.due_date, self.day)
        self.assertEqual(receivable.description, 'Maria Souza - Haircut')
        self.assertEqual(receivable.client, self.client_obj)
        self.assertIsNotNone(receivable.paid_at)

    def test_open_account_stays_pending_until_expected_date(self):
        appointment, receivable = appointment_manager.receive_payment(
            self.appointment.id, 'account', expected_date=self.expected.isoformat()
        )

        self.assertEqual(appointment.status, Appointment.STATUS_COMPLETED)
        self.assertEqual(appointment.payment_status, Appointment.PAYMENT_OPEN_ACCOUNT)
        self.assertIsNone(appointment.paid_at)
        self.assertEqual(receivable.status, Receivable.STATUS_PENDING)
        self.assertEqual(receivable.due_date, self.expected)
        self.assertIsNone(receivable.paid_at)

    def test_open_account_requires_expected_date(self):
        with self.assertRaises(ValidationError):
            appointment_manager.receive_payment(self.appointment.id, 'account')
        self.assertFalse(Receivable.objects.exists())

    def test_open_account_rejects_past_or_today_due_date(self):
        today = timezone.localdate()
        for expected in (today - timedelta(days=1), today):
            with self.assertRaises(ValidationError):
                appointment_manager.receive_payment(self.appointment.id, 'account', expected_date=expected.isoformat())

        self.assertFalse(Receivable.objects.exists())
        self.appointment.refresh_from_db()
        self.assertEqual(self.appointment.payment_status, Appointment.PAYMENT_UNPAID)
        self.assertFalse(Receivable.objects.overdue().exists())

    def test_unknown_method_is_rejected(self):
        with self.assertRaises(ValidationError):
            appointment_manager.receive_payment(self.appointment.id, 'cheque')

    def test_repeated_payment_keeps_one_receivable(self):
        appointment_manager.receive_payment(self.appointment.id, 'account', expected_date=self.expected)
        _, receivable = appointment_manager.receive_payment(self.appointment.id, 'cash')

        self.assertEqual(Receivable.objects.filter(appointment=self.appointment).count(), 1)
        self.assertEqual(receivable.status, Receivable.STATUS_PAID)
        self.assertEqual(receivable.payment_method, 'cash')
        self.assertEqual(receivable.due_date, self.day)

    def test_cancelled_appointment_cannot_be_paid(self):
        appointment_manager.cancel(self.appointment.id)
        with self.assertRaises(ValidationError):
            appointment_manager.receive_payment(self.appointment.id, 'cash')

    def test_orphaned_references_use_fallback_labels(self):
        Client.objects.filter(pk=self.client_obj.pk).delete()
        Service.objects.filter(pk=self.service.pk).delete()

        _, receivable = appointment_manager.receive_payment(self.appointment.id, 'cash')

        self.assertIsNone(receivable.client)
        self.assertEqual(receivable.description, 'Client - Service')

    def test_receivable_failure_rolls_back_appointment(self):
        with mock.patch.object(Receivable, 'save', side_effect=DatabaseError('locked')):
            with self.assertRaises(PersistenceError):
                appointment_manager.receive_payment(self.appointment.id, 'pix')

        self.appointment.refresh_from_db()
        self.assertEqual(self.appointment.payment_status, Appointment.PAYMENT_UNPAID)
        self.assertEqual(self.appointment.status, Appointment.STATUS_CONFIRMED)


class AppointmentViewsTest(AppointmentFixturesMixin, TestCase):
    """Test the JSON endpoints"""

    def setUp(self):
        super().setUp()
        self.user = get_user_model().objects.create_user(username='reception', password='secret')
        self.client.force_login(self.user)

    def post_json(self, url, data=None):
        return self.client.post(url, data=json.dumps(data or {}), content_type='application/json')

    def test_login_required(self):
        self.client.logout()
        response = self.client.get(reverse('appointments:list'))
        self.assertEqual(response.status_code, 302)

    def test_create_endpoint(self):
        response = self.post_json(
            reverse('appointments:create'),
            {
                'client_id': self.client_obj.id,
                'service_id': self.service.id,
                'professional_id': self.professional.id,
                'date': '2026-03-10',
                'time': '10:00',
            },
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['appointment']['price'], '80.00')

    def test_create_endpoint_validation_error(self):
        response = self.post_json(reverse('appointments:create'), {'client_id': self.client_obj.id})
        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.json()['success'])

    def test_invalid_json_body(self):
        response = self.client.post(
            reverse('appointments:create'), data='{not json', content_type='application/json'
        )
        self.assertEqual(response.status_code, 400)

    def test_list_filters_by_date(self):
        self.book()
        self.book(date='2026-03-11')
        response = self.client.get(reverse('appointments:list'), {'date': '2026-03-10'})
        self.assertEqual(len(response.json()['appointments']), 1)

    def test_calendar_events_skip_cancelled(self):
        kept = self.book()
        cancelled = self.book(time='16:00')
        appointment_manager.cancel(cancelled.id)

        response = self.client.get(
            reverse('appointments:calendar-events'), {'start': '2026-03-01', 'end': '2026-04-01'}
        )
        events = response.json()
        self.assertEqual([event['id'] for event in events], [kept.id])
        self.assertEqual(events[0]['title'], 'Maria Souza - Haircut')

    def test_transition_endpoints(self):
        appointment = self.book()
        response = self.client.post(reverse('appointments:confirm', args=[appointment.id]))
        self.assertEqual(response.json()['appointment']['attendance_confirmed'], True)

        response = self.client.post(reverse('appointments:cancel', args=[appointment.id]))
        self.assertEqual(response.json()['appointment']['status'], 'cancelled')

        response = self.client.post(reverse('appointments:complete', args=[appointment.id]))
        self.assertEqual(response.status_code, 400)

    def test_unknown_appointment_returns_404(self):
        response = self.client.post(reverse('appointments:no-show', args=[9999]))
        self.assertEqual(response.status_code, 404)

    def test_receive_payment_endpoint(self):
        appointment = self.book()
        expected = timezone.localdate() + timedelta(days=15)
        response = self.post_json(
            reverse('appointments:receive-payment', args=[appointment.id]),
            {'payment_method': 'account', 'expected_date': expected.isoformat()},
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body['appointment']['payment_status'], 'open_account')
        self.assertEqual(body['receivable']['status'], 'pending')
        self.assertEqual(body['receivable']['due_date'], expected.isoformat())

    def test_receive_payment_endpoint_rejects_past_due_date(self):
        appointment = self.book()
        response = self.post_json(
            reverse('appointments:receive-payment', args=[appointment.id]),
            {'payment_method': 'account', 'expected_date': '2020-10-18'},
        )
        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.json()['success'])

    def test_reschedule_endpoint(self):
        appointment = self.book()
        response = self.post_json(
            reverse('appointments:reschedule', args=[appointment.id]), {'date': '2026-03-20', 'time': '11:00'}
        )
        self.assertEqual(response.json()['appointment']['status'], 'rescheduled')

    def test_detail_lists_receivables(self):
        appointment = self.book()
        appointment_manager.receive_payment(appointment.id, 'cash')
        response = self.client.get(reverse('appointments:detail', args=[appointment.id]))
        self.assertEqual(len(response.json()['appointment']['receivables']), 1)

    def test_upcoming(self):
        tomorrow = timezone.localdate() + timedelta(days=1)
        self.book(date=tomorrow.isoformat())
        response = self.client.get(reverse('appointments:upcoming'))
        self.assertEqual(len(response.json()['appointments']), 1)


class BookingAndPaymentWalkthroughTest(TestCase):
    """Test a 45 minute service booked, completed and paid"""

    def setUp(self):
        self.client_obj = Client.objects.create(name='Maria Souza', phone='11987654321')
        self.service = Service.objects.create(name='Haircut', price=Decimal('80.00'), duration_minutes=45)
        self.professional = Professional.objects.create(name='Ana')

    def book(self, day):
        return appointment_manager.create(self.client_obj.id, self.service.id, self.professional.id, day, '09:00')

    def test_booking_at_nine_ends_at_nine_forty_five(self):
        appointment = self.book('2024-01-01')

        self.assertEqual(timezone.localtime(appointment.end_time).time(), time(9, 45))
        self.assertEqual(appointment.status, 'confirmed')
        self.assertEqual(appointment.payment_status, 'unpaid')

    def test_pix_payment_on_completed_appointment(self):
        appointment = self.book('2024-01-10')
        appointment_manager.complete(appointment.id)

        appointment, receivable = appointment_manager.receive_payment(appointment.id, 'pix')

        self.assertEqual(receivable.amount, Decimal('80.00'))
        self.assertEqual(receivable.due_date, date(2024, 1, 10))
        self.assertEqual(receivable.status, 'paid')
        self.assertEqual(appointment.payment_status, 'paid')

    def test_open_account_payment(self):
        appointment = self.book('2024-01-10')

        with mock.patch('django.utils.timezone.now', return_value=combine(date(2024, 1, 10), time(10, 0))):
            appointment, receivable = appointment_manager.receive_payment(
                appointment.id, 'account', expected_date='2024-02-09'
            )

        self.assertEqual(receivable.status, 'pending')
        self.assertEqual(receivable.due_date, date(2024, 2, 9))
        self.assertEqual(appointment.payment_status, 'open_account')
        self.assertIsNone(appointment.paid_at)
