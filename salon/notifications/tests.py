"""
Tests for WhatsApp delivery, the message history and the automation scans
"""
from datetime import date, datetime, timedelta
from decimal import Decimal
from io import StringIO
from unittest import mock

from django.contrib.auth import get_user_model
from django.contrib.auth.models import Permission
from django.core.management import call_command
from django.test import TestCase, override_settings
from django.urls import reverse
from django.utils import timezone

from salon.appointments.models import Appointment
from salon.catalog.models import Service
from salon.clients.models import Client
from salon.core.exceptions import NotifyError
from salon.finance.models import Receivable
from salon.staff.models import Professional
from . import automation
from .messages import generate_message
from .models import MessageHistory
from .notifier import ConsoleNotifier, NotifyResult, TwilioWhatsAppNotifier, get_notifier, to_e164
from .services import NotificationService
from .tasks import run_daily_automations_task


class FailingNotifier(ConsoleNotifier):
    provider = 'failing'

    def deliver(self, to, body, metadata):
        raise NotifyError('gateway unavailable')


class MessageTemplateTest(TestCase):
    """Test message rendering"""

    def test_birthday(self):
        content = generate_message('birthday', client_name='Maria')
        self.assertTrue(content.startswith('Happy birthday, Maria!'))

    def test_overdue_invoice(self):
        content = generate_message('overdue_invoice', client_name='Joao', overdue_days=31)
        self.assertIn('open for 31 days', content)

    def test_missing_variables_render_empty(self):
        content = generate_message('appointment_reminder_24h', client_name='Ana')
        self.assertIn('tomorrow at .', content)

    def test_general_returns_free_text(self):
        self.assertEqual(generate_message('general', content='Promo today'), 'Promo today')
        self.assertEqual(generate_message('unknown-type', content='Hi'), 'Hi')


class NotifierTest(TestCase):
    """Test the gateway backends"""

    def test_console_notifier(self):
        result = ConsoleNotifier().send('11987654321', 'Hello', {'type': 'general'})
        self.assertTrue(result.ok)
        self.assertEqual(result.provider, 'mock-whatsapp')
        self.assertTrue(result.external_id.startswith('mock-'))

    def test_e164(self):
        self.assertEqual(to_e164('(11) 98765-4321'), '+5511987654321')
        self.assertEqual(to_e164('+1 415 555 0100'), '+14155550100')
        self.assertEqual(to_e164(''), '')

    @override_settings(TWILIO_ACCOUNT_SID='', TWILIO_AUTH_TOKEN='')
    def test_twilio_not_configured_fails_without_raising(self):
        result = TwilioWhatsAppNotifier().send('11987654321', 'Hello')
        self.assertFalse(result.ok)
        self.assertIn('not configured', result.error)

    @override_settings(TWILIO_ACCOUNT_SID='AC123', TWILIO_AUTH_TOKEN='token', TWILIO_WHATSAPP_NUMBER='+14155238886')
    def test_twilio_sends_whatsapp_addresses(self):
        with mock.patch('salon.notifications.notifier.TwilioClient') as client_class:
            client_class.return_value.messages.create.return_value = mock.Mock(sid='SM123')
            result = TwilioWhatsAppNotifier().send('11987654321', 'Hello')

        self.assertTrue(result.ok)
        self.assertEqual(result.external_id, 'SM123')
        client_class.return_value.messages.create.assert_called_once_with(
            body='Hello', from_='whatsapp:+14155238886', to='whatsapp:+5511987654321'
        )

    @override_settings(TWILIO_ACCOUNT_SID='AC123', TWILIO_AUTH_TOKEN='token', TWILIO_WHATSAPP_NUMBER='+14155238886')
    def test_twilio_error_becomes_failed_result(self):
        with mock.patch('salon.notifications.notifier.TwilioClient') as client_class:
            client_class.return_value.messages.create.side_effect = RuntimeError('21211 invalid To')
            result = TwilioWhatsAppNotifier().send('11987654321', 'Hello')

        self.assertFalse(result.ok)
        self.assertIn('21211', result.error)

    @override_settings(SALON_NOTIFIER_BACKEND='salon.notifications.notifier.TwilioWhatsAppNotifier')
    def test_backend_from_settings(self):
        self.assertIsInstance(get_notifier(), TwilioWhatsAppNotifier)


class NotificationServiceTest(TestCase):
    """Test send-then-log"""

    def setUp(self):
        self.maria = Client.objects.create(name='Maria', phone='11987654321')

    def test_sent_is_logged(self):
        log = NotificationService(ConsoleNotifier()).send_to_client(self.maria, 'birthday', 'Hi')
        self.assertEqual(log.status, MessageHistory.STATUS_SENT)
        self.assertEqual(log.provider, 'mock-whatsapp')
        self.assertTrue(log.external_id)

    def test_failure_is_logged_not_raised(self):
        log = NotificationService(FailingNotifier()).send_to_client(self.maria, 'birthday', 'Hi')
        self.assertEqual(log.status, MessageHistory.STATUS_FAILED)
        self.assertEqual(log.error_message, 'gateway unavailable')

    def test_short_phone_is_skipped(self):
        notifier = mock.Mock()
        client = Client.objects.create(name='No phone', phone='1234')

        log = NotificationService(notifier).send_to_client(client, 'birthday', 'Hi')

        self.assertEqual(log.status, MessageHistory.STATUS_SKIPPED)
        notifier.send.assert_not_called()

    def test_opted_out_is_skipped(self):
        notifier = mock.Mock()
        self.maria.accepts_messages = False
        self.maria.save()

        log = NotificationService(notifier).send_to_client(self.maria, 'birthday', 'Hi')

        self.assertEqual(log.status, MessageHistory.STATUS_SKIPPED)
        notifier.send.assert_not_called()

    def test_metadata_carries_client_and_type(self):
        notifier = mock.Mock()
        notifier.send.return_value = NotifyResult(ok=True, provider='test', external_id='x1')

        NotificationService(notifier).send_to_client(self.maria, 'general', 'Hi', metadata={'extra': '1'})

        notifier.send.assert_called_once_with(
            to='11987654321',
            body='Hi',
            metadata={'clientId': str(self.maria.id), 'type': 'general', 'extra': '1'},
        )

    def test_bulk_message_personalizes(self):
        Client.objects.create(name='Joao', phone='11911112222')
        results = NotificationService(ConsoleNotifier()).send_bulk_message(
            Client.objects.all(), 'Hi {client_name}, 10% off this week'
        )
        self.assertEqual(results, {'sent': 2, 'failed': 0, 'skipped': 0})
        self.assertTrue(MessageHistory.objects.filter(content='Hi Joao, 10% off this week').exists())


class AutomationTestMixin:
    def setUp(self):
        self.service = Service.objects.create(name='Manicure', price=Decimal('40.00'), duration_minutes=60)
        self.professional = Professional.objects.create(name='Ana')
        self.now = timezone.make_aware(datetime(2026, 3, 10, 8, 0))

    def appointment(self, client, start, status=Appointment.STATUS_CONFIRMED):
        return Appointment.objects.create(
            client=client,
            service=self.service,
            professional=self.professional,
            start_time=start,
            end_time=start + timedelta(hours=1),
            status=status,
            price=self.service.price,
        )


class ReminderScanTest(AutomationTestMixin, TestCase):
    """Test the 24h reminder window"""

    def test_window_is_half_open(self):
        maria = Client.objects.create(name='Maria', phone='11987654321')
        inside = self.appointment(maria, self.now + timedelta(hours=24, minutes=30))
        self.appointment(maria, self.now + timedelta(hours=25))
        self.appointment(maria, self.now + timedelta(hours=23, minutes=59))
        self.appointment(maria, self.now + timedelta(hours=24, minutes=10), status=Appointment.STATUS_CANCELLED)
        at_start = self.appointment(maria, self.now + timedelta(hours=24))

        results = automation.send_24h_reminders(now=self.now)

        self.assertEqual(results, {'sent': 2, 'failed': 0, 'skipped': 0})
        reminded = set(
            MessageHistory.objects.filter(type='appointment_reminder_24h').values_list('appointment_id', flat=True)
        )
        self.assertEqual(reminded, {inside.id, at_start.id})

    def test_reminder_uses_local_time(self):
        maria = Client.objects.create(name='Maria', phone='11987654321')
        self.appointment(maria, self.now + timedelta(hours=24, minutes=30))

        automation.send_24h_reminders(now=self.now)

        log = MessageHistory.objects.get()
        self.assertIn('tomorrow at 08:30', log.content)

    def test_rerun_sends_again(self):
        maria = Client.objects.create(name='Maria', phone='11987654321')
        self.appointment(maria, self.now + timedelta(hours=24, minutes=30))

        automation.send_24h_reminders(now=self.now)
        automation.send_24h_reminders(now=self.now)

        self.assertEqual(MessageHistory.objects.count(), 2)

    def test_client_without_phone_is_logged_as_skipped(self):
        client = Client.objects.create(name='Lia', phone='')
        self.appointment(client, self.now + timedelta(hours=24, minutes=30))

        results = automation.send_24h_reminders(now=self.now)

        self.assertEqual(results['skipped'], 1)
        self.assertEqual(MessageHistory.objects.get().status, MessageHistory.STATUS_SKIPPED)


class BirthdayScanTest(TestCase):
    """Test birthday matching on month and day"""

    def test_matches_month_and_day_ignoring_year(self):
        Client.objects.create(name='Today', phone='11987654321', birth_date=date(1990, 7, 14))
        Client.objects.create(name='Tomorrow', phone='11987654322', birth_date=date(1990, 7, 15))
        Client.objects.create(name='Unknown', phone='11987654323')

        results = automation.send_birthday_greetings(today=date(2026, 7, 14))

        self.assertEqual(results, {'sent': 1, 'failed': 0, 'skipped': 0})
        log = MessageHistory.objects.get()
        self.assertEqual(log.client.name, 'Today')
        self.assertEqual(log.type, 'birthday')

    def test_opted_out_client_is_skipped_without_gateway_call(self):
        Client.objects.create(name='Lu', phone='11987654321', birth_date=date(1990, 6, 15))
        Client.objects.create(
            name='Bea', phone='11987654322', birth_date=date(1990, 6, 15), accepts_messages=False
        )
        notifier = mock.Mock()
        notifier.send.return_value = NotifyResult(ok=True, provider='test', external_id='x1')

        with mock.patch('salon.notifications.services.get_notifier', return_value=notifier):
            results = automation.send_birthday_greetings(today=date(2024, 6, 15))

        self.assertEqual(results, {'sent': 1, 'failed': 0, 'skipped': 1})
        self.assertEqual(notifier.send.call_count, 1)
        self.assertEqual(MessageHistory.objects.get(client__name='Bea').status, MessageHistory.STATUS_SKIPPED)
        self.assertEqual(MessageHistory.objects.get(client__name='Lu').status, MessageHistory.STATUS_SENT)

    @override_settings(SALON_NOTIFIER_BACKEND='salon.notifications.tests.FailingNotifier')
    def test_failed_send_is_logged(self):
        Client.objects.create(name='Today', phone='11987654321', birth_date=date(1990, 7, 14))

        results = automation.send_birthday_greetings(today=date(2026, 7, 14))

        self.assertEqual(results['failed'], 1)
        self.assertEqual(MessageHistory.objects.get().status, MessageHistory.STATUS_FAILED)


class OverdueScanTest(TestCase):
    """Test the 30 day overdue reminder"""

    def setUp(self):
        self.today = date(2026, 5, 1)
        self.maria = Client.objects.create(name='Maria', phone='11987654321')

    def receivable(self, days_overdue, status=Receivable.STATUS_PENDING, client=None):
        return Receivable.objects.create(
            client=client or self.maria,
            client_name='Maria',
            amount=Decimal('90.00'),
            due_date=self.today - timedelta(days=days_overdue),
            status=status,
        )

    def test_threshold_is_inclusive(self):
        self.receivable(30)
        self.receivable(29)
        self.receivable(45, status=Receivable.STATUS_PAID)

        results = automation.send_overdue_reminders(today=self.today)

        self.assertEqual(results, {'sent': 1, 'failed': 0, 'skipped': 0})
        log = MessageHistory.objects.get()
        self.assertEqual(log.type, 'overdue_invoice')
        self.assertIn('30 days', log.content)

    def test_one_message_per_receivable(self):
        self.receivable(31)
        self.receivable(60)

        automation.send_overdue_reminders(today=self.today)

        self.assertEqual(MessageHistory.objects.filter(client=self.maria).count(), 2)


class DailyAutomationTest(TestCase):
    """Test running all scans together"""

    def test_failing_scan_does_not_stop_the_others(self):
        Client.objects.create(name='Today', phone='11987654321', birth_date=timezone.localdate())

        with mock.patch.dict(
            automation.SCANS, {'reminders': mock.Mock(side_effect=RuntimeError('db gone'))}
        ):
            summary = automation.run_daily_automations()

        self.assertEqual(summary['reminders'], {'error': 'db gone'})
        self.assertEqual(summary['birthdays']['sent'], 1)
        self.assertIn('overdue', summary)

    def test_task_fans_out(self):
        Client.objects.create(name='Today', phone='11987654321', birth_date=timezone.localdate())

        result = run_daily_automations_task.delay()

        self.assertIn('group_id', result.get())
        self.assertEqual(MessageHistory.objects.filter(type='birthday').count(), 1)

    def test_management_command(self):
        Client.objects.create(name='Today', phone='11987654321', birth_date=timezone.localdate())
        out = StringIO()

        call_command('run_automations', stdout=out)

        output = out.getvalue()
        self.assertIn('birthdays: 1 sent, 0 failed, 0 skipped', output)
        self.assertIn('reminders: 0 sent', output)

    def test_management_command_single_scan(self):
        out = StringIO()
        call_command('run_automations', '--only', 'overdue', stdout=out)
        self.assertIn('overdue: 0 sent', out.getvalue())
        self.assertNotIn('birthdays', out.getvalue())


class NotificationViewsTest(TestCase):
    """Test the history and trigger endpoints"""

    def setUp(self):
        self.user = get_user_model().objects.create_user(username='reception', password='secret')
        self.client.force_login(self.user)
        self.maria = Client.objects.create(name='Maria', phone='11987654321')
        service = NotificationService(ConsoleNotifier())
        service.send_to_client(self.maria, 'birthday', 'Happy birthday')
        service.send_to_client(Client.objects.create(name='Lia', phone=''), 'general', 'Hello')

    def grant_send_permission(self):
        self.user.user_permissions.add(Permission.objects.get(codename='add_messagehistory'))

    def test_history_filters(self):
        response = self.client.get(reverse('notifications:history'), {'status': 'skipped'})
        messages = response.json()['messages']
        self.assertEqual(len(messages), 1)
        self.assertEqual(messages[0]['client_name'], 'Lia')

    def test_client_history(self):
        response = self.client.get(reverse('notifications:client-history', args=[self.maria.id]))
        self.assertEqual([m['type'] for m in response.json()['messages']], ['birthday'])

    def test_stats(self):
        stats = self.client.get(reverse('notifications:stats-api')).json()
        self.assertEqual(stats['total'], 2)
        self.assertEqual(stats['sent'], 1)
        self.assertEqual(stats['skipped'], 1)
        self.assertEqual(stats['by_type']['birthday'], 1)

    def test_bulk_send_requires_permission(self):
        response = self.client.post(reverse('notifications:bulk-send'), {'message': 'Hi', 'send_to_all': '1'})
        self.assertEqual(response.status_code, 403)

    def test_bulk_send(self):
        self.grant_send_permission()
        response = self.client.post(
            reverse('notifications:bulk-send'), {'message': 'Hi {client_name}', 'send_to_all': '1'}
        )
        self.assertEqual(response.status_code, 202)
        self.assertEqual(response.json()['client_count'], 2)
        self.assertTrue(MessageHistory.objects.filter(content='Hi Maria').exists())

    def test_bulk_send_requires_message(self):
        self.grant_send_permission()
        response = self.client.post(reverse('notifications:bulk-send'), {'send_to_all': '1'})
        self.assertEqual(response.status_code, 400)

    def test_run_automations(self):
        self.grant_send_permission()
        response = self.client.post(reverse('notifications:run-automations'))
        self.assertEqual(response.status_code, 202)
        self.assertIn('task_id', response.json())
