"""
Tests for delinquency, receivables, payables and the cash drawer
"""
import json
from datetime import date, timedelta
from decimal import Decimal
from types import SimpleNamespace

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone

from salon.appointments.models import Appointment
from salon.appointments.services import appointment_manager
from salon.catalog.models import Service
from salon.clients.models import Client
from salon.core.exceptions import NotFoundError, ValidationError
from salon.staff.models import Professional
from . import services
from .delinquency import DANGER, OK, WARNING, classify, compute_overdue, overdue_days
from .models import CashSession, Payable, Receivable
from .payments import PaymentMethod, payment_method_label


def receivable_row(pk, client_id, due_date, status='pending'):
    return SimpleNamespace(id=pk, client_id=client_id, status=status, due_date=due_date)


class OverdueDaysTest(TestCase):
    """Test the overdue day count and its classification"""

    def test_due_today_is_not_overdue(self):
        self.assertEqual(overdue_days('pending', date(2026, 5, 1), date(2026, 5, 1)), 0)

    def test_pending_past_due(self):
        self.assertEqual(overdue_days('pending', date(2026, 4, 1), date(2026, 5, 1)), 30)

    def test_paid_is_never_overdue(self):
        self.assertEqual(overdue_days('paid', date(2025, 1, 1), date(2026, 5, 1)), 0)

    def test_future_due_date(self):
        self.assertEqual(overdue_days('pending', date(2026, 6, 1), date(2026, 5, 1)), 0)

    def test_accepts_iso_strings(self):
        self.assertEqual(overdue_days('pending', '2026-04-21', '2026-05-01'), 10)

    def test_classification_thresholds(self):
        self.assertEqual(classify(0), OK)
        self.assertEqual(classify(19), OK)
        self.assertEqual(classify(20), WARNING)
        self.assertEqual(classify(30), WARNING)
        self.assertEqual(classify(31), DANGER)


class ComputeOverdueTest(TestCase):
    """Test per-receivable rows and per-client aggregation"""

    def setUp(self):
        self.as_of = date(2026, 5, 1)

    def test_client_takes_worst_receivable(self):
        report = compute_overdue(
            [
                receivable_row(1, 7, self.as_of - timedelta(days=5)),
                receivable_row(2, 7, self.as_of - timedelta(days=35)),
                receivable_row(3, 7, self.as_of - timedelta(days=50), status='paid'),
                receivable_row(4, 8, self.as_of + timedelta(days=3)),
            ],
            self.as_of,
        )

        self.assertEqual([row.receivable_id for row in report.receivables], [1, 2])
        summary = report.for_client(7)
        self.assertEqual(summary.overdue_days, 35)
        self.assertEqual(summary.overdue_count, 2)
        self.assertEqual(summary.classification, DANGER)
        self.assertIsNone(report.for_client(8))

    def test_receivable_without_client_is_listed_but_not_aggregated(self):
        report = compute_overdue([receivable_row(1, None, self.as_of - timedelta(days=21))], self.as_of)
        self.assertEqual(len(report.receivables), 1)
        self.assertEqual(report.receivables[0].classification, WARNING)
        self.assertEqual(report.clients, {})

    def test_same_input_same_output(self):
        rows = [receivable_row(1, 7, self.as_of - timedelta(days=22))]
        self.assertEqual(compute_overdue(rows, self.as_of), compute_overdue(rows, self.as_of))

    def test_thirty_one_days_is_danger(self):
        report = compute_overdue([receivable_row(1, 7, '2024-01-30')], '2024-03-01')
        self.assertEqual(report.receivables[0].overdue_days, 31)
        self.assertEqual(report.receivables[0].classification, DANGER)

    def test_queryset_overdue_matches_derived_state(self):
        Receivable.objects.create(description='Late', amount=10, due_date=self.as_of - timedelta(days=1))
        Receivable.objects.create(description='Today', amount=10, due_date=self.as_of)
        Receivable.objects.create(
            description='Settled', amount=10, due_date=self.as_of - timedelta(days=9), status='paid'
        )

        overdue = Receivable.objects.overdue(self.as_of)
        self.assertEqual(list(overdue.values_list('description', flat=True)), ['Late'])


class PaymentMethodTest(TestCase):
    def test_labels(self):
        self.assertEqual(payment_method_label(PaymentMethod.ACCOUNT), 'Open account')
        self.assertEqual(payment_method_label('pix'), 'Pix')
        self.assertEqual(payment_method_label(''), 'Not informed')
        self.assertEqual(payment_method_label('cheque'), 'Not informed')


class ReceivableServiceTest(TestCase):
    """Test settling receivables"""

    def setUp(self):
        self.client_obj = Client.objects.create(name='Carla', phone='11912345678')
        service = Service.objects.create(name='Coloring', price=Decimal('150.00'))
        professional = Professional.objects.create(name='Ana')
        self.appointment = appointment_manager.create(
            self.client_obj.id, service.id, professional.id, '2026-03-10', '10:00'
        )

    def test_mark_paid_syncs_appointment(self):
        _, receivable = appointment_manager.receive_payment(
            self.appointment.id, 'account', expected_date=timezone.localdate() + timedelta(days=30)
        )

        receivable = services.mark_receivable_paid(receivable.id, method='pix')

        self.assertEqual(receivable.status, Receivable.STATUS_PAID)
        self.assertEqual(receivable.payment_method, 'pix')
        self.assertIsNotNone(receivable.paid_at)
        self.appointment.refresh_from_db()
        self.assertEqual(self.appointment.payment_status, Appointment.PAYMENT_PAID)
        self.assertEqual(self.appointment.paid_at, receivable.paid_at)

    def test_mark_paid_standalone_receivable(self):
        receivable = services.create_receivable('Gift card', '50', '2026-05-01', client=self.client_obj)
        self.assertEqual(receivable.client_name, 'Carla')

        receivable = services.mark_receivable_paid(receivable.id)
        self.assertEqual(receivable.status, Receivable.STATUS_PAID)
        self.assertEqual(receivable.payment_method, '')

    def test_mark_paid_unknown_receivable(self):
        with self.assertRaises(NotFoundError):
            services.mark_receivable_paid(9999)

    def test_create_receivable_rejects_negative_amount(self):
        with self.assertRaises(ValidationError):
            services.create_receivable('Refund', '-10', '2026-05-01')


class PayableServiceTest(TestCase):
    def test_create_and_pay(self):
        payable = services.create_payable('Rent', '2500.00', '2026-05-05', 'Facilities')
        self.assertEqual(payable.status, Payable.STATUS_PENDING)
        self.assertEqual(payable.category, 'Facilities')

        payable = services.mark_payable_paid(payable.id)
        self.assertEqual(payable.status, Payable.STATUS_PAID)
        self.assertIsNotNone(payable.paid_at)

    def test_default_category(self):
        payable = services.create_payable('Towels', '80', date(2026, 5, 5), None)
        self.assertEqual(payable.category, 'General')

    def test_description_required(self):
        with self.assertRaises(ValidationError):
            services.create_payable('', '10', '2026-05-05')

    def test_invalid_due_date(self):
        with self.assertRaises(ValidationError):
            services.create_payable('Rent', '10', '05/05/2026')


class CashSessionTest(TestCase):
    """Test that only one cash session is open at a time"""

    def setUp(self):
        self.user = get_user_model().objects.create_user(username='owner', password='secret')

    def test_open_and_close(self):
        session = services.open_cash_session(self.user, '100.00')
        self.assertEqual(session.status, CashSession.STATUS_OPEN)
        self.assertEqual(services.current_cash_session(), session)

        session = services.close_cash_session(session.id, self.user, '450.50')
        self.assertEqual(session.status, CashSession.STATUS_CLOSED)
        self.assertEqual(session.closing_amount, Decimal('450.50'))
        self.assertEqual(session.closed_by, self.user)
        self.assertIsNone(services.current_cash_session())

    def test_second_open_is_rejected(self):
        services.open_cash_session(self.user, '100.00')
        with self.assertRaises(ValidationError):
            services.open_cash_session(self.user, '50.00')
        self.assertEqual(CashSession.objects.filter(status=CashSession.STATUS_OPEN).count(), 1)

    def test_reopen_after_close(self):
        session = services.open_cash_session(self.user, '100.00')
        services.close_cash_session(session.id, self.user, '100.00')
        services.open_cash_session(self.user, '80.00')
        self.assertEqual(CashSession.objects.count(), 2)

    def test_close_twice_is_rejected(self):
        session = services.open_cash_session(self.user, '100.00')
        services.close_cash_session(session.id, self.user, '100.00')
        with self.assertRaises(ValidationError):
            services.close_cash_session(session.id, self.user, '100.00')


class FinanceOverviewTest(TestCase):
    def test_balance_counts_paid_money_only(self):
        as_of = date(2026, 5, 20)
        paid = services.create_receivable('Paid', '300', '2026-05-02')
        services.mark_receivable_paid(paid.id)
        services.create_receivable('Late', '120', '2026-05-01')
        services.create_receivable('Future', '90', '2026-06-01')
        rent = services.create_payable('Rent', '100', '2026-05-05')
        services.mark_payable_paid(rent.id)
        services.create_payable('Supplies', '40', '2026-05-25')

        overview = services.finance_overview(as_of)

        self.assertEqual(overview['income_total'], Decimal('510.00'))
        self.assertEqual(overview['income_received'], Decimal('300.00'))
        self.assertEqual(overview['income_pending'], Decimal('210.00'))
        self.assertEqual(overview['expense_paid'], Decimal('100.00'))
        self.assertEqual(overview['balance'], Decimal('200.00'))
        self.assertEqual(overview['overdue_count'], 1)

    def test_totals_keep_two_decimal_places(self):
        services.create_receivable('Coloring', '150', '2026-05-02')

        overview = services.finance_overview(date(2026, 5, 1))

        self.assertEqual(str(overview['income_total']), '150.00')
        self.assertEqual(str(overview['income_pending']), '150.00')
        self.assertEqual(str(overview['expense_total']), '0.00')
        self.assertEqual(str(overview['balance']), '0.00')


class FinanceViewsTest(TestCase):
    """Test the JSON endpoints"""

    def setUp(self):
        self.user = get_user_model().objects.create_user(username='owner', password='secret')
        self.client.force_login(self.user)
        self.maria = Client.objects.create(name='Maria', phone='11987654321')
        self.joao = Client.objects.create(name='Joao', phone='11911112222')

    def post_json(self, url, data=None):
        return self.client.post(url, data=json.dumps(data or {}), content_type='application/json')

    def test_debtors_sorted_worst_first(self):
        today = timezone.localdate()
        Receivable.objects.create(
            client=self.maria, client_name='Maria', amount=50, due_date=today - timedelta(days=25)
        )
        Receivable.objects.create(
            client=self.joao, client_name='Joao', amount=50, due_date=today - timedelta(days=40)
        )
        Receivable.objects.create(
            client=self.joao, client_name='Joao', amount=50, due_date=today - timedelta(days=2)
        )

        rows = self.client.get(reverse('finance:debtors')).json()['debtors']

        self.assertEqual([row['client_name'] for row in rows], ['Joao', 'Maria'])
        self.assertEqual(rows[0]['overdue_days'], 40)
        self.assertEqual(rows[0]['overdue_count'], 2)
        self.assertEqual(rows[0]['delinquency'], 'danger')
        self.assertEqual(rows[1]['delinquency'], 'warning')

    def test_receivable_create_and_pay(self):
        response = self.post_json(
            reverse('finance:receivable-create'),
            {'client': self.maria.id, 'description': 'Package', 'amount': '200.00', 'due_date': '2026-06-01'},
        )
        self.assertEqual(response.status_code, 201)
        receivable_id = response.json()['receivable']['id']

        response = self.post_json(reverse('finance:receivable-pay', args=[receivable_id]), {'payment_method': 'cash'})
        body = response.json()['receivable']
        self.assertEqual(body['status'], 'paid')
        self.assertEqual(body['payment_method_label'], 'Cash')

    def test_receivable_form_errors(self):
        response = self.post_json(reverse('finance:receivable-create'), {'description': 'No amount'})
        self.assertEqual(response.status_code, 400)
        self.assertIn('amount', response.json()['errors'])

    def test_pay_unknown_receivable(self):
        response = self.post_json(reverse('finance:receivable-pay', args=[9999]))
        self.assertEqual(response.status_code, 404)

    def test_cash_session_endpoints(self):
        response = self.post_json(reverse('finance:cash-open'), {'opening_amount': '100'})
        self.assertEqual(response.status_code, 201)
        session_id = response.json()['session']['id']

        response = self.post_json(reverse('finance:cash-open'), {'opening_amount': '100'})
        self.assertEqual(response.status_code, 400)

        response = self.post_json(reverse('finance:cash-close', args=[session_id]), {})
        self.assertEqual(response.status_code, 400)

        response = self.post_json(reverse('finance:cash-close', args=[session_id]), {'closing_amount': '380'})
        self.assertEqual(response.json()['session']['status'], 'closed')

        current = self.client.get(reverse('finance:cash-current')).json()
        self.assertIsNone(current['current'])
        self.assertEqual(len(current['history']), 1)

    def test_payables_and_overview(self):
        self.post_json(
            reverse('finance:payable-create'),
            {'description': 'Rent', 'category': 'Facilities', 'amount': '1000', 'due_date': '2026-05-05'},
        )
        payables = self.client.get(reverse('finance:payable-list')).json()['payables']
        self.assertEqual(len(payables), 1)

        self.post_json(reverse('finance:payable-pay', args=[payables[0]['id']]))
        overview = self.client.get(reverse('finance:overview')).json()['overview']
        self.assertEqual(overview['expense_paid'], '1000.00')
        self.assertEqual(overview['balance'], '-1000.00')
