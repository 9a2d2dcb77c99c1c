"""
Tests for reports, dashboard alerts and the Excel export
"""
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from io import BytesIO

from django.contrib.auth import get_user_model
from django.test import RequestFactory, TestCase
from django.urls import reverse
from django.utils import timezone
from openpyxl import load_workbook

from salon.appointments.models import Appointment
from salon.catalog.models import Service
from salon.clients.models import Client
from salon.core.context_processors import dashboard_alerts as alerts_context
from salon.core.exceptions import ValidationError
from salon.finance.models import Receivable
from salon.staff.models import Professional
from . import reports


class ReportFixturesMixin:
    def setUp(self):
        self.maria = Client.objects.create(name='Maria', phone='11987654321')
        self.haircut = Service.objects.create(name='Haircut', price=Decimal('80.00'))
        self.nails = Service.objects.create(name='Nails', price=Decimal('40.00'))
        self.ana = Professional.objects.create(name='Ana', commission_percent=Decimal('50'))
        self.bia = Professional.objects.create(name='Bia', commission_percent=Decimal('10'))

    def appointment(self, day, service, professional, status=Appointment.STATUS_COMPLETED, at=time(10, 0)):
        start = timezone.make_aware(datetime.combine(day, at))
        return Appointment.objects.create(
            client=self.maria,
            service=service,
            professional=professional,
            start_time=start,
            end_time=start + timedelta(hours=1),
            status=status,
            price=service.price,
        )


class PeriodRangeTest(TestCase):
    def test_ranges(self):
        reference = date(2026, 12, 15)
        self.assertEqual(reports.period_range('day', reference), (reference, date(2026, 12, 16)))
        self.assertEqual(reports.period_range('month', reference), (date(2026, 12, 1), date(2027, 1, 1)))
        self.assertEqual(reports.period_range('year', reference), (date(2026, 1, 1), date(2027, 1, 1)))

    def test_unknown_period(self):
        with self.assertRaises(ValidationError):
            reports.period_range('week', date(2026, 1, 1))


class PeriodReportTest(ReportFixturesMixin, TestCase):
    """Test the period report numbers"""

    def test_month_report(self):
        self.appointment(date(2026, 3, 2), self.haircut, self.ana)
        self.appointment(date(2026, 3, 3), self.haircut, self.ana, status=Appointment.STATUS_CONFIRMED)
        self.appointment(date(2026, 3, 3), self.nails, self.bia, at=time(15, 0))
        self.appointment(date(2026, 4, 1), self.nails, self.bia)
        Receivable.objects.create(amount=Decimal('80.00'), due_date=date(2026, 3, 2), status='paid')
        Receivable.objects.create(amount=Decimal('40.00'), due_date=date(2026, 3, 20))
        Receivable.objects.create(amount=Decimal('999.00'), due_date=date(2026, 4, 2))

        report = reports.period_report('month', date(2026, 3, 15))

        self.assertEqual(report['total_appointments'], 3)
        self.assertEqual(report['status_counts']['completed'], 2)
        self.assertEqual(report['status_counts']['confirmed'], 1)
        self.assertEqual(report['status_counts']['cancelled'], 0)
        self.assertEqual(report['revenue'], Decimal('120.00'))
        self.assertEqual(report['received'], Decimal('80.00'))
        self.assertEqual(report['top_services'][0], {'name': 'Haircut', 'count': 2})
        self.assertEqual(report['appointments_per_day'], {'2026-03-02': 1, '2026-03-03': 2})

    def test_professional_commission(self):
        self.appointment(date(2026, 3, 2), self.haircut, self.ana)
        self.appointment(date(2026, 3, 3), self.haircut, self.ana, status=Appointment.STATUS_CONFIRMED)
        self.appointment(date(2026, 3, 3), self.nails, self.bia)

        rows = reports.professional_report(date(2026, 3, 1), date(2026, 4, 1))

        self.assertEqual([row['name'] for row in rows], ['Ana', 'Bia'])
        self.assertEqual(rows[0]['appointments'], 2)
        self.assertEqual(rows[0]['revenue'], Decimal('80.00'))
        self.assertEqual(rows[0]['commission'], Decimal('40.00'))
        self.assertEqual(rows[1]['commission'], Decimal('4.00'))

    def test_professional_without_appointments_is_left_out(self):
        self.appointment(date(2026, 3, 2), self.haircut, self.ana)
        rows = reports.professional_report(date(2026, 3, 1), date(2026, 4, 1))
        self.assertEqual([row['name'] for row in rows], ['Ana'])


class DashboardAlertsTest(ReportFixturesMixin, TestCase):
    """Test the dashboard alert rules"""

    def test_no_alerts(self):
        self.assertEqual(reports.dashboard_alerts(date(2026, 3, 2))['alerts'], [])

    def test_all_alerts(self):
        today = date(2026, 3, 2)
        Receivable.objects.create(amount=Decimal('10.00'), due_date=today - timedelta(days=1))
        Client.objects.create(name='Birthday', birth_date=date(1990, 3, 2))
        for hour in range(8, 19):
            self.appointment(today, self.nails, self.bia, status=Appointment.STATUS_CONFIRMED, at=time(hour, 0))

        data = reports.dashboard_alerts(today)

        self.assertEqual(data['appointments_today'], 11)
        self.assertEqual([alert['id'] for alert in data['alerts']], ['overdue', 'birthday', 'busy-day'])

    def test_ten_appointments_is_not_busy(self):
        today = date(2026, 3, 2)
        for hour in range(8, 18):
            self.appointment(today, self.nails, self.bia, status=Appointment.STATUS_CONFIRMED, at=time(hour, 0))
        self.assertEqual(reports.dashboard_alerts(today)['alerts'], [])

    def test_context_processor(self):
        request = RequestFactory().get('/')
        request.user = get_user_model().objects.create_user(username='owner', password='secret')
        Receivable.objects.create(amount=Decimal('10.00'), due_date=timezone.localdate() - timedelta(days=3))

        context = alerts_context(request)

        self.assertEqual(context['dashboard_alerts_count'], 1)
        self.assertEqual(context['dashboard_alerts'][0]['tone'], 'danger')


class AnalyticsViewsTest(ReportFixturesMixin, TestCase):
    """Test the JSON endpoints and the Excel export"""

    def setUp(self):
        super().setUp()
        self.user = get_user_model().objects.create_user(username='owner', password='secret')
        self.client.force_login(self.user)

    def test_period_report_endpoint(self):
        self.appointment(date(2026, 3, 2), self.haircut, self.ana)
        Receivable.objects.create(amount=Decimal('80'), due_date=date(2026, 3, 2), status='paid')
        body = self.client.get(reverse('analytics:period-report'), {'period': 'day', 'date': '2026-03-02'}).json()

        self.assertEqual(body['total_appointments'], 1)
        self.assertEqual(body['start'], '2026-03-02')
        self.assertEqual(body['professionals'][0]['commission'], '40.00')
        self.assertEqual(body['professionals'][0]['revenue'], '80.00')
        self.assertEqual(body['revenue'], '80.00')
        self.assertEqual(body['received'], '80.00')

    def test_bad_period(self):
        response = self.client.get(reverse('analytics:period-report'), {'period': 'week'})
        self.assertEqual(response.status_code, 400)

    def test_bad_date(self):
        response = self.client.get(reverse('analytics:period-report'), {'date': '03/02/2026'})
        self.assertEqual(response.status_code, 400)

    def test_dashboard(self):
        self.appointment(timezone.localdate(), self.haircut, self.ana)
        body = self.client.get(reverse('analytics:dashboard')).json()
        self.assertEqual(len(body['appointments_today']), 1)
        self.assertEqual(body['top_professional'], 'Ana')

    def test_excel_export(self):
        self.appointment(date(2026, 3, 2), self.haircut, self.ana)

        response = self.client.get(reverse('analytics:export-report'), {'period': 'month', 'date': '2026-03-02'})

        self.assertEqual(response.status_code, 200)
        self.assertIn('filename="Report_month_2026_03_01.xlsx"', response['Content-Disposition'])
        workbook = load_workbook(BytesIO(response.content))
        self.assertEqual(workbook.sheetnames, ['Summary', 'Professionals', 'Appointments'])
        self.assertEqual(workbook['Professionals']['A2'].value, 'Ana')
        self.assertEqual(workbook['Appointments']['C2'].value, 'Maria')
