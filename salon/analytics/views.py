"""
Analytics Views
"""
from datetime import date

from django.contrib.auth.mixins import LoginRequiredMixin
from django.http import HttpResponse, JsonResponse
from django.utils import timezone
from django.views import View
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from salon.appointments.models import Appointment
from salon.core.exceptions import SalonError, ValidationError
from salon.core.http import error_response
from salon.finance.services import finance_overview
from salon.finance.payments import payment_method_label
from . import reports

HEADER_FILL = PatternFill(start_color='5156BE', end_color='5156BE', fill_type='solid')
HEADER_FONT = Font(bold=True, color='FFFFFF')


def _report_params(request):
    """Read ?period=day|month|year and ?date=YYYY-MM-DD"""
    period = request.GET.get('period', 'month')
    if period not in reports.PERIODS:
        raise ValidationError(f'Unknown period: {period!r}')
    raw_date = request.GET.get('date')
    if not raw_date:
        return period, timezone.localdate()
    try:
        return period, date.fromisoformat(raw_date)
    except ValueError:
        raise ValidationError(f'Invalid date: {raw_date!r}')


def _money(value):
    return str(value)


class DashboardView(LoginRequiredMixin, View):
    """Headline numbers and alerts for the home screen"""

    def get(self, request, *args, **kwargs):
        today = timezone.localdate()
        alerts = reports.dashboard_alerts(today)
        overview = finance_overview(today)

        start, end = reports.period_range('month', today)
        professionals = reports.professional_report(start, end)

        todays_appointments = (
            Appointment.objects.select_related('client', 'service', 'professional')
            .filter(start_time__date=today)
            .exclude(status=Appointment.STATUS_CANCELLED)
            .order_by('start_time')
        )

        return JsonResponse(
            {
                'success': True,
                'monthly_revenue': _money(overview['monthly_revenue']),
                'appointments_today': [
                    {
                        'id': apt.id,
                        'time': timezone.localtime(apt.start_time).strftime('%H:%M'),
                        'client': apt.client_label,
                        'service': apt.service_label,
                        'professional': apt.professional_label,
                        'status': apt.status,
                    }
                    for apt in todays_appointments
                ],
                'birthdays_today': alerts['birthdays_today'],
                'overdue_count': alerts['overdue_count'],
                'top_professional': professionals[0]['name'] if professionals else None,
                'alerts': alerts['alerts'],
            }
        )


class PeriodReportView(LoginRequiredMixin, View):
    """Period report as JSON"""

    def get(self, request, *args, **kwargs):
        try:
            period, reference = _report_params(request)
            report = reports.period_report(period, reference)
        except SalonError as exc:
            return error_response(exc)

        report['start'] = report['start'].isoformat()
        report['end'] = report['end'].isoformat()
        report['revenue'] = _money(report['revenue'])
        report['received'] = _money(report['received'])
        for row in report['professionals']:
            for key in ('revenue', 'commission', 'commission_percent'):
                row[key] = _money(row[key])
        return JsonResponse(report)


class AlertsView(LoginRequiredMixin, View):
    def get(self, request, *args, **kwargs):
        return JsonResponse(reports.dashboard_alerts())


class ExportPeriodReportView(LoginRequiredMixin, View):
    """Export the period report to Excel"""

    def get(self, request, *args, **kwargs):
        try:
            period, reference = _report_params(request)
            report = reports.period_report(period, reference)
        except SalonError as exc:
            return error_response(exc)

        wb = Workbook()
        self._create_summary_sheet(wb, report)
        self._create_professionals_sheet(wb, report)
        self._create_appointments_sheet(wb, report)

        response = HttpResponse(
            content_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
        )
        filename = f"Report_{period}_{report['start']:%Y_%m_%d}.xlsx"
        response['Content-Disposition'] = f'attachment; filename="{filename}"'

        wb.save(response)
        return response

    def _write_headers(self, ws, headers):
        for col, header in enumerate(headers, 1):
            cell = ws.cell(row=1, column=col)
            cell.value = header
            cell.font = HEADER_FONT
            cell.fill = HEADER_FILL
            cell.alignment = Alignment(horizontal='center')

    def _create_summary_sheet(self, wb, report):
        ws = wb.active
        ws.title = 'Summary'

        ws['A1'] = f"{report['period'].title()} report - {report['start']:%d/%m/%Y}"
        ws['A1'].font = Font(bold=True, size=16)
        ws.merge_cells('A1:B1')

        stats = [
            ('Total Appointments', report['total_appointments']),
            ('Revenue', float(report['revenue'])),
            ('Received', float(report['received'])),
        ]
        stats += [(f"{status.replace('_', ' ').title()}", count) for status, count in report['status_counts'].items()]

        row = 3
        for label, value in stats:
            ws[f'A{row}'] = label
            ws[f'B{row}'] = value
            ws[f'A{row}'].font = Font(bold=True)
            row += 1

        row += 1
        ws[f'A{row}'] = 'Top Services'
        ws[f'A{row}'].font = Font(bold=True, size=12)
        for service in report['top_services']:
            row += 1
            ws[f'A{row}'] = service['name']
            ws[f'B{row}'] = service['count']

        ws.column_dimensions['A'].width = 25
        ws.column_dimensions['B'].width = 20

    def _create_professionals_sheet(self, wb, report):
        ws = wb.create_sheet('Professionals')
        self._write_headers(ws, ['Professional', 'Appointments', 'Revenue', 'Commission %', 'Commission'])

        for row, item in enumerate(report['professionals'], 2):
            ws.cell(row=row, column=1, value=item['name'])
            ws.cell(row=row, column=2, value=item['appointments'])
            ws.cell(row=row, column=3, value=float(item['revenue']))
            ws.cell(row=row, column=4, value=float(item['commission_percent']))
            ws.cell(row=row, column=5, value=float(item['commission']))

        for col in range(1, 6):
            ws.column_dimensions[get_column_letter(col)].width = 18

    def _create_appointments_sheet(self, wb, report):
        ws = wb.create_sheet('Appointments')
        self._write_headers(
            ws, ['Date', 'Time', 'Client', 'Service', 'Professional', 'Status', 'Price', 'Payment']
        )

        appointments = (
            Appointment.objects.select_related('client', 'service', 'professional')
            .filter(start_time__date__gte=report['start'], start_time__date__lt=report['end'])
            .order_by('start_time')
        )
        for row, apt in enumerate(appointments, 2):
            start = timezone.localtime(apt.start_time)
            ws.cell(row=row, column=1, value=start.strftime('%d/%m/%Y'))
            ws.cell(row=row, column=2, value=start.strftime('%H:%M'))
            ws.cell(row=row, column=3, value=apt.client_label)
            ws.cell(row=row, column=4, value=apt.service_label)
            ws.cell(row=row, column=5, value=apt.professional_label)
            ws.cell(row=row, column=6, value=apt.get_status_display())
            ws.cell(row=row, column=7, value=float(apt.price))
            ws.cell(row=row, column=8, value=payment_method_label(apt.payment_method))

        for col in range(1, 9):
            ws.column_dimensions[get_column_letter(col)].width = 16
