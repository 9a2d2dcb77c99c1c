"""
Report builders shared by the analytics endpoints, the Excel export and the
dashboard context processor.

Periods are local calendar ranges: a day, a month or a year around a
reference date, as a half-open [start, end) range of dates.
"""
from datetime import date, timedelta
from decimal import Decimal

from django.db.models import Count, Q, Sum
from django.utils import timezone

from salon.appointments.models import Appointment
from salon.clients.models import Client
from salon.core.exceptions import ValidationError
from salon.finance.models import Receivable
from salon.finance.services import CENTS, sum_amount
from salon.staff.models import Professional

PERIODS = ('day', 'month', 'year')

# More appointments than this in one day raises the busy-day alert
BUSY_DAY_APPOINTMENTS = 10


def period_range(period, reference):
    """Return (start, end) dates for the period containing `reference`"""
    if period == 'day':
        return reference, reference + timedelta(days=1)
    if period == 'month':
        start = reference.replace(day=1)
        if start.month == 12:
            return start, start.replace(year=start.year + 1, month=1)
        return start, start.replace(month=start.month + 1)
    if period == 'year':
        start = date(reference.year, 1, 1)
        return start, date(reference.year + 1, 1, 1)
    raise ValidationError(f"Unknown period: {period!r}. Use one of {', '.join(PERIODS)}.")


def _appointments_in(start, end):
    return Appointment.objects.filter(start_time__date__gte=start, start_time__date__lt=end)


def professional_report(start, end):
    """
    Per professional: appointments in the range, and revenue/commission from
    the completed ones at their booked price. Sorted by revenue, highest first.
    """
    completed = Q(appointments__status=Appointment.STATUS_COMPLETED)
    in_range = Q(appointments__start_time__date__gte=start, appointments__start_time__date__lt=end)

    professionals = Professional.objects.annotate(
        appointment_count=Count('appointments', filter=in_range),
        revenue=Sum('appointments__price', filter=in_range & completed),
    ).filter(appointment_count__gt=0)

    rows = []
    for professional in professionals:
        revenue = Decimal(professional.revenue or 0).quantize(CENTS)
        rows.append(
            {
                'professional_id': professional.id,
                'name': professional.name,
                'appointments': professional.appointment_count,
                'revenue': revenue,
                'commission_percent': professional.commission_percent,
                'commission': professional.commission_for(revenue),
            }
        )
    rows.sort(key=lambda row: row['revenue'], reverse=True)
    return rows


def period_report(period='month', reference=None):
    """
    Appointment and revenue summary for a day, month or year

    Revenue is the sum of receivables due in the range, whatever their status.
    """
    reference = reference or timezone.localdate()
    start, end = period_range(period, reference)
    appointments = _appointments_in(start, end)

    status_counts = dict.fromkeys((value for value, _label in Appointment.STATUS_CHOICES), 0)
    for row in appointments.values('status').annotate(total=Count('id')):
        status_counts[row['status']] = row['total']

    receivables = Receivable.objects.filter(due_date__gte=start, due_date__lt=end)
    revenue = sum_amount(receivables)
    received = sum_amount(receivables.filter(status=Receivable.STATUS_PAID))

    top_services = [
        {'name': row['service__name'] or 'Service', 'count': row['count']}
        for row in appointments.values('service__name').annotate(count=Count('id')).order_by('-count', 'service__name')[:5]
    ]

    daily = {}
    for start_time in appointments.values_list('start_time', flat=True):
        day = timezone.localdate(start_time).isoformat()
        daily[day] = daily.get(day, 0) + 1

    return {
        'period': period,
        'start': start,
        'end': end,
        'total_appointments': appointments.count(),
        'status_counts': status_counts,
        'revenue': revenue,
        'received': received,
        'top_services': top_services,
        'appointments_per_day': dict(sorted(daily.items())),
        'professionals': professional_report(start, end),
    }


def dashboard_alerts(today=None):
    """Alerts shown on the dashboard: overdue bills, birthdays, busy day"""
    today = today or timezone.localdate()
    overdue_count = Receivable.objects.overdue(today).count()
    birthdays_today = Client.objects.birthdays_on(today).count()
    appointments_today = (
        Appointment.objects.filter(start_time__date=today)
        .exclude(status=Appointment.STATUS_CANCELLED)
        .count()
    )

    alerts = []
    if overdue_count > 0:
        alerts.append(
            {
                'id': 'overdue',
                'title': 'Overdue bills',
                'description': f'{overdue_count} bills are overdue and need attention.',
                'tone': 'danger',
            }
        )
    if birthdays_today > 0:
        alerts.append(
            {
                'id': 'birthday',
                'title': 'Birthdays',
                'description': f'{birthdays_today} clients have a birthday today.',
                'tone': 'info',
            }
        )
    if appointments_today > BUSY_DAY_APPOINTMENTS:
        alerts.append(
            {
                'id': 'busy-day',
                'title': 'Busy day',
                'description': f'You have {appointments_today} appointments today.',
                'tone': 'warning',
            }
        )

    return {
        'overdue_count': overdue_count,
        'birthdays_today': birthdays_today,
        'appointments_today': appointments_today,
        'alerts': alerts,
    }
