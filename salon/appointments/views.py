"""
Appointments Views

JSON endpoints for the agenda. Every state change goes through
appointment_manager so the status/payment rules live in one place.
"""
from datetime import timedelta

from django.contrib.auth.decorators import login_required
from django.db.models import Q
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.utils import timezone
from django.views.decorators.http import require_http_methods

from salon.core.exceptions import SalonError
from salon.core.http import error_response, parse_json_body
from salon.finance.payments import payment_method_label
from .models import Appointment
from .services import appointment_manager, parse_date

# Calendar colors per status
STATUS_COLORS = {
    Appointment.STATUS_SCHEDULED: '#5156be',
    Appointment.STATUS_CONFIRMED: '#2ab57d',
    Appointment.STATUS_RESCHEDULED: '#4ba6ef',
    Appointment.STATUS_COMPLETED: '#74788d',
    Appointment.STATUS_CANCELLED: '#fd625e',
    Appointment.STATUS_NO_SHOW: '#ffbf53',
}


def serialize_appointment(appointment):
    return {
        'id': appointment.id,
        'client_id': appointment.client_id,
        'client_name': appointment.client_label,
        'service_id': appointment.service_id,
        'service_name': appointment.service_label,
        'professional_id': appointment.professional_id,
        'professional_name': appointment.professional_label,
        'start_time': appointment.start_time.isoformat(),
        'end_time': appointment.end_time.isoformat(),
        'rescheduled_from': appointment.rescheduled_from.isoformat() if appointment.rescheduled_from else None,
        'status': appointment.status,
        'attendance_confirmed': appointment.attendance_confirmed,
        'price': str(appointment.price),
        'payment_status': appointment.payment_status,
        'payment_method': appointment.payment_method,
        'payment_method_label': payment_method_label(appointment.payment_method),
        'paid_at': appointment.paid_at.isoformat() if appointment.paid_at else None,
        'notes': appointment.notes,
    }


def _queryset():
    return Appointment.objects.select_related('client', 'service', 'professional')


@login_required
@require_http_methods(['GET'])
def appointment_list(request):
    """
    Filters: ?date=YYYY-MM-DD, ?status=, ?professional=<id>, ?search=
    """
    queryset = _queryset()

    day = request.GET.get('date')
    if day:
        try:
            queryset = queryset.filter(start_time__date=parse_date(day))
        except SalonError as exc:
            return error_response(exc)
    status = request.GET.get('status')
    if status:
        queryset = queryset.filter(status=status)
    professional_id = request.GET.get('professional')
    if professional_id:
        queryset = queryset.filter(professional_id=professional_id)
    search = request.GET.get('search')
    if search:
        queryset = queryset.filter(
            Q(client__name__icontains=search) | Q(service__name__icontains=search) | Q(notes__icontains=search)
        )

    return JsonResponse(
        {'success': True, 'appointments': [serialize_appointment(a) for a in queryset.order_by('start_time')]}
    )


@login_required
@require_http_methods(['GET'])
def calendar_events(request):
    """
    Appointments in FullCalendar event format
    FullCalendar sends ?start= and ?end= for the visible range
    """
    queryset = _queryset().exclude(status=Appointment.STATUS_CANCELLED)

    try:
        start = request.GET.get('start')
        end = request.GET.get('end')
        if start:
            queryset = queryset.filter(start_time__date__gte=parse_date(start))
        if end:
            queryset = queryset.filter(start_time__date__lt=parse_date(end))
    except SalonError as exc:
        return error_response(exc)

    professional_id = request.GET.get('professional')
    if professional_id:
        queryset = queryset.filter(professional_id=professional_id)

    events = []
    for apt in queryset:
        events.append(
            {
                'id': apt.id,
                'title': f'{apt.client_label} - {apt.service_label}',
                'start': apt.start_time.isoformat(),
                'end': apt.end_time.isoformat(),
                'backgroundColor': STATUS_COLORS.get(apt.status, '#5156be'),
                'borderColor': STATUS_COLORS.get(apt.status, '#5156be'),
                'extendedProps': {
                    'client_id': apt.client_id,
                    'professional_id': apt.professional_id,
                    'professional': apt.professional_label,
                    'status': apt.status,
                    'payment_status': apt.payment_status,
                    'price': str(apt.price),
                },
            }
        )

    return JsonResponse(events, safe=False)


@login_required
@require_http_methods(['POST'])
def appointment_create(request):
    try:
        data = parse_json_body(request)
        appointment = appointment_manager.create(
            client_id=data.get('client_id'),
            service_id=data.get('service_id'),
            professional_id=data.get('professional_id'),
            date=data.get('date'),
            time=data.get('time'),
            notes=data.get('notes', ''),
        )
    except SalonError as exc:
        return error_response(exc)

    return JsonResponse(
        {
            'success': True,
            'message': 'Appointment created successfully',
            'appointment': serialize_appointment(appointment),
        },
        status=201,
    )


@login_required
@require_http_methods(['GET'])
def appointment_detail(request, pk):
    appointment = get_object_or_404(_queryset(), pk=pk)

    data = serialize_appointment(appointment)
    data['receivables'] = [
        {'id': r.id, 'amount': str(r.amount), 'due_date': r.due_date.isoformat(), 'status': r.status}
        for r in appointment.receivables.all()
    ]
    return JsonResponse({'success': True, 'appointment': data})


@login_required
@require_http_methods(['POST'])
def appointment_reschedule(request, pk):
    try:
        data = parse_json_body(request)
        appointment = appointment_manager.reschedule(
            pk,
            new_date=data.get('date'),
            new_time=data.get('time'),
            new_professional_id=data.get('professional_id') or None,
        )
    except SalonError as exc:
        return error_response(exc)
    return JsonResponse(
        {'success': True, 'message': 'Appointment rescheduled', 'appointment': serialize_appointment(appointment)}
    )


def _transition(action, message):
    @login_required
    @require_http_methods(['POST'])
    def view(request, pk):
        try:
            appointment = getattr(appointment_manager, action)(pk)
        except SalonError as exc:
            return error_response(exc)
        return JsonResponse(
            {'success': True, 'message': message, 'appointment': serialize_appointment(appointment)}
        )

    view.__name__ = f'appointment_{action}'
    return view


appointment_confirm = _transition('confirm_attendance', 'Attendance confirmed')
appointment_complete = _transition('complete', 'Appointment marked as completed')
appointment_cancel = _transition('cancel', 'Appointment cancelled')
appointment_no_show = _transition('mark_no_show', 'Appointment marked as no-show')


@login_required
@require_http_methods(['POST'])
def appointment_receive_payment(request, pk):
    """Body: {'payment_method': '...', 'expected_date': 'YYYY-MM-DD'} (date only for open account)"""
    try:
        data = parse_json_body(request)
        appointment, receivable = appointment_manager.receive_payment(
            pk,
            method=data.get('payment_method'),
            expected_date=data.get('expected_date') or None,
        )
    except SalonError as exc:
        return error_response(exc)

    return JsonResponse(
        {
            'success': True,
            'message': 'Payment registered',
            'appointment': serialize_appointment(appointment),
            'receivable': {
                'id': receivable.id,
                'amount': str(receivable.amount),
                'due_date': receivable.due_date.isoformat(),
                'status': receivable.status,
            },
        }
    )


@login_required
@require_http_methods(['GET'])
def upcoming(request):
    """Active appointments in the next 7 days"""
    now = timezone.now()
    queryset = _queryset().filter(
        start_time__gte=now,
        start_time__lt=now + timedelta(days=7),
        status__in=Appointment.ACTIVE_STATUSES,
    )
    return JsonResponse(
        {'success': True, 'appointments': [serialize_appointment(a) for a in queryset.order_by('start_time')]}
    )
