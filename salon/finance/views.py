"""
Finance Views
"""
from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.http import require_http_methods

from salon.core.exceptions import SalonError, ValidationError
from salon.core.http import error_response, parse_json_body
from . import services
from .delinquency import classify, compute_overdue, overdue_days
from .forms import PayableForm, ReceivableForm
from .models import CashSession, Payable, Receivable
from .payments import payment_method_label


def serialize_receivable(receivable, as_of):
    days = overdue_days(receivable.status, receivable.due_date, as_of)
    return {
        'id': receivable.id,
        'appointment_id': receivable.appointment_id,
        'client_id': receivable.client_id,
        'client_name': receivable.client_name,
        'service_name': receivable.service_name,
        'description': receivable.description,
        'amount': str(receivable.amount),
        'service_date': receivable.service_date.isoformat() if receivable.service_date else None,
        'due_date': receivable.due_date.isoformat(),
        'status': receivable.status,
        'payment_method': receivable.payment_method,
        'payment_method_label': payment_method_label(receivable.payment_method),
        'paid_at': receivable.paid_at.isoformat() if receivable.paid_at else None,
        'overdue_days': days,
        'delinquency': classify(days),
    }


def serialize_payable(payable):
    return {
        'id': payable.id,
        'description': payable.description,
        'category': payable.category,
        'amount': str(payable.amount),
        'due_date': payable.due_date.isoformat(),
        'status': payable.status,
        'paid_at': payable.paid_at.isoformat() if payable.paid_at else None,
    }


def serialize_cash_session(session):
    if session is None:
        return None
    return {
        'id': session.id,
        'status': session.status,
        'opening_amount': str(session.opening_amount),
        'closing_amount': str(session.closing_amount) if session.closing_amount is not None else None,
        'opened_by': session.opened_by.get_username() if session.opened_by else None,
        'closed_by': session.closed_by.get_username() if session.closed_by else None,
        'opened_at': session.opened_at.isoformat(),
        'closed_at': session.closed_at.isoformat() if session.closed_at else None,
    }


@login_required
@require_http_methods(['GET'])
def receivable_list(request):
    """
    Receivables with their overdue days
    Filters: ?status=pending|paid, ?overdue=1, ?client=<id>
    """
    today = timezone.localdate()
    queryset = Receivable.objects.all()

    status = request.GET.get('status')
    if status:
        queryset = queryset.filter(status=status)
    if request.GET.get('overdue'):
        queryset = queryset.overdue(today)
    client_id = request.GET.get('client')
    if client_id:
        queryset = queryset.filter(client_id=client_id)

    return JsonResponse(
        {'success': True, 'receivables': [serialize_receivable(r, today) for r in queryset]}
    )


@login_required
@require_http_methods(['POST'])
def receivable_create(request):
    try:
        form = ReceivableForm(parse_json_body(request))
    except ValidationError as exc:
        return error_response(exc)
    if not form.is_valid():
        return JsonResponse({'success': False, 'errors': form.errors}, status=400)

    data = form.cleaned_data
    try:
        receivable = services.create_receivable(
            description=data['description'],
            amount=data['amount'],
            due_date=data['due_date'],
            client=data.get('client'),
            service_date=data.get('service_date'),
        )
    except SalonError as exc:
        return error_response(exc)
    return JsonResponse(
        {'success': True, 'receivable': serialize_receivable(receivable, timezone.localdate())},
        status=201,
    )


@login_required
@require_http_methods(['POST'])
def receivable_pay(request, pk):
    try:
        data = parse_json_body(request)
        receivable = services.mark_receivable_paid(pk, method=data.get('payment_method') or None)
    except SalonError as exc:
        return error_response(exc)
    return JsonResponse(
        {'success': True, 'receivable': serialize_receivable(receivable, timezone.localdate())}
    )


@login_required
@require_http_methods(['GET'])
def debtors(request):
    """Clients with overdue receivables, worst first"""
    today = timezone.localdate()
    overdue = Receivable.objects.overdue(today).select_related('client')
    report = compute_overdue(overdue, today)

    names = {r.client_id: r.client.name if r.client else r.client_name for r in overdue}
    rows = [
        {
            'client_id': item.client_id,
            'client_name': names.get(item.client_id, ''),
            'overdue_days': item.overdue_days,
            'overdue_count': item.overdue_count,
            'delinquency': item.classification,
        }
        for item in report.clients.values()
    ]
    rows.sort(key=lambda row: row['overdue_days'], reverse=True)
    return JsonResponse({'success': True, 'debtors': rows})


@login_required
@require_http_methods(['GET'])
def payable_list(request):
    queryset = Payable.objects.all()
    status = request.GET.get('status')
    if status:
        queryset = queryset.filter(status=status)
    return JsonResponse({'success': True, 'payables': [serialize_payable(p) for p in queryset]})


@login_required
@require_http_methods(['POST'])
def payable_create(request):
    try:
        form = PayableForm(parse_json_body(request))
    except ValidationError as exc:
        return error_response(exc)
    if not form.is_valid():
        return JsonResponse({'success': False, 'errors': form.errors}, status=400)

    data = form.cleaned_data
    try:
        payable = services.create_payable(
            data['description'], data['amount'], data['due_date'], data.get('category')
        )
    except SalonError as exc:
        return error_response(exc)
    return JsonResponse({'success': True, 'payable': serialize_payable(payable)}, status=201)


@login_required
@require_http_methods(['POST'])
def payable_pay(request, pk):
    try:
        payable = services.mark_payable_paid(pk)
    except SalonError as exc:
        return error_response(exc)
    return JsonResponse({'success': True, 'payable': serialize_payable(payable)})


@login_required
@require_http_methods(['GET'])
def cash_session_current(request):
    session = services.current_cash_session()
    recent = CashSession.objects.select_related('opened_by', 'closed_by')[:10]
    return JsonResponse(
        {
            'success': True,
            'current': serialize_cash_session(session),
            'history': [serialize_cash_session(s) for s in recent],
        }
    )


@login_required
@require_http_methods(['POST'])
def cash_session_open(request):
    try:
        data = parse_json_body(request)
        session = services.open_cash_session(request.user, data.get('opening_amount', '0'))
    except SalonError as exc:
        return error_response(exc)
    return JsonResponse({'success': True, 'session': serialize_cash_session(session)}, status=201)


@login_required
@require_http_methods(['POST'])
def cash_session_close(request, pk):
    try:
        data = parse_json_body(request)
        closing_amount = data.get('closing_amount')
        if closing_amount in (None, ''):
            raise ValidationError('Closing amount is required.')
        session = services.close_cash_session(pk, request.user, closing_amount)
    except SalonError as exc:
        return error_response(exc)
    return JsonResponse({'success': True, 'session': serialize_cash_session(session)})


@login_required
@require_http_methods(['GET'])
def overview(request):
    data = services.finance_overview()
    overdue_count = data.pop('overdue_count')
    # Money as strings so Decimals keep their cents
    payload = {key: str(value) for key, value in data.items()}
    payload['overdue_count'] = overdue_count
    return JsonResponse({'success': True, 'overview': payload})
