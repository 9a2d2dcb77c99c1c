"""
Clients Views
"""
from django.contrib.auth.decorators import login_required
from django.db.models import Q
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.utils import timezone
from django.views.decorators.http import require_http_methods

from salon.core.http import parse_json_body, error_response
from salon.core.exceptions import ValidationError
from salon.finance.delinquency import classify
from .forms import ClientForm
from .models import Client


def serialize_client(client):
    return {
        'id': client.id,
        'name': client.name,
        'phone': client.phone,
        'email': client.email,
        'birth_date': client.birth_date.isoformat() if client.birth_date else None,
        'notes': client.notes,
        'accepts_messages': client.accepts_messages,
    }


@login_required
@require_http_methods(['GET'])
def client_list(request):
    """
    Clients with their delinquency (overdue days / count)
    Supports ?search= on name and phone
    """
    today = timezone.localdate()
    queryset = Client.objects.with_delinquency(today)

    search = request.GET.get('search')
    if search:
        queryset = queryset.filter(Q(name__icontains=search) | Q(phone__icontains=search))

    clients = []
    for client in queryset:
        data = serialize_client(client)
        overdue_days = (today - client.oldest_due_date).days if client.oldest_due_date else 0
        data['overdue_days'] = overdue_days
        data['overdue_count'] = client.overdue_count
        data['delinquency'] = classify(overdue_days)
        clients.append(data)

    return JsonResponse({'success': True, 'clients': clients})


@login_required
@require_http_methods(['POST'])
def client_create(request):
    try:
        payload = parse_json_body(request)
    except ValidationError as exc:
        return error_response(exc)
    # Unchecked boxes are absent from the payload; new clients opt in by default
    payload.setdefault('accepts_messages', True)
    form = ClientForm(payload)
    if not form.is_valid():
        return JsonResponse({'success': False, 'errors': form.errors}, status=400)
    client = form.save()
    return JsonResponse({'success': True, 'client': serialize_client(client)}, status=201)


@login_required
@require_http_methods(['GET'])
def client_detail(request, pk):
    client = get_object_or_404(Client, pk=pk)
    recent = client.appointments.select_related('service', 'professional').order_by('-start_time')[:10]

    data = serialize_client(client)
    data['recent_appointments'] = [
        {
            'id': apt.id,
            'start_time': apt.start_time.isoformat(),
            'service': apt.service_label,
            'professional': apt.professional_label,
            'status': apt.status,
            'payment_status': apt.payment_status,
        }
        for apt in recent
    ]
    data['total_appointments'] = client.appointments.count()
    data['completed_appointments'] = client.appointments.filter(status='completed').count()
    return JsonResponse({'success': True, 'client': data})


@login_required
@require_http_methods(['POST'])
def client_update(request, pk):
    client = get_object_or_404(Client, pk=pk)
    try:
        payload = parse_json_body(request)
    except ValidationError as exc:
        return error_response(exc)
    # Partial updates keep the fields that were not sent
    data = {**serialize_client(client), **payload}
    form = ClientForm(data, instance=client)
    if not form.is_valid():
        return JsonResponse({'success': False, 'errors': form.errors}, status=400)
    client = form.save()
    return JsonResponse({'success': True, 'client': serialize_client(client)})


@login_required
@require_http_methods(['POST', 'DELETE'])
def client_delete(request, pk):
    client = get_object_or_404(Client, pk=pk)
    client.delete()
    return JsonResponse({'success': True, 'message': 'Client deleted successfully'})
