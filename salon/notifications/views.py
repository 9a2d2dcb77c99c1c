from datetime import timedelta

from django.contrib.auth.decorators import login_required, permission_required
from django.core.paginator import Paginator
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.utils import timezone
from django.views.decorators.http import require_http_methods

from salon.clients.models import Client
from salon.core.exceptions import ValidationError
from salon.core.http import error_response, parse_json_body
from .models import MessageHistory
from .tasks import run_daily_automations_task, send_bulk_message_task


def serialize_message(message):
    return {
        'id': message.id,
        'client_id': message.client_id,
        'client_name': message.client.name,
        'appointment_id': message.appointment_id,
        'type': message.type,
        'channel': message.channel,
        'content': message.content,
        'status': message.status,
        'sent_at': message.sent_at.isoformat(),
        'provider': message.provider,
        'external_id': message.external_id,
        'error_message': message.error_message,
    }


@login_required
@require_http_methods(['GET'])
def message_history(request):
    """
    Delivery log with optional ?client=, ?status=, ?type= filters
    """
    queryset = MessageHistory.objects.select_related('client')

    client_id = request.GET.get('client')
    status = request.GET.get('status')
    message_type = request.GET.get('type')
    if client_id:
        queryset = queryset.filter(client_id=client_id)
    if status:
        queryset = queryset.filter(status=status)
    if message_type:
        queryset = queryset.filter(type=message_type)

    page = Paginator(queryset, 50).get_page(request.GET.get('page'))
    return JsonResponse(
        {
            'success': True,
            'messages': [serialize_message(m) for m in page],
            'page': page.number,
            'num_pages': page.paginator.num_pages,
        }
    )


@login_required
@require_http_methods(['GET'])
def client_message_history(request, client_id):
    client = get_object_or_404(Client, pk=client_id)
    messages = client.messages.select_related('client')[:100]
    return JsonResponse({'success': True, 'messages': [serialize_message(m) for m in messages]})


@login_required
@permission_required('notifications.add_messagehistory', raise_exception=True)
@require_http_methods(['POST'])
def bulk_message(request):
    """Queue the same WhatsApp text for the selected clients"""
    try:
        data = parse_json_body(request)
        message = (data.get('message') or '').strip()
        if not message:
            raise ValidationError('Message is required')
        if data.get('send_to_all'):
            client_ids = list(Client.objects.values_list('id', flat=True))
        else:
            client_ids = data.get('client_ids') or []
        if not client_ids:
            raise ValidationError('No clients selected')
    except ValidationError as exc:
        return error_response(exc)

    task = send_bulk_message_task.delay(client_ids=client_ids, message=message)
    return JsonResponse(
        {'success': True, 'task_id': task.id, 'client_count': len(client_ids)}, status=202
    )


@login_required
@permission_required('notifications.add_messagehistory', raise_exception=True)
@require_http_methods(['POST'])
def run_automations(request):
    """Trigger the daily automation scans on the workers"""
    result = run_daily_automations_task.delay()
    return JsonResponse({'success': True, 'task_id': result.id}, status=202)


@login_required
@require_http_methods(['GET'])
def message_stats(request):
    """Delivery counts for the last 30 days, for dashboard widgets"""
    since = timezone.now() - timedelta(days=30)
    logs = MessageHistory.objects.filter(sent_at__gte=since)

    stats = {
        'total': logs.count(),
        'sent': logs.filter(status=MessageHistory.STATUS_SENT).count(),
        'failed': logs.filter(status=MessageHistory.STATUS_FAILED).count(),
        'skipped': logs.filter(status=MessageHistory.STATUS_SKIPPED).count(),
        'by_type': {},
    }
    for message_type, _label in MessageHistory.TYPE_CHOICES:
        stats['by_type'][message_type] = logs.filter(type=message_type).count()

    return JsonResponse(stats)
