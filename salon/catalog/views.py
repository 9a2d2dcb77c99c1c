"""
Service catalog views
"""
from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_http_methods

from salon.core.exceptions import ValidationError
from salon.core.http import error_response, parse_json_body
from .forms import ServiceForm
from .models import Service


def serialize_service(service):
    return {
        'id': service.id,
        'name': service.name,
        'category': service.category.name if service.category else None,
        'category_id': service.category_id,
        'price': str(service.price),
        'duration_minutes': service.duration_minutes,
        'notes': service.notes,
        'is_active': service.is_active,
    }


@login_required
@require_http_methods(['GET'])
def service_list(request):
    """Services grouped by category name, as the booking form shows them"""
    services = Service.objects.select_related('category').order_by('category__name', 'name')
    if request.GET.get('active') == '1':
        services = services.filter(is_active=True)

    grouped = {}
    for service in services:
        category_name = service.category.name if service.category else 'Other'
        grouped.setdefault(category_name, []).append(serialize_service(service))

    return JsonResponse({'success': True, 'categories': grouped})


@login_required
@require_http_methods(['GET'])
def service_detail(request, service_id):
    """Price and duration of one service, used to pre-fill the booking form"""
    service = get_object_or_404(Service, pk=service_id)
    return JsonResponse({'success': True, 'service': serialize_service(service)})


@login_required
@require_http_methods(['POST'])
def service_save(request, service_id=None):
    instance = get_object_or_404(Service, pk=service_id) if service_id else None
    try:
        payload = parse_json_body(request)
    except ValidationError as exc:
        return error_response(exc)
    if instance is not None:
        payload = {**serialize_service(instance), 'category': instance.category_id, **payload}
    else:
        payload.setdefault('is_active', True)

    form = ServiceForm(payload, instance=instance)
    if not form.is_valid():
        return JsonResponse({'success': False, 'errors': form.errors}, status=400)
    service = form.save()
    return JsonResponse(
        {'success': True, 'service': serialize_service(service)},
        status=201 if instance is None else 200,
    )


@login_required
@require_http_methods(['POST', 'DELETE'])
def service_delete(request, service_id):
    service = get_object_or_404(Service, pk=service_id)
    service.delete()
    return JsonResponse({'success': True, 'message': 'Service deleted successfully'})
