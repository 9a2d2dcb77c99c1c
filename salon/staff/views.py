"""
Professionals views
"""
from decimal import Decimal

from django.contrib.auth.decorators import login_required
from django.db.models import Count, Q, Sum
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_http_methods

from salon.core.exceptions import ValidationError
from salon.core.http import error_response, parse_json_body
from salon.finance.services import CENTS
from .forms import ProfessionalForm
from .models import Professional


def serialize_professional(professional):
    return {
        'id': professional.id,
        'name': professional.name,
        'email': professional.email,
        'phone': professional.phone,
        'specialties': professional.specialty_list,
        'commission_percent': str(professional.commission_percent),
        'is_active': professional.is_active,
    }


@login_required
@require_http_methods(['GET'])
def professional_list(request):
    """Roster with completed appointment count and revenue per professional"""
    completed = Q(appointments__status='completed')
    professionals = Professional.objects.annotate(
        appointment_count=Count('appointments', filter=completed),
        total_revenue=Sum('appointments__price', filter=completed),
    )

    data = []
    for professional in professionals:
        item = serialize_professional(professional)
        item['appointment_count'] = professional.appointment_count
        item['total_revenue'] = str(Decimal(professional.total_revenue or 0).quantize(CENTS))
        data.append(item)
    return JsonResponse({'success': True, 'professionals': data})


@login_required
@require_http_methods(['POST'])
def professional_save(request, pk=None):
    # Only staff users manage the roster
    if not request.user.is_staff:
        return JsonResponse(
            {'success': False, 'message': 'Only administrators can save professionals.'}, status=403
        )

    instance = get_object_or_404(Professional, pk=pk) if pk else None
    try:
        payload = parse_json_body(request)
    except ValidationError as exc:
        return error_response(exc)
    if instance is not None:
        payload = {**serialize_professional(instance), **payload}
    else:
        payload.setdefault('is_active', True)
    if isinstance(payload.get('specialties'), list):
        payload['specialties'] = ', '.join(payload['specialties'])

    form = ProfessionalForm(payload, instance=instance)
    if not form.is_valid():
        return JsonResponse({'success': False, 'errors': form.errors}, status=400)
    professional = form.save()
    return JsonResponse(
        {'success': True, 'professional': serialize_professional(professional)},
        status=201 if instance is None else 200,
    )


@login_required
@require_http_methods(['POST', 'DELETE'])
def professional_delete(request, pk):
    if not request.user.is_staff:
        return JsonResponse(
            {'success': False, 'message': 'Only administrators can delete professionals.'}, status=403
        )
    professional = get_object_or_404(Professional, pk=pk)
    professional.delete()
    return JsonResponse({'success': True, 'message': 'Professional deleted successfully'})
