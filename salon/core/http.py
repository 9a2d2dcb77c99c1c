"""
Small helpers for the JSON endpoints.
"""
import json
import logging

from django.http import JsonResponse

from .exceptions import SalonError, ValidationError

logger = logging.getLogger(__name__)


def parse_json_body(request):
    """Return the request body as a dict, or the POST form data if it is not JSON"""
    if request.content_type == 'application/json':
        try:
            data = json.loads(request.body or b'{}')
        except json.JSONDecodeError:
            raise ValidationError('Invalid JSON body')
        if not isinstance(data, dict):
            raise ValidationError('JSON body must be an object')
        return data
    return request.POST.dict()


def error_response(exc):
    if isinstance(exc, SalonError):
        return JsonResponse({'success': False, 'message': exc.message}, status=exc.status_code)
    logger.exception('Unexpected error while handling request')
    return JsonResponse({'success': False, 'message': str(exc)}, status=500)
