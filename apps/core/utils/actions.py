import json
import logging
from functools import wraps

from django.core.exceptions import ObjectDoesNotExist, ValidationError
from django.http import Http404, JsonResponse

logger = logging.getLogger(__name__)


def action_success(message='', status=200, **data):
    payload = {'success': True}
    if message:
        payload['message'] = message
    payload.update(data)
    return JsonResponse(payload, status=status)


def action_failure(error, status=400):
    return JsonResponse({'success': False, 'error': error}, status=status)


def form_errors(form):
    messages = []
    for field, errors in form.errors.items():
        label = '' if field == '__all__' else f"{field}: "
        messages.extend(f"{label}{error}" for error in errors)
    return '; '.join(messages)


def request_data(request):
    """Form-encoded POST data, or the parsed body for JSON requests."""
    if request.content_type == 'application/json':
        try:
            body = json.loads(request.body or b'{}')
        except ValueError as exc:
            raise ValidationError('Request body is not valid JSON.') from exc
        if not isinstance(body, dict):
            raise ValidationError('Request body must be a JSON object.')
        return body
    return request.POST


def json_action(view_func):
    """Wrap a view so every outcome is a ``{success, error?, message?}`` payload."""

    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        try:
            return view_func(request, *args, **kwargs)
        except ValidationError as exc:
            return action_failure('; '.join(exc.messages))
        except (ObjectDoesNotExist, Http404) as exc:
            return action_failure(str(exc) or 'Record not found.', status=404)
        except Exception:
            logger.exception('Unhandled error in %s', view_func.__name__)
            return action_failure('An unexpected error occurred. Please try again.', status=500)

    return wrapper
