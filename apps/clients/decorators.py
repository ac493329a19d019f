"""View decorators shared by the consumer, note and todo JSON endpoints."""
from functools import wraps

from django.http import Http404, JsonResponse

from apps.clients.services import ConsumerNotFound


def json_errors(*not_found):
    """Decorator: translate service exceptions into HTTP responses.

    ConsumerNotFound (plus any extra exception classes passed in) becomes a
    404, so a case manager cannot tell someone else's record from a missing
    one. ValueError, which covers InvalidInput and InvalidField, becomes a
    400 with {"error": message}.
    """
    missing = (ConsumerNotFound,) + not_found

    def decorator(view_func):
        @wraps(view_func)
        def wrapper(request, *args, **kwargs):
            try:
                return view_func(request, *args, **kwargs)
            except missing:
                raise Http404
            except ValueError as exc:
                return JsonResponse({"error": str(exc)}, status=400)
        return wrapper
    return decorator
