"""Case note JSON endpoints."""
from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.views.decorators.http import require_http_methods, require_POST

from apps.clients.decorators import json_errors

from . import services


@login_required
@require_http_methods(["GET", "POST"])
@json_errors()
def consumer_notes(request, consumer_id):
    """GET lists notes newest first; POST text=... adds one."""
    if request.method == "POST":
        note = services.add_note(request.user, consumer_id, request.POST.get("text"))
        return JsonResponse(note.as_dict(), status=201)
    notes = services.list_notes(request.user, consumer_id)
    return JsonResponse({"notes": [n.as_dict() for n in notes]})


@login_required
@require_POST
@json_errors(services.NoteNotFound)
def note_delete(request, note_id):
    services.delete_note(request.user, note_id)
    return JsonResponse({"id": note_id, "deleted": True})
