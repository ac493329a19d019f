"""Todo JSON endpoints."""
from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.views.decorators.http import require_http_methods, require_POST

from apps.clients.decorators import json_errors

from . import services


@login_required
@require_http_methods(["GET", "POST"])
@json_errors()
def consumer_todos(request, consumer_id):
    """GET lists todos; POST text=...&due_date=... adds one."""
    if request.method == "POST":
        todo = services.add_todo(
            request.user,
            consumer_id,
            request.POST.get("text"),
            request.POST.get("due_date") or None,
        )
        return JsonResponse(todo.as_dict(), status=201)
    todos = services.list_todos(request.user, consumer_id)
    return JsonResponse({"todos": [t.as_dict() for t in todos]})


@login_required
@require_POST
@json_errors(services.TodoNotFound)
def todo_toggle(request, todo_id):
    todo = services.toggle_todo(request.user, todo_id)
    return JsonResponse(todo.as_dict())


@login_required
@require_POST
@json_errors(services.TodoNotFound)
def todo_delete(request, todo_id):
    services.delete_todo(request.user, todo_id)
    return JsonResponse({"id": todo_id, "deleted": True})
