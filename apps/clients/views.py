"""Consumer JSON endpoints: list, create, detail, field updates, quarterly reviews."""
from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.views.decorators.http import require_GET, require_POST

from apps.compliance.engine import (
    FACE_TO_FACE_WINDOW_DAYS,
    LAST_CONTACT_WINDOW_DAYS,
    is_recent,
)
from apps.todos.services import open_todo_counts

from . import services
from .decorators import json_errors
from .forms import ConsumerForm


def _iso(value):
    return value.isoformat() if value else None


def _consumer_payload(consumer, status, open_todos=0):
    return {
        "id": consumer.pk,
        "name": consumer.name,
        "phone_number": consumer.phone_number,
        "insurance": consumer.insurance,
        "record_id": consumer.record_id,
        "first_contact_completed": consumer.first_contact_completed,
        "second_contact_completed": consumer.second_contact_completed,
        "last_contact_date": _iso(consumer.last_contact_date),
        "last_face_to_face_date": _iso(consumer.last_face_to_face_date),
        "last_contact_recent": is_recent(
            status.days_since_last_contact, LAST_CONTACT_WINDOW_DAYS,
        ),
        "last_face_to_face_recent": is_recent(
            status.days_since_last_face_to_face, FACE_TO_FACE_WINDOW_DAYS,
        ),
        "next_quarterly_review": _iso(consumer.next_quarterly_review),
        "next_annual_assessment": _iso(consumer.next_annual_assessment),
        "archived": consumer.archived,
        "open_todos": open_todos,
        "due": status.as_dict(),
    }


def _schedule_payload(consumer):
    return [
        {
            "index": quarter["index"],
            "label": quarter["label"],
            "calculated": _iso(quarter["calculated"]),
            "override": _iso(quarter["override"]),
            "effective": _iso(quarter["effective"]),
            "completed": quarter["completed"],
        }
        for quarter in services.quarter_schedule(consumer)
    ]


def _detail_response(consumer, status=200):
    payload = _consumer_payload(consumer, services.due_status(consumer))
    payload["quarters"] = _schedule_payload(consumer)
    return JsonResponse(payload, status=status)


@login_required
@require_GET
def consumer_list(request):
    """Active (or, with ?archived=1, archived) consumers with due badges."""
    archived = request.GET.get("archived") == "1"
    todo_counts = open_todo_counts(request.user)
    consumers = [
        _consumer_payload(c, services.due_status(c), todo_counts.get(c.pk, 0))
        for c in services.list_consumers(request.user, archived=archived)
    ]
    consumers.sort(key=lambda c: c["name"].lower())
    return JsonResponse({"consumers": consumers})


@login_required
@require_POST
@json_errors()
def consumer_create(request):
    form = ConsumerForm(request.POST)
    if not form.is_valid():
        return JsonResponse({"errors": form.errors.get_json_data()}, status=400)
    data = form.cleaned_data
    consumer = services.create_consumer(
        request.user,
        name=data["name"],
        phone_number=data["phone_number"],
        insurance=data["insurance"],
        record_id=data["record_id"],
        annual_assessment=data["next_annual_assessment"],
        next_quarterly_review=data["next_quarterly_review"],
    )
    return _detail_response(consumer, status=201)


@login_required
@require_GET
@json_errors()
def consumer_detail(request, consumer_id):
    return _detail_response(services.get_consumer(request.user, consumer_id))


@login_required
@require_POST
@json_errors()
def consumer_update(request, consumer_id):
    """Single-field edit: POST field=<name>&value=<value>."""
    consumer = services.update_field(
        request.user,
        consumer_id,
        request.POST.get("field", ""),
        request.POST.get("value"),
    )
    return _detail_response(consumer)


@login_required
@require_POST
@json_errors()
def quarter_override(request, consumer_id, quarter):
    """Set or (with an empty value) clear the date override for quarter 1-4."""
    consumer = services.set_quarter_override(
        request.user, consumer_id, quarter - 1, request.POST.get("value") or None,
    )
    return _detail_response(consumer)


@login_required
@require_POST
@json_errors()
def quarter_complete(request, consumer_id, quarter):
    consumer = services.set_quarter_completed(
        request.user, consumer_id, quarter - 1, request.POST.get("completed", "true"),
    )
    return _detail_response(consumer)


@login_required
@require_POST
@json_errors()
def quarters_reset(request, consumer_id):
    services.reset_to_calculated(request.user, consumer_id)
    return _detail_response(services.get_consumer(request.user, consumer_id))


@login_required
@require_POST
@json_errors()
def consumer_archive(request, consumer_id):
    consumer = services.archive_consumer(request.user, consumer_id)
    return JsonResponse({"id": consumer.pk, "archived": True})
