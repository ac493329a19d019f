"""Read/write operations on consumer records.

Every operation that touches a single consumer loads it through
get_consumer(), which only returns records owned by the acting case
manager. Writes go through save(update_fields=[...]) so each call touches
one column: two people editing different quarters never clobber each other.

Multi-field actions (reset to calculated, Q4 cycle restart) are issued as a
sequence of single-field writes with no transaction around them. If one
write fails the earlier ones stay applied; re-running the action is safe
because it always recomputes from the annual assessment date.
"""
import logging

from django.db.models import Q
from django.utils import timezone

from apps.compliance.engine import (
    InvalidInput,
    classify,
    compute_quarterly_dates,
    to_date,
)

from .models import QUARTER_COMPLETED_FIELDS, QUARTER_DATE_FIELDS, Consumer

logger = logging.getLogger(__name__)

TEXT = "text"
BOOL = "bool"
DATE = "date"
REQUIRED_DATE = "required_date"

# Field name -> value kind. Only these may be changed through update_field().
UPDATABLE_FIELDS = {
    "name": TEXT,
    "phone_number": TEXT,
    "insurance": TEXT,
    "record_id": TEXT,
    "first_contact_completed": BOOL,
    "second_contact_completed": BOOL,
    "last_contact_date": DATE,
    "last_face_to_face_date": DATE,
    "next_quarterly_review": REQUIRED_DATE,
    "next_annual_assessment": REQUIRED_DATE,
    "last_qr_completed": DATE,
    "last_annual_completed": DATE,
    **{field: DATE for field in QUARTER_DATE_FIELDS},
    **{field: BOOL for field in QUARTER_COMPLETED_FIELDS},
}

# Properties backed by an encrypted column.
_STORAGE_COLUMNS = {
    "name": "_name_encrypted",
    "phone_number": "_phone_encrypted",
}

_TRUE_STRINGS = {"true", "1", "yes", "on"}
_FALSE_STRINGS = {"false", "0", "no", "off", ""}


class ConsumerNotFound(Exception):
    """The consumer does not exist or belongs to another case manager."""


class InvalidField(ValueError):
    """update_field() was asked to change a field that is not editable."""


def coerce_value(field, value):
    """Convert a raw value (e.g. from a POST body) to the field's Python type."""
    kind = UPDATABLE_FIELDS.get(field)
    if kind is None:
        raise InvalidField(f"Field {field!r} cannot be updated.")

    if kind == TEXT:
        return "" if value is None else str(value).strip()

    if kind == BOOL:
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower() if value is not None else ""
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
        raise InvalidInput(f"Expected true or false for {field}, got {value!r}.")

    if value is None or value == "":
        if kind == REQUIRED_DATE:
            raise InvalidInput(f"{field} cannot be cleared.")
        return None
    if field == "next_annual_assessment":
        return _annual_date(value)
    return to_date(value)


def _annual_date(value):
    """Coerce an annual assessment date whose quarters can all be scheduled."""
    annual = to_date(value)
    compute_quarterly_dates(annual)
    return annual


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

def get_consumer(user, consumer_id):
    """Return the user's consumer or raise ConsumerNotFound."""
    try:
        return Consumer.objects.get(pk=consumer_id, case_manager=user)
    except (Consumer.DoesNotExist, ValueError, TypeError):
        raise ConsumerNotFound(f"Consumer {consumer_id} not found.")


def list_consumers(user, archived=False):
    return Consumer.objects.for_case_manager(user).filter(archived=archived)


def due_status(consumer, now=None):
    return classify(now, consumer.compliance_record())


def quarter_schedule(consumer):
    """Per-quarter view of calculated vs. overridden dates."""
    quarters = compute_quarterly_dates(consumer.next_annual_assessment)
    schedule = []
    for index, quarter in enumerate(quarters):
        override = consumer.quarter_overrides[index]
        schedule.append({
            "index": index,
            "label": quarter.label,
            "calculated": quarter.date,
            "override": override,
            "effective": override if override is not None else quarter.date,
            "completed": consumer.quarter_completed[index],
        })
    return schedule


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------

def _write(consumer, field, value):
    setattr(consumer, field, value)
    column = _STORAGE_COLUMNS.get(field, field)
    consumer.save(update_fields=[column, "updated_at"])


def create_consumer(
    user,
    *,
    name,
    annual_assessment,
    phone_number="",
    insurance="",
    record_id="",
    next_quarterly_review=None,
):
    """Create a consumer with all overrides unset and no reviews completed.

    next_quarterly_review defaults to the calculated Q1 date.
    """
    annual = _annual_date(annual_assessment)
    if next_quarterly_review is None:
        next_review = compute_quarterly_dates(annual)[0].date
    else:
        next_review = to_date(next_quarterly_review)

    consumer = Consumer(
        case_manager=user,
        insurance=insurance,
        record_id=record_id,
        next_annual_assessment=annual,
        next_quarterly_review=next_review,
    )
    consumer.name = name
    consumer.phone_number = phone_number
    consumer.save()
    logger.info("Consumer %s created by user %s", consumer.pk, user.pk)
    return consumer


def update_field(user, consumer_id, field, value):
    """Change one field on one consumer.

    Changing next_annual_assessment does not touch stored quarter
    overrides; use reset_to_calculated() for that.
    """
    value = coerce_value(field, value)
    consumer = get_consumer(user, consumer_id)
    _write(consumer, field, value)
    return consumer


def _quarter_field(fields, index):
    if not 0 <= index <= 3:
        raise InvalidInput(f"Quarter index must be 0-3, got {index!r}.")
    return fields[index]


def set_quarter_override(user, consumer_id, index, value):
    """Override one quarter's date; None clears the override."""
    field = _quarter_field(QUARTER_DATE_FIELDS, index)
    return update_field(user, consumer_id, field, value)


def set_quarter_completed(user, consumer_id, index, completed):
    """Mark one quarterly review done or not done.

    Completing the 4th quarter closes the cycle: all four completion flags
    are cleared so the next review due is Q1 again.
    """
    field = _quarter_field(QUARTER_COMPLETED_FIELDS, index)
    completed = coerce_value(field, completed)
    consumer = get_consumer(user, consumer_id)

    if index == 3 and completed:
        for flag in QUARTER_COMPLETED_FIELDS:
            _write(consumer, flag, False)
        logger.info("Quarterly review cycle restarted for consumer %s", consumer.pk)
    else:
        _write(consumer, field, completed)
    return consumer


def reset_to_calculated(user, consumer_id):
    """Drop all quarter overrides and re-sync next_quarterly_review.

    Five independent writes: qr1_date..qr4_date cleared, then
    next_quarterly_review set to the calculated Q1. Returns the calculated
    quarters.
    """
    consumer = get_consumer(user, consumer_id)
    quarters = compute_quarterly_dates(consumer.next_annual_assessment)

    for field in QUARTER_DATE_FIELDS:
        _write(consumer, field, None)
    _write(consumer, "next_quarterly_review", quarters[0].date)

    logger.info("Quarterly review dates reset to calculated for consumer %s", consumer.pk)
    return quarters


def archive_consumer(user, consumer_id):
    consumer = get_consumer(user, consumer_id)
    _write(consumer, "archived", True)
    logger.info("Consumer %s archived by user %s", consumer.pk, user.pk)
    return consumer


def pending_monthly_reset():
    """Active consumers with at least one monthly contact box ticked."""
    return Consumer.objects.active().filter(
        Q(first_contact_completed=True) | Q(second_contact_completed=True)
    )


def reset_monthly_contacts():
    """Clear the monthly contact checkboxes on every active consumer.

    Returns the number of consumers updated.
    """
    updated = pending_monthly_reset().update(
        first_contact_completed=False,
        second_contact_completed=False,
        updated_at=timezone.now(),
    )
    logger.info("Monthly contact flags reset on %d consumer(s)", updated)
    return updated
