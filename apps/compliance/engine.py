"""Compliance date engine for quarterly reviews and annual assessments.

Derives the four quarterly review dates from a consumer's annual assessment
date, picks which quarter is next due from the completion flags, and
classifies dates as due this month / next month for list badges and digests.

Everything here is pure: no database access, no writes. Callers pass in a
ComplianceRecord (see Consumer.compliance_record()) and get values back.

Dates are day-granular. Inputs may be date, datetime, epoch milliseconds or
ISO strings; to_date() lists the accepted forms.
"""
import datetime
import math
from dataclasses import dataclass

from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

QUARTER_LABELS = ("1st Quarter", "2nd Quarter", "3rd Quarter", "4th Quarter")

# Face-to-face visits recur on a fixed cadence, not calendar months.
FACE_TO_FACE_INTERVAL = datetime.timedelta(days=90)

# Recency windows used by list views to colour last-contact columns.
LAST_CONTACT_WINDOW_DAYS = 30
FACE_TO_FACE_WINDOW_DAYS = 90


class InvalidInput(ValueError):
    """Raised when a timestamp is missing, non-finite or unparseable."""


@dataclass(frozen=True)
class QuarterInfo:
    label: str
    date: datetime.date


@dataclass(frozen=True)
class ComplianceRecord:
    """The slice of a consumer the engine needs."""

    annual_assessment_date: object
    quarter_overrides: tuple = (None, None, None, None)
    quarter_completed: tuple = (False, False, False, False)
    last_contact_date: object = None
    last_face_to_face_date: object = None


@dataclass(frozen=True)
class DueStatus:
    is_annual_due: bool
    is_annual_due_next_month: bool
    is_qr_due: bool
    is_q4: bool
    annual_date: datetime.date
    qr_dates: list
    next_qr_index: int
    next_qr_date: datetime.date
    next_face_to_face_due: datetime.date = None
    days_since_last_contact: int = None
    days_since_last_face_to_face: int = None

    @property
    def next_qr_label(self):
        return QUARTER_LABELS[self.next_qr_index]

    @property
    def needs_attention(self):
        """True when anything on this record should be flagged this month."""
        return self.is_annual_due or self.is_annual_due_next_month or self.is_qr_due

    def as_dict(self):
        return {
            "is_annual_due": self.is_annual_due,
            "is_annual_due_next_month": self.is_annual_due_next_month,
            "is_qr_due": self.is_qr_due,
            "is_q4": self.is_q4,
            "annual_date": _iso(self.annual_date),
            "qr_dates": [_iso(d) for d in self.qr_dates],
            "next_qr_index": self.next_qr_index,
            "next_qr_label": self.next_qr_label,
            "next_qr_date": _iso(self.next_qr_date),
            "next_face_to_face_due": _iso(self.next_face_to_face_due),
            "days_since_last_contact": self.days_since_last_contact,
            "days_since_last_face_to_face": self.days_since_last_face_to_face,
        }


def _iso(value):
    return value.isoformat() if value else None


# ---------------------------------------------------------------------------
# Input coercion
# ---------------------------------------------------------------------------

def to_date(value):
    """Coerce a date-like value to a ``datetime.date``.

    Accepts date, datetime (aware values are shifted into the current time
    zone first), epoch milliseconds as int/float or a string of digits, and
    ISO 8601 date or datetime strings. Raises InvalidInput for anything else,
    including None, NaN and infinities.
    """
    if isinstance(value, datetime.datetime):
        if timezone.is_aware(value):
            value = timezone.localtime(value)
        return value.date()
    if isinstance(value, datetime.date):
        return value
    if isinstance(value, str):
        return _parse_date_string(value)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidInput(f"Expected a date or timestamp, got {type(value).__name__}.")
    return _from_epoch_millis(value)


def _parse_date_string(value):
    text = value.strip()
    if text.lstrip("-").isdigit():
        try:
            millis = int(text)
        except ValueError:
            # Longer than the interpreter's int string conversion limit.
            raise InvalidInput(f"Timestamp out of range: {value[:20]!r}...")
        return _from_epoch_millis(millis)
    try:
        parsed = parse_datetime(text) or parse_date(text)
    except ValueError:
        parsed = None
    if parsed is None:
        raise InvalidInput(f"Unparseable date: {value!r}.")
    return to_date(parsed)


def _from_epoch_millis(millis):
    try:
        finite = math.isfinite(millis)
    except OverflowError:
        raise InvalidInput("Timestamp out of range.")
    if not finite:
        raise InvalidInput("Timestamp must be a finite number.")
    try:
        moment = datetime.datetime.fromtimestamp(millis / 1000, tz=datetime.timezone.utc)
        return timezone.localtime(moment).date()
    except (OverflowError, OSError, ValueError):
        raise InvalidInput("Timestamp out of range.")


# ---------------------------------------------------------------------------
# Date Calculator
# ---------------------------------------------------------------------------

def _rollover_date(year, month_index, day):
    """Build a date the way naive calendar arithmetic does.

    month_index is zero-based and may exceed 11; surplus months roll into
    the following year(s). A day past the end of the month spills into the
    next month, so (2025, 3, 31) is May 1st, not April 30th.
    """
    year += month_index // 12
    month = month_index % 12 + 1
    return datetime.date(year, month, 1) + datetime.timedelta(days=day - 1)


def compute_quarterly_dates(annual_assessment_date):
    """Return the four QuarterInfo entries for an annual assessment date.

    Q1-Q3 fall three, six and nine months after the assessment. Q4 is the
    last day of the month before the assessment month, whatever the day.
    Raises InvalidInput when a quarter would fall outside years 1-9999.
    """
    annual = to_date(annual_assessment_date)
    month_index = annual.month - 1

    try:
        q1 = _rollover_date(annual.year, month_index + 3, annual.day)
        q2 = _rollover_date(annual.year, month_index + 6, annual.day)
        q3 = _rollover_date(annual.year, month_index + 9, annual.day)
        q4 = annual.replace(day=1) - datetime.timedelta(days=1)
    except (OverflowError, ValueError):
        raise InvalidInput(
            f"Annual assessment date {annual.isoformat()} has quarters outside the calendar."
        )

    return [
        QuarterInfo(label, date)
        for label, date in zip(QUARTER_LABELS, (q1, q2, q3, q4))
    ]


# ---------------------------------------------------------------------------
# Review Cursor
# ---------------------------------------------------------------------------

def next_due_quarter(completed):
    """Return the index (0-3) of the quarterly review that is next due.

    The highest completed quarter wins: completing Q3 moves the cursor to Q4
    even if Q1 and Q2 are still open. Completing Q4 starts the next cycle
    at Q1.
    """
    flags = list(completed)
    if len(flags) != 4:
        raise InvalidInput(f"Expected 4 completion flags, got {len(flags)}.")

    index = 0
    if flags[0]:
        index = 1
    if flags[1]:
        index = 2
    if flags[2]:
        index = 3
    if flags[3]:
        index = 0
    return index


# ---------------------------------------------------------------------------
# Override Store Contract
# ---------------------------------------------------------------------------

def effective_quarter_date(index, calculated, overrides):
    """Return the override for a quarter if one is set, else the calculated date."""
    if not 0 <= index <= 3:
        raise InvalidInput(f"Quarter index must be 0-3, got {index!r}.")
    override = overrides[index]
    if override is not None:
        return to_date(override)
    return to_date(calculated[index])


# ---------------------------------------------------------------------------
# Due-Status Classifier
# ---------------------------------------------------------------------------

def next_face_to_face_due(last_face_to_face_date):
    if last_face_to_face_date is None:
        return None
    return to_date(last_face_to_face_date) + FACE_TO_FACE_INTERVAL


def _today(now):
    return timezone.localdate() if now is None else to_date(now)


def days_since(value, now=None):
    """Whole days elapsed since value (negative for future dates)."""
    return (_today(now) - to_date(value)).days


def days_until(value, now=None):
    return (to_date(value) - _today(now)).days


def is_recent(days, window_days):
    return days is not None and 0 <= days <= window_days


def classify(now, record):
    """Derive the due status of a ComplianceRecord as of ``now``.

    Month comparisons deliberately ignore the year: an assessment dated in
    this calendar month of any year counts as due.
    """
    today = _today(now)
    current_month = today.month
    next_month = 1 if current_month == 12 else current_month + 1

    annual_date = to_date(record.annual_assessment_date)
    annual_month = annual_date.month

    qr_dates = [q.date for q in compute_quarterly_dates(annual_date)]
    next_qr_index = next_due_quarter(record.quarter_completed)
    next_qr_date = effective_quarter_date(next_qr_index, qr_dates, record.quarter_overrides)

    # No December wrap here: callers only use this to show the Q4 review
    # and the upcoming annual side by side.
    is_q4 = annual_month == current_month + 1 and any(
        d.month == current_month for d in qr_dates
    )

    last_contact = record.last_contact_date
    last_face_to_face = record.last_face_to_face_date

    return DueStatus(
        is_annual_due=annual_month == current_month,
        is_annual_due_next_month=annual_month == next_month,
        is_qr_due=next_qr_date.month == current_month,
        is_q4=is_q4,
        annual_date=annual_date,
        qr_dates=qr_dates,
        next_qr_index=next_qr_index,
        next_qr_date=next_qr_date,
        next_face_to_face_due=next_face_to_face_due(last_face_to_face),
        days_since_last_contact=(
            days_since(last_contact, today) if last_contact is not None else None
        ),
        days_since_last_face_to_face=(
            days_since(last_face_to_face, today) if last_face_to_face is not None else None
        ),
    )
