"""
Management command to list consumers with compliance dates coming due.

Usage:
    python manage.py check_compliance_due                    # Print per case manager
    python manage.py check_compliance_due --email            # Also email each digest
    python manage.py check_compliance_due --user jsmith      # One case manager only
    python manage.py check_compliance_due --date 2025-03-01  # Evaluate as of a date

Flags a consumer when the annual assessment is due this month or next
month, when the next quarterly review falls in this month, or when the
90-day face-to-face visit is overdue. Read-only; safe to run any time.
"""
import logging

from django.contrib.auth import get_user_model
from django.core.mail import send_mail
from django.core.management.base import BaseCommand, CommandError
from django.template.loader import render_to_string
from django.utils import timezone

logger = logging.getLogger(__name__)


def due_reasons(status, today):
    """Human-readable reasons a consumer needs attention (empty if none)."""
    reasons = []
    if status.is_annual_due:
        reasons.append(f"Annual assessment due this month ({status.annual_date:%b %d})")
    elif status.is_annual_due_next_month:
        reasons.append(f"Annual assessment due next month ({status.annual_date:%b %d})")
    if status.is_qr_due:
        reasons.append(
            f"{status.next_qr_label} review due this month ({status.next_qr_date:%b %d})"
        )
    if status.next_face_to_face_due and status.next_face_to_face_due <= today:
        reasons.append(f"Face-to-face overdue since {status.next_face_to_face_due:%b %d}")
    return reasons


class Command(BaseCommand):
    help = "Report consumers whose assessments, reviews or visits are due."

    def add_arguments(self, parser):
        parser.add_argument(
            "--email",
            action="store_true",
            help="Email each case manager their digest.",
        )
        parser.add_argument("--user", help="Only check this case manager (username).")
        parser.add_argument(
            "--date",
            help="Evaluate as of this date (YYYY-MM-DD) instead of today.",
        )

    def handle(self, *args, **options):
        from apps.clients.services import due_status, list_consumers
        from apps.compliance.engine import InvalidInput, to_date

        if options["date"]:
            try:
                today = to_date(options["date"])
            except InvalidInput as exc:
                raise CommandError(str(exc))
        else:
            today = timezone.localdate()

        case_managers = get_user_model().objects.filter(is_active=True, consumers__archived=False)
        if options["user"]:
            case_managers = case_managers.filter(username=options["user"])
        case_managers = case_managers.distinct().order_by("username")

        flagged_total = 0
        email_count = 0

        for case_manager in case_managers:
            items = []
            for consumer in list_consumers(case_manager):
                reasons = due_reasons(due_status(consumer, today), today)
                if reasons:
                    items.append({"consumer": consumer, "reasons": reasons})

            if not items:
                continue

            items.sort(key=lambda item: item["consumer"].name.lower())
            flagged_total += len(items)
            self.stdout.write(f"{case_manager.username}: {len(items)} consumer(s) due")
            for item in items:
                self.stdout.write(f"  {item['consumer'].name}: {'; '.join(item['reasons'])}")

            if options["email"]:
                if not case_manager.email:
                    self.stdout.write(self.style.WARNING(
                        f"  No email address for: {case_manager.username}"
                    ))
                elif self._send_digest(case_manager, items, today):
                    email_count += 1

        self.stdout.write(
            f"Checked {case_managers.count()} case manager(s): "
            f"{flagged_total} consumer(s) due, {email_count} email(s) sent"
        )

    def _send_digest(self, case_manager, items, today):
        context = {"case_manager": case_manager, "items": items, "today": today}
        subject = f"Caseload: {len(items)} consumer(s) due in {today:%B %Y}"
        body = render_to_string("clients/email/compliance_digest.txt", context)
        try:
            send_mail(
                subject=subject,
                message=body,
                from_email=None,  # Uses DEFAULT_FROM_EMAIL
                recipient_list=[case_manager.email],
            )
        except Exception:
            logger.warning(
                "Failed to send compliance digest to user %s",
                case_manager.pk,
                exc_info=True,
            )
            self.stdout.write(self.style.ERROR(
                f"  Failed to send digest to: {case_manager.username}"
            ))
            return False
        self.stdout.write(self.style.SUCCESS(f"  Digest sent to: {case_manager.username}"))
        return True
