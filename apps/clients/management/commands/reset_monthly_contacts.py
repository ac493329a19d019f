"""
Management command to clear the monthly contact checkboxes.

Usage:
    python manage.py reset_monthly_contacts              # Reset flags
    python manage.py reset_monthly_contacts --dry-run    # Preview without changes

Intended to run from cron at midnight on the 1st of each month
("0 0 1 * *"). A second run in the same month finds nothing
to reset.
"""
import logging

from django.core.management.base import BaseCommand

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Clear first/second contact flags on all active consumers."

    def add_arguments(self, parser):
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show how many consumers would be reset without changing anything.",
        )

    def handle(self, *args, **options):
        from apps.clients.services import pending_monthly_reset, reset_monthly_contacts

        if options["dry_run"]:
            count = pending_monthly_reset().count()
            self.stdout.write(f"  [DRY RUN] Would reset contacts on {count} consumer(s)")
            self.stdout.write(self.style.WARNING("DRY RUN — no changes made."))
            return

        count = reset_monthly_contacts()
        self.stdout.write(self.style.SUCCESS(
            f"Reset monthly contacts on {count} consumer(s)."
        ))
