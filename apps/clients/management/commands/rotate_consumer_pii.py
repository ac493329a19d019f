"""
Management command to re-encrypt consumer names and phone numbers under
the newest FIELD_ENCRYPTION_KEY.

Usage:
    python manage.py rotate_consumer_pii              # Re-encrypt every consumer
    python manage.py rotate_consumer_pii --dry-run    # Count without writing

Put the new key first in FIELD_ENCRYPTION_KEY, keep the old key after it,
run this command, then remove the old key. Archived consumers are included.
All rows are rewritten in one transaction: if any value fails to decrypt,
nothing is changed.
"""
import logging

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from caseload.encryption import DecryptionError, rotate_field

logger = logging.getLogger(__name__)

ENCRYPTED_COLUMNS = ("_name_encrypted", "_phone_encrypted")


class Command(BaseCommand):
    help = "Re-encrypt consumer PII under the first configured encryption key."

    def add_arguments(self, parser):
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Report how many consumers would be re-encrypted.",
        )

    def handle(self, *args, **options):
        from apps.clients.models import Consumer

        consumers = Consumer.objects.order_by("pk")

        if options["dry_run"]:
            self.stdout.write(f"  [DRY RUN] Would re-encrypt {consumers.count()} consumer(s)")
            self.stdout.write(self.style.WARNING("DRY RUN: no changes made."))
            return

        count = 0
        with transaction.atomic():
            for consumer in consumers.select_for_update():
                try:
                    for column in ENCRYPTED_COLUMNS:
                        setattr(consumer, column, rotate_field(getattr(consumer, column)))
                except DecryptionError:
                    raise CommandError(
                        f"Consumer {consumer.pk} does not decrypt with any configured key; "
                        "nothing was changed."
                    )
                consumer.save(update_fields=list(ENCRYPTED_COLUMNS))
                count += 1

        logger.info("Re-encrypted PII on %d consumer(s)", count)
        self.stdout.write(self.style.SUCCESS(f"Re-encrypted {count} consumer(s)."))
