"""
Management command to bulk-import consumers from a caseload CSV export.

Usage:
    python manage.py import_consumers caseload.csv --case-manager jsmith
    python manage.py import_consumers caseload.csv --case-manager jsmith --dry-run

Expected columns (header row is skipped):
    Id, First Name, Last Name, Preferred Name, Client/Record ID,
    Cell Phone, Plan End Date, Authorization ID

The plan end date becomes the annual assessment date; quarterly review
dates are derived from it. Every row is validated before anything is
written, so a bad row aborts the whole import.
"""
import csv
import logging

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Import consumers from a CSV file for one case manager."

    def add_arguments(self, parser):
        parser.add_argument("csv_path", help="Path to the CSV file.")
        parser.add_argument(
            "--case-manager",
            required=True,
            help="Username of the case manager who will own the imported consumers.",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Validate the file and report what would be imported.",
        )

    def handle(self, *args, **options):
        from apps.clients.forms import import_row_to_form
        from apps.clients.services import create_consumer

        User = get_user_model()
        try:
            case_manager = User.objects.get(username=options["case_manager"])
        except User.DoesNotExist:
            raise CommandError(f"No user named {options['case_manager']!r}.")

        try:
            with open(options["csv_path"], newline="", encoding="utf-8-sig") as fh:
                rows = list(csv.reader(fh))
        except OSError as exc:
            raise CommandError(f"Cannot read {options['csv_path']}: {exc}")

        forms, problems = [], []
        # Line 1 is the header.
        for line_number, row in enumerate(rows[1:], start=2):
            if not any(value.strip() for value in row):
                continue
            form = import_row_to_form(row)
            if form.is_valid():
                forms.append(form)
            else:
                for field, errors in form.errors.items():
                    problems.append(f"line {line_number}: {field}: {' '.join(errors)}")

        if problems:
            for problem in problems:
                self.stdout.write(self.style.ERROR(f"  {problem}"))
            raise CommandError(f"{len(problems)} problem(s) found — nothing imported.")

        if options["dry_run"]:
            self.stdout.write(f"  [DRY RUN] Would import {len(forms)} consumer(s)")
            self.stdout.write(self.style.WARNING("DRY RUN — no changes made."))
            return

        with transaction.atomic():
            for form in forms:
                data = form.cleaned_data
                create_consumer(
                    case_manager,
                    name=data["name"],
                    phone_number=data["phone_number"],
                    insurance=data["insurance"],
                    record_id=data["record_id"],
                    annual_assessment=data["next_annual_assessment"],
                )

        logger.info("Imported %d consumer(s) for user %s", len(forms), case_manager.pk)
        self.stdout.write(self.style.SUCCESS(
            f"Imported {len(forms)} consumer(s) for {case_manager.username}."
        ))
