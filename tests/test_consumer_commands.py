"""Tests for the consumer management commands."""
import datetime
from io import StringIO
from unittest.mock import patch

import pytest
from cryptography.fernet import Fernet
from django.core import mail
from django.core.management import call_command
from django.core.management.base import CommandError

import caseload.encryption as enc_module
from apps.clients.models import Consumer
from caseload.encryption import encrypt_field

D = datetime.date

CSV_HEADER = (
    "Id,First Name,Last Name,Preferred Name,Client/Record ID,"
    "Cell Phone,Plan End Date,Authorization ID\n"
)


def _call_command(name, *args, **kwargs):
    out = StringIO()
    call_command(name, *args, stdout=out, **kwargs)
    return out.getvalue()


@pytest.fixture
def csv_file(tmp_path):
    def _write(body):
        path = tmp_path / "caseload.csv"
        path.write_text(CSV_HEADER + body, encoding="utf-8")
        return str(path)
    return _write


@pytest.mark.django_db
class ImportConsumersCommandTest:

    def test_imports_rows(self, case_manager, csv_file):
        path = csv_file(
            "1,Jane,Doe,,C-100,555-0100,2025-03-31,AUTH-1\n"
            "2,Robert,Smith,Bob,C-101,555-0101,11/15/2024,AUTH-2\n"
            "\n"
        )
        output = _call_command("import_consumers", path, "--case-manager", "casey")

        assert "Imported 2 consumer(s)" in output
        consumers = {c.name: c for c in Consumer.objects.filter(case_manager=case_manager)}
        assert set(consumers) == {"Jane Doe", "Bob Smith"}

        bob = consumers["Bob Smith"]
        assert bob.next_annual_assessment == D(2024, 11, 15)
        assert bob.next_quarterly_review == D(2025, 2, 15)
        assert bob.record_id == "C-101"
        assert bob.insurance == "AUTH-2"
        assert bob.phone_number == "555-0101"
        assert bob.quarter_overrides == (None, None, None, None)

    def test_invalid_row_aborts_import(self, case_manager, csv_file):
        path = csv_file(
            "1,Jane,Doe,,C-100,555-0100,2025-03-31,AUTH-1\n"
            "2,Robert,Smith,,C-101,555-0101,not-a-date,AUTH-2\n"
        )
        out = StringIO()
        with pytest.raises(CommandError):
            call_command("import_consumers", path, "--case-manager", "casey", stdout=out)
        assert "line 3" in out.getvalue()
        assert Consumer.objects.count() == 0

    def test_unschedulable_plan_end_date_aborts_import(self, case_manager, csv_file):
        path = csv_file("1,Jane,Doe,,C-100,555-0100,12/01/9999,AUTH-1\n")
        out = StringIO()
        with pytest.raises(CommandError):
            call_command("import_consumers", path, "--case-manager", "casey", stdout=out)
        assert "line 2: next_annual_assessment" in out.getvalue()
        assert Consumer.objects.count() == 0

    def test_unknown_case_manager(self, db, csv_file):
        path = csv_file("1,Jane,Doe,,C-100,555-0100,2025-03-31,AUTH-1\n")
        with pytest.raises(CommandError):
            _call_command("import_consumers", path, "--case-manager", "nobody")

    def test_missing_file(self, case_manager, tmp_path):
        with pytest.raises(CommandError):
            _call_command(
                "import_consumers", str(tmp_path / "missing.csv"), "--case-manager", "casey",
            )

    def test_dry_run_writes_nothing(self, case_manager, csv_file):
        path = csv_file("1,Jane,Doe,,C-100,555-0100,2025-03-31,AUTH-1\n")
        output = _call_command("import_consumers", path, "--case-manager", "casey", "--dry-run")
        assert "Would import 1 consumer(s)" in output
        assert Consumer.objects.count() == 0


@pytest.mark.django_db
class ResetMonthlyContactsCommandTest:

    def test_resets_active_consumers(self, make_consumer):
        consumer = make_consumer(first_contact_completed=True, second_contact_completed=True)
        archived = make_consumer(name="Old", first_contact_completed=True, archived=True)

        output = _call_command("reset_monthly_contacts")

        assert "Reset monthly contacts on 1 consumer(s)" in output
        consumer.refresh_from_db()
        archived.refresh_from_db()
        assert consumer.first_contact_completed is False
        assert consumer.second_contact_completed is False
        assert archived.first_contact_completed is True

    def test_dry_run(self, make_consumer):
        consumer = make_consumer(second_contact_completed=True)
        output = _call_command("reset_monthly_contacts", "--dry-run")
        assert "Would reset contacts on 1 consumer(s)" in output
        assert "DRY RUN" in output
        consumer.refresh_from_db()
        assert consumer.second_contact_completed is True

    def test_second_run_finds_nothing(self, make_consumer):
        make_consumer(first_contact_completed=True)
        _call_command("reset_monthly_contacts")
        output = _call_command("reset_monthly_contacts")
        assert "on 0 consumer(s)" in output


@pytest.fixture
def due_caseload(make_consumer, other_case_manager):
    """A caseload evaluated as of 2025-03-10."""
    make_consumer(name="Ann Annual", annual=D(2025, 3, 15))
    # Q1 and Q2 done, so the 3rd quarter (Mar 10, 2026) is next.
    make_consumer(
        name="Quinn Quarter", annual=D(2025, 6, 10),
        qr1_completed=True, qr2_completed=True,
    )
    make_consumer(
        name="Fay Visit", annual=D(2025, 8, 1),
        last_face_to_face_date=D(2024, 11, 1),
    )
    make_consumer(name="Nora Clear", annual=D(2025, 9, 20))
    make_consumer(name="Archie Archived", annual=D(2025, 3, 1), archived=True)
    make_consumer(name="Olive Other", annual=D(2025, 4, 2), owner=other_case_manager)


@pytest.mark.django_db
class CheckComplianceDueCommandTest:

    def test_lists_due_consumers_per_case_manager(self, due_caseload):
        output = _call_command("check_compliance_due", "--date", "2025-03-10")

        assert "casey: 3 consumer(s) due" in output
        assert "Ann Annual: Annual assessment due this month (Mar 15)" in output
        assert "Quinn Quarter: 3rd Quarter review due this month (Mar 10)" in output
        assert "Fay Visit: Face-to-face overdue since Jan 30" in output
        assert "other: 1 consumer(s) due" in output
        assert "Olive Other: Annual assessment due next month (Apr 02)" in output
        assert "Nora Clear" not in output
        assert "Archie Archived" not in output
        assert "4 consumer(s) due, 0 email(s) sent" in output
        assert len(mail.outbox) == 0

    def test_single_user(self, due_caseload):
        output = _call_command("check_compliance_due", "--date", "2025-03-10", "--user", "other")
        assert "Olive Other" in output
        assert "Ann Annual" not in output

    def test_sends_digest_emails(self, due_caseload):
        output = _call_command("check_compliance_due", "--date", "2025-03-10", "--email")

        assert "2 email(s) sent" in output
        assert len(mail.outbox) == 2
        casey_mail = next(m for m in mail.outbox if m.to == ["casey@agency.example"])
        assert "March 2025" in casey_mail.subject
        assert "Ann Annual" in casey_mail.body
        assert "Olive Other" not in casey_mail.body

    def test_send_failure_is_reported(self, due_caseload):
        with patch(
            "apps.clients.management.commands.check_compliance_due.send_mail",
            side_effect=ConnectionError("SMTP down"),
        ):
            output = _call_command(
                "check_compliance_due", "--date", "2025-03-10", "--email", "--user", "casey",
            )
        assert "Failed to send digest to: casey" in output
        assert "0 email(s) sent" in output

    def test_bad_date(self, db):
        with pytest.raises(CommandError):
            _call_command("check_compliance_due", "--date", "March")


def fresh_cipher():
    """Drop the cached cipher so changed key settings take effect."""
    enc_module._fernet = None


@pytest.fixture
def rotate_keys(settings):
    """Return a helper that changes FIELD_ENCRYPTION_KEY mid-test."""

    def _set(value):
        settings.FIELD_ENCRYPTION_KEY = value
        fresh_cipher()

    yield _set
    fresh_cipher()


@pytest.mark.django_db
class RotateConsumerPiiCommandTest:

    def test_rewrites_pii_under_new_key(self, make_consumer, settings, rotate_keys):
        consumer = make_consumer(name="Jane Doe")
        archived = make_consumer(name="Old Timer", archived=True)
        Consumer.objects.filter(pk=consumer.pk).update(_phone_encrypted=encrypt_field("555-0100"))
        old_token = bytes(Consumer.objects.get(pk=consumer.pk)._name_encrypted)

        new_key = Fernet.generate_key().decode()
        rotate_keys(f"{new_key},{settings.FIELD_ENCRYPTION_KEY}")
        output = _call_command("rotate_consumer_pii")
        assert "Re-encrypted 2 consumer(s)" in output

        # The old key can now be removed.
        rotate_keys(new_key)
        consumer.refresh_from_db()
        archived.refresh_from_db()
        assert bytes(consumer._name_encrypted) != old_token
        assert consumer.name == "Jane Doe"
        assert consumer.phone_number == "555-0100"
        assert archived.name == "Old Timer"

    def test_dry_run(self, make_consumer, settings, rotate_keys):
        consumer = make_consumer()
        before = bytes(consumer._name_encrypted)
        rotate_keys(f"{Fernet.generate_key().decode()},{settings.FIELD_ENCRYPTION_KEY}")

        output = _call_command("rotate_consumer_pii", "--dry-run")

        assert "Would re-encrypt 1 consumer(s)" in output
        consumer.refresh_from_db()
        assert bytes(consumer._name_encrypted) == before

    def test_unreadable_value_changes_nothing(self, make_consumer, settings, rotate_keys):
        good = make_consumer(name="Jane Doe")
        bad = make_consumer(name="Bob Smith")
        stray = Fernet(Fernet.generate_key()).encrypt(b"unknown")
        Consumer.objects.filter(pk=bad.pk).update(_name_encrypted=stray)
        before = bytes(Consumer.objects.get(pk=good.pk)._name_encrypted)
        rotate_keys(f"{Fernet.generate_key().decode()},{settings.FIELD_ENCRYPTION_KEY}")

        with pytest.raises(CommandError):
            _call_command("rotate_consumer_pii")

        good.refresh_from_db()
        assert bytes(good._name_encrypted) == before
