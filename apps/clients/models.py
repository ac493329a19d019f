"""Consumer records and their compliance schedule fields."""
from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from apps.compliance.engine import ComplianceRecord, InvalidInput, compute_quarterly_dates
from caseload.encryption import DecryptionError, decrypt_field, encrypt_field

QUARTER_DATE_FIELDS = ("qr1_date", "qr2_date", "qr3_date", "qr4_date")
QUARTER_COMPLETED_FIELDS = (
    "qr1_completed", "qr2_completed", "qr3_completed", "qr4_completed",
)


class ConsumerQuerySet(models.QuerySet):

    def active(self):
        return self.filter(archived=False)

    def archived(self):
        return self.filter(archived=True)

    def for_case_manager(self, user):
        return self.filter(case_manager=user)


class Consumer(models.Model):
    """A client on a case manager's caseload.

    The annual assessment date drives the four quarterly review dates.
    qrN_date holds a manual override for quarter N (null = use the
    calculated date); qrN_completed records whether that review is done.
    next_quarterly_review is a convenience copy written explicitly by the
    "reset to calculated" action, not kept in sync on every save.
    """

    case_manager = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="consumers",
    )

    # Encrypted PII
    _name_encrypted = models.BinaryField(default=b"")
    _phone_encrypted = models.BinaryField(default=b"", blank=True)

    insurance = models.CharField(max_length=100, default="", blank=True)
    record_id = models.CharField(max_length=100, default="", blank=True)

    # Monthly contact checkboxes, cleared on the 1st by reset_monthly_contacts
    first_contact_completed = models.BooleanField(default=False)
    second_contact_completed = models.BooleanField(default=False)

    last_contact_date = models.DateField(null=True, blank=True)
    last_face_to_face_date = models.DateField(null=True, blank=True)

    next_quarterly_review = models.DateField()
    next_annual_assessment = models.DateField()
    last_qr_completed = models.DateField(null=True, blank=True)
    last_annual_completed = models.DateField(null=True, blank=True)

    qr1_date = models.DateField(null=True, blank=True)
    qr2_date = models.DateField(null=True, blank=True)
    qr3_date = models.DateField(null=True, blank=True)
    qr4_date = models.DateField(null=True, blank=True)
    qr1_completed = models.BooleanField(default=False)
    qr2_completed = models.BooleanField(default=False)
    qr3_completed = models.BooleanField(default=False)
    qr4_completed = models.BooleanField(default=False)

    archived = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ConsumerQuerySet.as_manager()

    class Meta:
        app_label = "clients"
        db_table = "consumers"
        ordering = ["-updated_at"]
        indexes = [
            models.Index(fields=["case_manager", "archived"], name="consumer_cm_archived_idx"),
        ]

    def __str__(self):
        return self.name or f"Consumer #{self.pk}"

    @property
    def name(self):
        try:
            return decrypt_field(self._name_encrypted)
        except DecryptionError:
            return "[DECRYPTION ERROR]"

    @name.setter
    def name(self, value):
        self._name_encrypted = encrypt_field(value)

    @property
    def phone_number(self):
        try:
            return decrypt_field(self._phone_encrypted)
        except DecryptionError:
            return "[DECRYPTION ERROR]"

    @phone_number.setter
    def phone_number(self, value):
        self._phone_encrypted = encrypt_field(value)

    @property
    def quarter_overrides(self):
        return tuple(getattr(self, f) for f in QUARTER_DATE_FIELDS)

    @property
    def quarter_completed(self):
        return tuple(getattr(self, f) for f in QUARTER_COMPLETED_FIELDS)

    def compliance_record(self):
        """Snapshot of the fields the compliance engine works from."""
        return ComplianceRecord(
            annual_assessment_date=self.next_annual_assessment,
            quarter_overrides=self.quarter_overrides,
            quarter_completed=self.quarter_completed,
            last_contact_date=self.last_contact_date,
            last_face_to_face_date=self.last_face_to_face_date,
        )

    def clean(self):
        super().clean()
        if self.next_annual_assessment:
            try:
                compute_quarterly_dates(self.next_annual_assessment)
            except InvalidInput as exc:
                raise ValidationError({"next_annual_assessment": str(exc)})
