"""Forms for creating consumers, from the UI or from a CSV import row."""
from django import forms
from django.utils.translation import gettext_lazy as _

from apps.compliance.engine import InvalidInput, compute_quarterly_dates

DATE_INPUT_FORMATS = ["%Y-%m-%d", "%m/%d/%Y", "%m/%d/%y"]


class ConsumerForm(forms.Form):
    """Create a consumer.

    Plain Form (not ModelForm) because name and phone are encrypted
    properties, not ORM fields.
    """

    name = forms.CharField(max_length=255, label=_("Name"))
    phone_number = forms.CharField(max_length=50, required=False, label=_("Phone number"))
    insurance = forms.CharField(max_length=100, required=False, label=_("Authorization ID"))
    record_id = forms.CharField(max_length=100, required=False, label=_("Client/Record ID"))
    next_annual_assessment = forms.DateField(
        input_formats=DATE_INPUT_FORMATS,
        label=_("Annual assessment"),
    )
    next_quarterly_review = forms.DateField(
        input_formats=DATE_INPUT_FORMATS,
        required=False,
        label=_("Next quarterly review"),
        help_text=_("Leave blank to use the calculated 1st quarter date."),
    )

    def clean_name(self):
        name = self.cleaned_data["name"].strip()
        if not name:
            raise forms.ValidationError(_("Name is required."))
        return name

    def clean_next_annual_assessment(self):
        annual = self.cleaned_data["next_annual_assessment"]
        try:
            compute_quarterly_dates(annual)
        except InvalidInput:
            raise forms.ValidationError(_("Quarterly reviews cannot be scheduled for this date."))
        return annual


# Column order of the caseload export used for bulk import.
IMPORT_COLUMNS = [
    "Id",
    "First Name",
    "Last Name",
    "Preferred Name",
    "Client/Record ID",
    "Cell Phone",
    "Plan End Date",
    "Authorization ID",
]


def import_row_to_form(row):
    """Build a ConsumerForm from one CSV row (a list of column values).

    The plan end date is the consumer's annual assessment date.
    """
    values = [value.strip() for value in row] + [""] * len(IMPORT_COLUMNS)
    (_id, first, last, preferred, record_id, phone, plan_end, authorization) = (
        values[:len(IMPORT_COLUMNS)]
    )
    name = f"{preferred or first} {last}".strip()
    return ConsumerForm(data={
        "name": name,
        "phone_number": phone,
        "insurance": authorization,
        "record_id": record_id,
        "next_annual_assessment": plan_end,
    })
