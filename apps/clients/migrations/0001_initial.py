from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Consumer",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("_name_encrypted", models.BinaryField(default=b"")),
                ("_phone_encrypted", models.BinaryField(blank=True, default=b"")),
                ("insurance", models.CharField(blank=True, default="", max_length=100)),
                ("record_id", models.CharField(blank=True, default="", max_length=100)),
                ("first_contact_completed", models.BooleanField(default=False)),
                ("second_contact_completed", models.BooleanField(default=False)),
                ("last_contact_date", models.DateField(blank=True, null=True)),
                ("last_face_to_face_date", models.DateField(blank=True, null=True)),
                ("next_quarterly_review", models.DateField()),
                ("next_annual_assessment", models.DateField()),
                ("last_qr_completed", models.DateField(blank=True, null=True)),
                ("last_annual_completed", models.DateField(blank=True, null=True)),
                ("qr1_date", models.DateField(blank=True, null=True)),
                ("qr2_date", models.DateField(blank=True, null=True)),
                ("qr3_date", models.DateField(blank=True, null=True)),
                ("qr4_date", models.DateField(blank=True, null=True)),
                ("qr1_completed", models.BooleanField(default=False)),
                ("qr2_completed", models.BooleanField(default=False)),
                ("qr3_completed", models.BooleanField(default=False)),
                ("qr4_completed", models.BooleanField(default=False)),
                ("archived", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("case_manager", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="consumers",
                    to=settings.AUTH_USER_MODEL,
                )),
            ],
            options={
                "db_table": "consumers",
                "ordering": ["-updated_at"],
                "indexes": [
                    models.Index(fields=["case_manager", "archived"], name="consumer_cm_archived_idx"),
                ],
            },
        ),
    ]
