from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("clients", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Note",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("text", models.TextField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("case_manager", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="case_notes",
                    to=settings.AUTH_USER_MODEL,
                )),
                ("consumer", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="notes",
                    to="clients.consumer",
                )),
            ],
            options={
                "db_table": "case_notes",
                "ordering": ["-created_at", "-pk"],
            },
        ),
    ]
