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
            name="Todo",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("text", models.CharField(max_length=500)),
                ("completed", models.BooleanField(default=False)),
                ("due_date", models.DateField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("case_manager", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="todos",
                    to=settings.AUTH_USER_MODEL,
                )),
                ("consumer", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="todos",
                    to="clients.consumer",
                )),
            ],
            options={
                "db_table": "todos",
                "ordering": ["completed", "created_at", "pk"],
            },
        ),
    ]
