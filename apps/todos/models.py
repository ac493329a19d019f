"""Per-consumer todo items."""
from django.conf import settings
from django.db import models


class Todo(models.Model):
    consumer = models.ForeignKey(
        "clients.Consumer",
        on_delete=models.CASCADE,
        related_name="todos",
    )
    case_manager = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="todos",
    )
    text = models.CharField(max_length=500)
    completed = models.BooleanField(default=False)
    due_date = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        app_label = "todos"
        db_table = "todos"
        ordering = ["completed", "created_at", "pk"]

    def __str__(self):
        return self.text

    def as_dict(self):
        return {
            "id": self.pk,
            "consumer": self.consumer_id,
            "text": self.text,
            "completed": self.completed,
            "due_date": self.due_date.isoformat() if self.due_date else None,
        }
