"""Free-text case notes attached to a consumer."""
from django.conf import settings
from django.db import models


class Note(models.Model):
    consumer = models.ForeignKey(
        "clients.Consumer",
        on_delete=models.CASCADE,
        related_name="notes",
    )
    case_manager = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="case_notes",
    )
    text = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        app_label = "notes"
        db_table = "case_notes"
        ordering = ["-created_at", "-pk"]

    def __str__(self):
        return f"Note #{self.pk} for consumer #{self.consumer_id}"

    def as_dict(self):
        return {
            "id": self.pk,
            "consumer": self.consumer_id,
            "text": self.text,
            "created_at": self.created_at.isoformat(),
        }
