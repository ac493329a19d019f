"""Case note operations, scoped to the owning case manager."""
from apps.clients.services import get_consumer

from .models import Note


class NoteNotFound(Exception):
    """The note does not exist or belongs to another case manager."""


def list_notes(user, consumer_id):
    """Notes for one consumer, newest first."""
    consumer = get_consumer(user, consumer_id)
    return consumer.notes.all()


def add_note(user, consumer_id, text):
    text = (text or "").strip()
    if not text:
        raise ValueError("Note text is required.")
    consumer = get_consumer(user, consumer_id)
    return Note.objects.create(consumer=consumer, case_manager=user, text=text)


def delete_note(user, note_id):
    try:
        note = Note.objects.get(pk=note_id, case_manager=user)
    except (Note.DoesNotExist, ValueError, TypeError):
        raise NoteNotFound(f"Note {note_id} not found.")
    note.delete()
