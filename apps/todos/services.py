"""Todo operations, scoped to the owning case manager."""
from django.db.models import Count

from apps.clients.services import get_consumer
from apps.compliance.engine import to_date

from .models import Todo


class TodoNotFound(Exception):
    """The todo does not exist or belongs to another case manager."""


def _get_todo(user, todo_id):
    try:
        return Todo.objects.get(pk=todo_id, case_manager=user)
    except (Todo.DoesNotExist, ValueError, TypeError):
        raise TodoNotFound(f"Todo {todo_id} not found.")


def list_todos(user, consumer_id):
    consumer = get_consumer(user, consumer_id)
    return consumer.todos.all()


def add_todo(user, consumer_id, text, due_date=None):
    text = (text or "").strip()
    if not text:
        raise ValueError("Todo text is required.")
    consumer = get_consumer(user, consumer_id)
    return Todo.objects.create(
        consumer=consumer,
        case_manager=user,
        text=text,
        due_date=to_date(due_date) if due_date not in (None, "") else None,
    )


def toggle_todo(user, todo_id):
    todo = _get_todo(user, todo_id)
    todo.completed = not todo.completed
    todo.save(update_fields=["completed"])
    return todo


def delete_todo(user, todo_id):
    _get_todo(user, todo_id).delete()


def open_todo_counts(user):
    """Map consumer id -> number of incomplete todos, for list badges."""
    rows = (
        Todo.objects.filter(case_manager=user, completed=False)
        .order_by()
        .values("consumer_id")
        .annotate(open_count=Count("pk"))
    )
    return {row["consumer_id"]: row["open_count"] for row in rows}
