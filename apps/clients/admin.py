"""Django admin registration for Consumer."""
from django.contrib import admin

from apps.notes.models import Note
from apps.todos.models import Todo

from .models import Consumer


class TodoInline(admin.TabularInline):
    model = Todo
    extra = 0
    fields = ("text", "completed", "due_date", "case_manager")
    raw_id_fields = ("case_manager",)


class NoteInline(admin.TabularInline):
    model = Note
    extra = 0
    fields = ("text", "case_manager", "created_at")
    readonly_fields = ("created_at",)
    raw_id_fields = ("case_manager",)


@admin.register(Consumer)
class ConsumerAdmin(admin.ModelAdmin):
    list_display = (
        "pk", "get_name", "case_manager", "next_annual_assessment",
        "next_quarterly_review", "archived",
    )
    list_filter = ("archived",)
    raw_id_fields = ("case_manager",)
    exclude = ("_name_encrypted", "_phone_encrypted")
    inlines = [TodoInline, NoteInline]

    def get_name(self, obj):
        return obj.name
    get_name.short_description = "Name"
