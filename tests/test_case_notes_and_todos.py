"""Tests for case notes and todos attached to consumers."""
import datetime

from cryptography.fernet import Fernet
from django.contrib.auth import get_user_model
from django.test import Client, TestCase, override_settings

import caseload.encryption as enc_module
from apps.clients import services as consumer_services
from apps.notes import services as note_services
from apps.notes.models import Note
from apps.todos import services as todo_services
from apps.todos.models import Todo

User = get_user_model()

TEST_KEY = Fernet.generate_key().decode()


@override_settings(FIELD_ENCRYPTION_KEY=TEST_KEY)
class NoteTest(TestCase):

    def setUp(self):
        enc_module._fernet = None
        self.http = Client()
        self.staff = User.objects.create_user(username="staff", password="testpass123")
        self.other = User.objects.create_user(username="other", password="testpass123")
        self.consumer = consumer_services.create_consumer(
            self.staff, name="Jane Doe", annual_assessment=datetime.date(2025, 3, 15),
        )

    def tearDown(self):
        enc_module._fernet = None

    def test_notes_listed_newest_first(self):
        first = note_services.add_note(self.staff, self.consumer.pk, "Called, no answer.")
        second = note_services.add_note(self.staff, self.consumer.pk, "Home visit done.")
        notes = list(note_services.list_notes(self.staff, self.consumer.pk))
        self.assertEqual(notes, [second, first])

    def test_empty_note_rejected(self):
        with self.assertRaises(ValueError):
            note_services.add_note(self.staff, self.consumer.pk, "   ")

    def test_cannot_note_someone_elses_consumer(self):
        with self.assertRaises(consumer_services.ConsumerNotFound):
            note_services.add_note(self.other, self.consumer.pk, "Nope")

    def test_delete_requires_owner(self):
        note = note_services.add_note(self.staff, self.consumer.pk, "Private")
        with self.assertRaises(note_services.NoteNotFound):
            note_services.delete_note(self.other, note.pk)
        note_services.delete_note(self.staff, note.pk)
        self.assertFalse(Note.objects.filter(pk=note.pk).exists())

    def test_note_views(self):
        self.http.login(username="staff", password="testpass123")
        url = f"/consumers/{self.consumer.pk}/notes/"

        resp = self.http.post(url, {"text": "Discussed housing."})
        self.assertEqual(resp.status_code, 201)
        note_id = resp.json()["id"]

        resp = self.http.get(url)
        self.assertEqual([n["text"] for n in resp.json()["notes"]], ["Discussed housing."])

        resp = self.http.post(url, {"text": ""})
        self.assertEqual(resp.status_code, 400)

        resp = self.http.post(f"/notes/{note_id}/delete/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(Note.objects.count(), 0)

    def test_note_views_other_owner_404(self):
        note = note_services.add_note(self.staff, self.consumer.pk, "Private")
        self.http.login(username="other", password="testpass123")
        self.assertEqual(self.http.get(f"/consumers/{self.consumer.pk}/notes/").status_code, 404)
        self.assertEqual(self.http.post(f"/notes/{note.pk}/delete/").status_code, 404)


@override_settings(FIELD_ENCRYPTION_KEY=TEST_KEY)
class TodoTest(TestCase):

    def setUp(self):
        enc_module._fernet = None
        self.http = Client()
        self.staff = User.objects.create_user(username="staff", password="testpass123")
        self.other = User.objects.create_user(username="other", password="testpass123")
        self.consumer = consumer_services.create_consumer(
            self.staff, name="Jane Doe", annual_assessment=datetime.date(2025, 3, 15),
        )

    def tearDown(self):
        enc_module._fernet = None

    def test_add_with_due_date(self):
        todo = todo_services.add_todo(self.staff, self.consumer.pk, "Send forms", "2025-04-01")
        self.assertEqual(todo.due_date, datetime.date(2025, 4, 1))
        self.assertFalse(todo.completed)

    def test_toggle(self):
        todo = todo_services.add_todo(self.staff, self.consumer.pk, "Send forms")
        todo_services.toggle_todo(self.staff, todo.pk)
        todo.refresh_from_db()
        self.assertTrue(todo.completed)
        todo_services.toggle_todo(self.staff, todo.pk)
        todo.refresh_from_db()
        self.assertFalse(todo.completed)

    def test_toggle_and_delete_require_owner(self):
        todo = todo_services.add_todo(self.staff, self.consumer.pk, "Send forms")
        with self.assertRaises(todo_services.TodoNotFound):
            todo_services.toggle_todo(self.other, todo.pk)
        with self.assertRaises(todo_services.TodoNotFound):
            todo_services.delete_todo(self.other, todo.pk)
        self.assertTrue(Todo.objects.filter(pk=todo.pk).exists())

    def test_open_todo_counts(self):
        todo_services.add_todo(self.staff, self.consumer.pk, "One")
        todo_services.add_todo(self.staff, self.consumer.pk, "Two")
        done = todo_services.add_todo(self.staff, self.consumer.pk, "Three")
        todo_services.toggle_todo(self.staff, done.pk)
        self.assertEqual(todo_services.open_todo_counts(self.staff), {self.consumer.pk: 2})
        self.assertEqual(todo_services.open_todo_counts(self.other), {})

    def test_todo_views(self):
        self.http.login(username="staff", password="testpass123")
        url = f"/consumers/{self.consumer.pk}/todos/"

        resp = self.http.post(url, {"text": "Book visit", "due_date": "2025-05-01"})
        self.assertEqual(resp.status_code, 201)
        todo_id = resp.json()["id"]
        self.assertEqual(resp.json()["due_date"], "2025-05-01")

        resp = self.http.post(f"/todos/{todo_id}/toggle/")
        self.assertTrue(resp.json()["completed"])

        resp = self.http.get(url)
        self.assertEqual(len(resp.json()["todos"]), 1)

        resp = self.http.post(url, {"text": "Bad date", "due_date": "someday"})
        self.assertEqual(resp.status_code, 400)

        resp = self.http.post(f"/todos/{todo_id}/delete/")
        self.assertEqual(resp.status_code, 200)
        self.assertFalse(Todo.objects.exists())

    def test_open_todos_shown_in_consumer_list(self):
        todo_services.add_todo(self.staff, self.consumer.pk, "One")
        self.http.login(username="staff", password="testpass123")
        data = self.http.get("/consumers/").json()["consumers"][0]
        self.assertEqual(data["open_todos"], 1)

    def test_todo_views_other_owner_404(self):
        todo = todo_services.add_todo(self.staff, self.consumer.pk, "One")
        self.http.login(username="other", password="testpass123")
        self.assertEqual(self.http.post(f"/todos/{todo.pk}/toggle/").status_code, 404)
        self.assertEqual(self.http.get(f"/consumers/{self.consumer.pk}/todos/").status_code, 404)
