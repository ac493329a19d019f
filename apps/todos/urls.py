from django.urls import path

from . import views

app_name = "todos"

urlpatterns = [
    path("<int:todo_id>/toggle/", views.todo_toggle, name="todo_toggle"),
    path("<int:todo_id>/delete/", views.todo_delete, name="todo_delete"),
]
