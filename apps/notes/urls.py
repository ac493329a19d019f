from django.urls import path

from . import views

app_name = "notes"

urlpatterns = [
    path("<int:note_id>/delete/", views.note_delete, name="note_delete"),
]
