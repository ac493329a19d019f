from django.urls import path

from apps.notes import views as note_views
from apps.todos import views as todo_views

from . import views

app_name = "clients"

urlpatterns = [
    path("", views.consumer_list, name="consumer_list"),
    path("create/", views.consumer_create, name="consumer_create"),
    path("<int:consumer_id>/", views.consumer_detail, name="consumer_detail"),
    path("<int:consumer_id>/update/", views.consumer_update, name="consumer_update"),
    path("<int:consumer_id>/archive/", views.consumer_archive, name="consumer_archive"),
    # Quarterly reviews (quarter is 1-4)
    path("<int:consumer_id>/quarters/reset/", views.quarters_reset, name="quarters_reset"),
    path(
        "<int:consumer_id>/quarters/<int:quarter>/override/",
        views.quarter_override,
        name="quarter_override",
    ),
    path(
        "<int:consumer_id>/quarters/<int:quarter>/complete/",
        views.quarter_complete,
        name="quarter_complete",
    ),
    path("<int:consumer_id>/notes/", note_views.consumer_notes, name="consumer_notes"),
    path("<int:consumer_id>/todos/", todo_views.consumer_todos, name="consumer_todos"),
]
