"""URL configuration for Caseload."""
from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("consumers/", include("apps.clients.urls")),
    path("notes/", include("apps.notes.urls")),
    path("todos/", include("apps.todos.urls")),
    path("django-admin/", admin.site.urls),
]
