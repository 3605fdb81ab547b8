"""
URL configuration for chalet_manager project.

Feeds públicos (calendar.ics), vista previa iCal para el editor y las
operaciones de edición de bloqueos/tarifas viven en la app villas.
"""
from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path("admin/", admin.site.urls),
    path("", include("villas.urls")),
]
