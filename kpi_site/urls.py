"""URL configuration for the KPI card service."""

from __future__ import annotations

from django.urls import include, path

urlpatterns = [
    path("", include("cards.urls")),
]
