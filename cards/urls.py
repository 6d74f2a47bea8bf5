"""URL configuration for card views."""

from __future__ import annotations

from django.urls import path

from cards import views

app_name = "cards"

urlpatterns = [
    path("api/cards/render/", views.render_card_api, name="render_card_api"),
    path("api/cards/format/", views.format_value_api, name="format_value_api"),
]
