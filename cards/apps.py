"""App configuration for the cards Django app."""

from __future__ import annotations

from django.apps import AppConfig


class CardsConfig(AppConfig):
    """Configuration for the `cards` app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "cards"
    verbose_name = "KPI cards"
