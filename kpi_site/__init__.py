"""Django project package for the KPI card service."""
