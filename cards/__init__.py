"""KPI card presentation layer (Django app)."""
