"""Pytest hooks and fixtures shared across the test suite."""

from __future__ import annotations

import json
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

import pytest


@pytest.fixture
def card_payload() -> dict[str, Any]:
    """Return a complete card document with `config` and `data` sections."""

    return {
        "config": {
            "title": "Revenue",
            "subtitle": "'Year to date'",
            "main": {"format": {"kind": "kmb"}, "prefix": "", "suffix": ""},
            "comparisons": {
                "left": {
                    "title": "vs LY",
                    "format": "percent",
                    "showArrows": True,
                },
                "right": {"enabled": False},
            },
            "style": {"background": "#ffffff", "shadow": {"depth": "subtle"}},
            "chart": {"type": "bar", "showXAxis": True, "axisRule": {"mode": "after_last_dash"}},
            "sort": {"by": "dimension", "order": "asc"},
            "bottomMode": "both",
        },
        "data": {
            "main": {"value": 1234567},
            "comparisons": {"left": {"value": -0.125}},
            "series": [
                {"label": "2025-mar", "value": 30},
                {"label": "2025-jan", "value": 10},
                {"label": "2025-feb", "value": 20},
            ],
        },
    }


@pytest.fixture
def write_document(tmp_path: Path) -> Callable[[str, str], Path]:
    """Return a helper that writes a card document into `tmp_path`."""

    def _write(name: str, content: str) -> Path:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def json_document(card_payload: dict[str, Any], write_document: Callable[[str, str], Path]) -> Path:
    """Return the default card document written as JSON."""

    return write_document("card.json", json.dumps(card_payload))


def pytest_collection_modifyitems(items: Sequence[pytest.Item]) -> None:
    """Enforce that every test has exactly one speed marker.

    - `unit`: pure, fast tests that never go through Django views or commands.
    - `integration`: tests touching Django views, commands, settings, or files.

    Each test must have exactly one of these markers.
    """

    invalid: list[str] = []
    for item in items:
        has_unit = item.get_closest_marker("unit") is not None
        has_integration = item.get_closest_marker("integration") is not None
        if has_unit == has_integration:
            markers = []
            if has_unit:
                markers.append("unit")
            if has_integration:
                markers.append("integration")
            invalid.append(f"{item.nodeid} (markers={markers or 'none'})")

    if invalid:
        joined = "\n".join(f"- {nodeid}" for nodeid in invalid)
        raise pytest.UsageError(
            "Each test must have exactly one speed marker: `@pytest.mark.unit` or "
            "`@pytest.mark.integration`.\n"
            f"Offending tests:\n{joined}"
        )
