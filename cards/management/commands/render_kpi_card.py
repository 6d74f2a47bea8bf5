"""Render a KPI card from a JSON or YAML document."""

from __future__ import annotations

import json
from pathlib import Path

import yaml
from django.core.management.base import BaseCommand, CommandError

from cards.codec import decode_card_config, decode_card_data
from cards.render import render_card
from cards.validator import validate_card_config


class Command(BaseCommand):
    """Render a KPI card document to stdout."""

    help = "Render a KPI card from a JSON or YAML file with `config` and `data` sections."

    def add_arguments(self, parser) -> None:
        """Add command arguments."""

        parser.add_argument("path", help="Path to a .json, .yaml, or .yml card document.")
        parser.add_argument(
            "--svg-only",
            action="store_true",
            help="Print only the chart SVG instead of the full card HTML.",
        )
        parser.add_argument("--width", type=float, default=None, help="Card width in px.")
        parser.add_argument("--height", type=float, default=None, help="Card height in px.")
        parser.add_argument(
            "--check",
            action="store_true",
            help="Validate the card config and report problems without rendering.",
        )

    def handle(self, *args, **options) -> str | None:
        """Run the command."""

        path = Path(options["path"])
        svg_only: bool = options["svg_only"]
        check: bool = options["check"]

        if check and svg_only:
            raise CommandError("Use either --check or --svg-only, not both.")

        payload = _load_document(path)
        try:
            config = decode_card_config(payload.get("config") or {})
            data = decode_card_data(payload.get("data") or {})
        except ValueError as exc:
            raise CommandError(f"{path}: {exc}") from exc

        validation = validate_card_config(config)
        for warning in validation.warnings:
            self.stderr.write(f"warning: {warning}")
        if not validation.is_valid:
            raise CommandError("Card config is invalid:\n" + "\n".join(f"- {err}" for err in validation.errors))
        if check:
            self.stdout.write(self.style.SUCCESS(f"{path}: card config is valid."))
            return None

        rendered = render_card(config, data, width=options["width"], height=options["height"])
        if svg_only:
            if not rendered.chart_svg:
                raise CommandError("The card has no chart to render.")
            self.stdout.write(rendered.chart_svg)
        else:
            self.stdout.write(rendered.html)
        return None


def _load_document(path: Path) -> dict:
    """Load a card document, choosing the parser from the file suffix."""

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CommandError(f"Unable to read {path}: {exc}") from exc

    try:
        if path.suffix.lower() in {".yaml", ".yml"}:
            payload = yaml.safe_load(raw) or {}
        else:
            payload = json.loads(raw)
    except (yaml.YAMLError, ValueError) as exc:
        raise CommandError(f"Unable to parse {path}: {exc}") from exc

    if not isinstance(payload, dict):
        raise CommandError(f"{path} must contain an object with `config` and `data` sections.")
    return payload
