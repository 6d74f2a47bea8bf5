"""HTTP endpoints for rendering KPI cards."""

from __future__ import annotations

import json
import logging
import math

from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from kpi_engine.formats import FormatSpec, format_value, validate_format_spec

from .codec import decode_card_config, decode_card_data
from .render import render_card
from .validator import validate_card_config

logger = logging.getLogger(__name__)


@csrf_exempt
@require_POST
def render_card_api(request: HttpRequest) -> JsonResponse:
    """Render a KPI card from a JSON body.

    The body is `{"config": {...}, "data": {...}, "width": 300, "height": 200}`;
    `width` and `height` are optional.
    """

    try:
        payload = json.loads(request.body or b"{}")
    except ValueError:
        logger.warning("Rejected card render request: body is not valid JSON.")
        return JsonResponse({"ok": False, "error": "Request body must be valid JSON."}, status=400)
    if not isinstance(payload, dict):
        return JsonResponse({"ok": False, "error": "Request body must be a JSON object."}, status=400)

    try:
        config = decode_card_config(payload.get("config") or {})
        data = decode_card_data(payload.get("data") or {})
        width = _optional_dimension(payload.get("width"), "width")
        height = _optional_dimension(payload.get("height"), "height")
    except ValueError as exc:
        logger.warning("Rejected card render request: %s", exc)
        return JsonResponse({"ok": False, "error": str(exc)}, status=400)

    validation = validate_card_config(config)
    if not validation.is_valid:
        logger.warning("Rejected card config: %s", "; ".join(validation.errors))
        return JsonResponse(
            {"ok": False, "error": "Card config is invalid.", "errors": list(validation.errors)},
            status=400,
        )

    rendered = render_card(config, data, width=width, height=height)
    return JsonResponse(
        {
            "ok": True,
            "html": rendered.html,
            "svg": rendered.chart_svg,
            "text": rendered.main_text,
            "warnings": list(rendered.warnings),
        }
    )


@require_GET
def format_value_api(request: HttpRequest) -> JsonResponse:
    """Format a single value: `?value=1234.5&kind=custom&pattern=%23,%23%230.00`."""

    spec = FormatSpec(
        kind=(request.GET.get("kind") or "number").strip(),  # type: ignore[arg-type]
        pattern=request.GET.get("pattern") or None,
        currency_symbol=request.GET.get("currency") or None,
        duration_pattern=request.GET.get("duration") or None,
    )
    errors = validate_format_spec(spec)
    if errors:
        return JsonResponse({"ok": False, "error": " ".join(errors)}, status=400)
    return JsonResponse({"ok": True, "text": format_value(request.GET.get("value"), spec)})


def _optional_dimension(value: object, name: str) -> float | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValueError(f"{name} must be a positive number.")
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{name} must be a positive number.") from exc
    if not math.isfinite(number) or number <= 0:
        raise ValueError(f"{name} must be a positive number.")
    return number
