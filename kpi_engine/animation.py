"""Count-up animation math.

Only the pure curve lives here. Scheduling frames is the host's job: it asks
for the value at a given elapsed time and renders it.
"""

from __future__ import annotations

from typing import Final

DEFAULT_DURATION_MS: Final[float] = 600.0


def ease_out_cubic(t: float) -> float:
    """Ease-out cubic curve: fast start, smooth deceleration."""

    return 1 - (1 - t) ** 3


def progress_at(elapsed_ms: float, duration_ms: float = DEFAULT_DURATION_MS) -> float:
    """Return the linear progress (0..1) after `elapsed_ms`."""

    if duration_ms <= 0:
        return 1.0
    return min(max(elapsed_ms / duration_ms, 0.0), 1.0)


def interpolate(start: float, end: float, progress: float) -> float:
    """Return the eased value between `start` and `end` at `progress`.

    `progress` is clamped to [0, 1]; at 1 the exact `end` is returned.
    """

    clamped = min(max(progress, 0.0), 1.0)
    if clamped >= 1.0:
        return end
    return start + (end - start) * ease_out_cubic(clamped)
