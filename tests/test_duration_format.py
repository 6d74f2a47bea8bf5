"""Golden tests for day-fraction duration formatting."""

from __future__ import annotations

import pytest

from kpi_engine.formats import FormatSpec, NativeValue, format_duration, format_value

pytestmark = [pytest.mark.unit, pytest.mark.golden]


def test_duration_kind_defaults_to_hours_minutes_seconds() -> None:
    """Half a day renders as 12 hours with the default pattern."""

    assert format_value(0.5, FormatSpec(kind="duration", duration_pattern="h:mm:ss")) == "12:00:00"
    assert format_value(0.5, FormatSpec(kind="duration")) == "12:00:00"


def test_negative_durations_get_a_leading_minus() -> None:
    """Negative values decompose their absolute value and prepend `-`."""

    assert format_value(-0.5, FormatSpec(kind="duration", duration_pattern="[h]:mm:ss")) == "-12:00:00"


def test_bracket_and_default_modes_let_hours_exceed_a_day() -> None:
    """Hours are not wrapped into days unless the pattern asks for `D`."""

    assert format_duration(1.5, "[h]:mm") == "36:00"
    assert format_duration(1.5, "[hh]:mm") == "36:00"
    assert format_duration(1.5, "h:mm") == "36:00"


def test_day_mode_splits_whole_days_out_of_hours() -> None:
    """Patterns containing `D` report days plus the remaining hours."""

    assert format_duration(1.5, "D hh:mm") == "1 12:00"
    assert format_duration(2.25, "DD hh:mm:ss") == "02 06:00:00"


def test_single_and_double_tokens_pad_differently() -> None:
    """Doubled tokens are zero-padded to two digits; single tokens are not."""

    assert format_duration(0.25, "hh:mm:ss") == "06:00:00"
    assert format_duration(61 / 86_400, "h:m:s") == "0:1:1"
    assert format_duration(61 / 86_400, "h:mm:ss") == "0:01:01"


def test_seconds_are_rounded_to_the_nearest_second() -> None:
    """Total seconds are rounded to the nearest whole second."""

    assert format_duration(90.6 / 86_400, "m:ss") == "1:31"
    assert format_duration(89.4 / 86_400, "m:ss") == "1:29"


def test_values_too_large_for_seconds_fall_back_to_grouped_decimal() -> None:
    """Finite values whose second count overflows never raise."""

    assert format_value(1e305, FormatSpec(kind="duration", duration_pattern="h:mm:ss")) == "1e+305"
    assert format_value(1e305, FormatSpec(kind="custom", pattern="h:mm")) == "1e+305"
    assert format_value(-1e305, FormatSpec(kind="duration")) == "-1e+305"
    native = NativeValue(format_type="U", pattern="h:mm:ss")
    assert format_value(1e305, FormatSpec(kind="auto"), native) == "1e+305"
