from __future__ import annotations

from datetime import datetime

from time_motion_study.shared import (
    formatDateTime,
    formatTime,
    parseActivityType,
    parsePersonCount,
)


def test_format_time_pads_fields() -> None:
    assert formatTime(0) == "00:00:00"
    assert formatTime(999) == "00:00:00"
    assert formatTime(3_723_000) == "01:02:03"


def test_format_time_uses_magnitude_and_unbounded_hours() -> None:
    assert formatTime(-61_000) == "00:01:01"
    assert formatTime(100 * 3_600_000) == "100:00:00"


def test_format_date_time_is_24_hour_us_order() -> None:
    assert formatDateTime(datetime(2024, 3, 5, 14, 7, 9)) == "03/05/2024, 14:07:09"


def test_parse_person_count_falls_back_to_one() -> None:
    assert parsePersonCount("3") == 3
    assert parsePersonCount(" 4 ") == 4
    assert parsePersonCount("") == 1
    assert parsePersonCount("abc") == 1
    assert parsePersonCount("0") == 1
    assert parsePersonCount("-2") == 1


def test_parse_person_count_clamps_to_hundred() -> None:
    assert parsePersonCount("250") == 100


def test_parse_activity_type() -> None:
    assert parseActivityType("VA") == "VA"
    assert parseActivityType("NVA") == "NVA"
    assert parseActivityType("other") == ""
    assert parseActivityType(None) == ""
