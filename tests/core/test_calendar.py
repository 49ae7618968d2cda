from __future__ import annotations

from datetime import UTC, date, datetime

import pytest

from finledger.core.calendar import period_key, period_start, to_canonical_date


def test_to_canonical_date_converts_aware_datetimes_to_berlin() -> None:
    # input: 23:30 UTC on Jan 31 is already Feb 1 in Berlin
    late_utc = datetime(2024, 1, 31, 23, 30, tzinfo=UTC)

    # act
    day = to_canonical_date(late_utc)

    # assert
    assert day == date(2024, 2, 1)


def test_to_canonical_date_accepts_iso_strings() -> None:
    assert to_canonical_date("2024-01-05") == date(2024, 1, 5)
    assert to_canonical_date("2024-06-30T22:15:00Z") == date(2024, 7, 1)


def test_to_canonical_date_keeps_naive_values() -> None:
    assert to_canonical_date(datetime(2024, 3, 10, 23, 59)) == date(2024, 3, 10)
    assert to_canonical_date(date(2024, 3, 10)) == date(2024, 3, 10)


def test_period_key_formats() -> None:
    assert period_key(date(2024, 1, 5), "day") == "2024-01-05"
    assert period_key(date(2024, 1, 5), "month") == "2024-01"
    assert period_start(date(2024, 1, 5), "month") == date(2024, 1, 1)


def test_period_key_rejects_unknown_granularity() -> None:
    with pytest.raises(ValueError, match="granularity"):
        period_key(date(2024, 1, 5), "week")  # type: ignore[arg-type]
