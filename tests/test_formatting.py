from datetime import datetime, timedelta

from scout_backend.utils.formatting import days_between, format_percentage, round_average


def test_format_percentage():
    assert format_percentage(2, 3) == "66.67%"
    assert format_percentage(1, 1) == "100.00%"
    assert format_percentage(0, 0) == "0%"


def test_round_average():
    assert round_average(None) == 0
    assert round_average(83.3333) == 83.33


def test_days_between_rounds_partial_days_up():
    start = datetime(2024, 1, 1)
    assert days_between(start, start + timedelta(hours=25)) == 2
    assert days_between(start, start + timedelta(days=3)) == 3
    assert days_between(start, start) == 0
    assert days_between(start, None) is None
