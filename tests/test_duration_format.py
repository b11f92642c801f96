from datetime import date, datetime, timezone

import pytest

from billing.calculations import format_calendar_duration, format_duration


@pytest.mark.parametrize('days, label', [
    (0, '0 days'),
    (-5, '0 days'),
    (1, '1 day'),
    (29, '29 days'),
    (30, '1 month'),
    (31, '1 month and 1 day'),
    (45, '1 month and 15 days'),
    (60, '2 months'),
    (61, '2 months and 1 day'),
    (365, '12 months and 5 days'),
    (45.0, '1 month and 15 days'),
    (30.0, '1 month'),
    (1.0, '1 day'),
])
def test_format_duration(days, label):
    assert format_duration(days) == label


@pytest.mark.parametrize('start, end, label', [
    ('2024-01-15', '2024-03-15', '2 months'),
    ('2024-01-25', '2024-02-05', '11 days'),
    # end day before start day: whole months step from the start date, clamped to month end
    ('2024-01-31', '2024-03-01', '1 month and 1 day'),
    ('2023-01-31', '2023-03-01', '1 month and 1 day'),
    ('2024-03-20', '2024-05-10', '1 month and 20 days'),
    ('2024-01-31', '2024-04-30', '3 months'),
    # year rollover
    ('2023-12-20', '2024-01-05', '16 days'),
    ('2023-11-15', '2025-02-10', '1 year and 2 months and 26 days'),
    ('2024-06-01', '2026-06-01', '2 years'),
    ('2024-01-01', '2025-01-02', '1 year and 1 day'),
    ('2024-06-01', '2024-06-01', '0 days'),
    ('2024-06-10', '2024-06-01', '0 days'),
])
def test_format_calendar_duration_from_dates(start, end, label):
    assert format_calendar_duration(0, start, end) == label


def test_format_calendar_duration_ignores_day_count_when_dates_resolve():
    assert format_calendar_duration(999, date(2024, 2, 1), date(2024, 3, 1)) == '1 month'


def test_format_calendar_duration_mixed_inputs():
    start = {'seconds': int(datetime(2024, 1, 15, tzinfo=timezone.utc).timestamp())}
    end = datetime(2024, 4, 20, 18, 0)
    assert format_calendar_duration(0, start, end) == '3 months and 5 days'


@pytest.mark.parametrize('days, start, end, label', [
    (0, None, None, '1 month'),
    (-3, None, None, '1 month'),
    (45, None, None, '1 month and 15 days'),
    (12, '2024-01-01', None, '12 days'),
    (0, 'garbage', '2024-02-01', '1 month'),
    (60.0, None, None, '2 months'),
])
def test_format_calendar_duration_fallback(days, start, end, label):
    assert format_calendar_duration(days, start, end) == label
