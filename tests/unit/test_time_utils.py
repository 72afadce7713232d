from datetime import datetime
from mindwave.utils.time_utils import IST, elapsed_ms, get_ist_time, parse_ist


def test_ist_now_is_aware():
    assert get_ist_time().utcoffset().total_seconds() == 5.5 * 3600


def test_naive_timestamps_are_ist():
    parsed = parse_ist("2025-03-01T10:00:00")
    assert parsed.tzinfo is not None
    assert parsed.hour == 10
    assert parsed.utcoffset() == IST.localize(datetime(2025, 3, 1)).utcoffset()


def test_elapsed_ms_across_zones():
    assert elapsed_ms("2025-03-01T10:00:00+05:30", "2025-03-01T04:30:01.500000+00:00") == 1500


def test_elapsed_ms_never_negative():
    assert elapsed_ms("2025-03-01T10:00:05", "2025-03-01T10:00:00") == 0


def test_any_fraction_length():
    parsed = parse_ist("2026-10-18T04:30:00.12345+00:00")
    assert (parsed.hour, parsed.minute, parsed.microsecond) == (10, 0, 123450)
    assert elapsed_ms("2026-10-18T10:00:00.1+05:30", "2026-10-18T10:00:01.2345+05:30") == 1134
