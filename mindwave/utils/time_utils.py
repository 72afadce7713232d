from datetime import datetime
from pydantic import TypeAdapter
import pytz

IST = pytz.timezone('Asia/Kolkata')

# Postgres trims trailing zeros from fractional seconds, so stored values can
# carry any number of digits
_timestamp = TypeAdapter(datetime)

def get_ist_time():
    """Get current time in IST"""
    return datetime.now(IST)

def parse_ist(value):
    """Parse a stored ISO timestamp, treating naive values as IST"""
    parsed = value if isinstance(value, datetime) else _timestamp.validate_python(value)
    if parsed.tzinfo is None:
        return IST.localize(parsed)
    return parsed.astimezone(IST)

def elapsed_ms(start, end):
    """Milliseconds between two stored timestamps, never negative"""
    delta = parse_ist(end) - parse_ist(start)
    return max(0, int(delta.total_seconds() * 1000))
