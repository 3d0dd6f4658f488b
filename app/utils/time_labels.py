"""Helpers for the "HH:MM AM" slot labels."""

from datetime import datetime

LABEL_FORMAT = "%I:%M %p"


def parse_time_label(label: str) -> datetime:
    """Parse a 12-hour label such as "9:00 am" or "02:30 PM"."""
    try:
        return datetime.strptime(label.strip(), LABEL_FORMAT)
    except (AttributeError, ValueError) as e:
        raise ValueError(f"Invalid time label '{label}', expected format 'HH:MM AM'") from e


def normalize_time_label(label: str) -> str:
    """Return the canonical zero-padded, upper-case form of a label."""
    return parse_time_label(label).strftime(LABEL_FORMAT)


def label_to_minutes(label: str) -> int:
    """Minute of the day for a label ("12:00 AM" -> 0, "01:30 PM" -> 810)."""
    parsed = parse_time_label(label)
    return parsed.hour * 60 + parsed.minute
