import pytest

from app.utils.time_labels import label_to_minutes, normalize_time_label


@pytest.mark.parametrize(
    "label, expected",
    [
        ("9:00 am", "09:00 AM"),
        ("  02:30 pm ", "02:30 PM"),
        ("12:00 PM", "12:00 PM"),
    ],
)
def test_normalize_time_label(label, expected):
    assert normalize_time_label(label) == expected


def test_minutes_order_follows_the_clock():
    labels = ["02:00 PM", "10:00 AM", "12:00 PM", "09:30 AM"]
    ordered = sorted(labels, key=label_to_minutes)
    assert ordered == ["09:30 AM", "10:00 AM", "12:00 PM", "02:00 PM"]


def test_midnight_and_noon():
    assert label_to_minutes("12:00 AM") == 0
    assert label_to_minutes("12:00 PM") == 720
    assert label_to_minutes("01:30 PM") == 810


@pytest.mark.parametrize("label", ["25:00 AM", "10:00", "ten o'clock", ""])
def test_rejects_malformed_labels(label):
    with pytest.raises(ValueError, match="Invalid time label"):
        normalize_time_label(label)
