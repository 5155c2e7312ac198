import pytest

from dismantlepro.core.silhouette import detect_equipment_type


@pytest.mark.parametrize(
    ("make", "model", "expected"),
    [
        ("Caterpillar", "320", "excavator"),
        ("  CAT ", " 336 ", "excavator"),
        ("Komatsu", "PC210LC", "excavator"),
        ("Caterpillar", "950M", "wheel_loader"),
        ("Komatsu", "D65EX", "bulldozer"),
        ("Bobcat", "T770", "compact_track_loader"),
        ("Bobcat", "S650", "skid_steer"),
        ("Volvo", "A40G", "dump_truck"),
        ("Grove", "RT890E", "crane"),
        ("Hamm", "H13i", "roller"),
        ("Unknown", "XYZ", "other"),
        ("", "", "other"),
    ],
)
def test_detect_equipment_type(make: str, model: str, expected: str) -> None:
    assert detect_equipment_type(make, model) == expected


def test_earlier_category_wins_when_rules_overlap() -> None:
    # "loader" text alone reads as a wheel loader, unless a track hint is present
    assert detect_equipment_type("Acme", "Big Loader") == "wheel_loader"
    assert detect_equipment_type("Acme", "Track Loader 9") == "compact_track_loader"
