from datetime import date

from dismantlepro.core.csv_export import format_cell, to_csv
from dismantlepro.core.csv_import import parse_csv


def test_format_cell() -> None:
    assert format_cell(None) == ""
    assert format_cell(True) == "Yes"
    assert format_cell(48000.0) == "48000"
    assert format_cell(2.5) == "2.5"
    assert format_cell(["crane", "rigging"]) == "crane; rigging"
    assert format_cell({"b": 1, "a": 2}) == '{"a": 2, "b": 1}'
    assert format_cell(date(2026, 3, 4)) == "2026-03-04"


def test_to_csv_quotes_cells_the_importer_can_read_back() -> None:
    text = to_csv(["Name", "Notes"], [["Acme, Inc.", 'Said "call back"\nTuesday']])
    parsed = parse_csv(text)
    assert parsed.rows == [{"Name": "Acme, Inc.", "Notes": 'Said "call back"\nTuesday'}]
