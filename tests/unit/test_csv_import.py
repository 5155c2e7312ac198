from dismantlepro.core.csv_import import (
    SYSTEM_FIELDS,
    auto_match_column,
    build_field_mappings,
    convert_value,
    detect_field_type,
    map_rows,
    normalize_column_name,
    parse_csv,
    suggest_field_name,
    unmapped_required_fields,
)
from dismantlepro.db.models import CustomField
from dismantlepro.types import FieldMapping


def test_parse_csv_handles_quotes_crlf_and_blank_lines() -> None:
    text = 'Company Name,Phone,Notes\r\n"Acme, Inc.",555-0100,"Said ""call back"""\r\n\r\nBeta LLC,,\r\n'
    parsed = parse_csv(text)

    assert parsed.headers == ["Company Name", "Phone", "Notes"]
    assert len(parsed.rows) == 2
    assert parsed.rows[0]["Company Name"] == "Acme, Inc."
    assert parsed.rows[0]["Notes"] == 'Said "call back"'
    assert parsed.rows[1] == {"Company Name": "Beta LLC", "Phone": "", "Notes": ""}


def test_parse_csv_pads_short_rows_and_keeps_last_line_without_newline() -> None:
    parsed = parse_csv("a,b,c\n1,2\n3,4,5")
    assert parsed.rows[0] == {"a": "1", "b": "2", "c": ""}
    assert parsed.rows[1]["c"] == "5"


def test_parse_csv_requires_header_and_one_row() -> None:
    assert parse_csv("name,phone\n").rows == []
    assert parse_csv("").headers == []


def test_column_names_are_normalized_and_suggested() -> None:
    assert normalize_column_name("  Company Name ") == "company_name"
    assert normalize_column_name("E-mail (Work)") == "e_mail_work"
    assert suggest_field_name("Fleet Size #") == "fleet_size_"


def test_auto_match_prefers_exact_then_substring() -> None:
    fields = SYSTEM_FIELDS["companies"]
    assert auto_match_column("Phone", fields) == "phone"
    assert auto_match_column("Company Name", fields) == "name"
    assert auto_match_column("Zip Code", fields) == "zip"
    assert auto_match_column("Fleet Size", fields) is None
    assert auto_match_column("   ", fields) is None


def test_detect_field_type_from_samples() -> None:
    assert detect_field_type(["12", "3.5", ""]) == "number"
    assert detect_field_type(["01/02/2024", "2024-03-05"]) == "date"
    assert detect_field_type(["yes", "No", "TRUE"]) == "boolean"
    assert detect_field_type(["Acme", "12"]) == "text"
    assert detect_field_type([]) == "text"


def test_convert_value_by_type() -> None:
    assert convert_value("$1,200.50", "number") == 1200.5
    assert convert_value("n/a", "number") is None
    assert convert_value("Yes", "boolean") is True
    assert convert_value("0", "boolean") is False
    assert convert_value("01/15/2024", "date") == "2024-01-15T00:00:00"
    assert convert_value("vip; fleet ;", "json") == ["vip", "fleet"]
    assert convert_value("single", "json") == "single"
    assert convert_value("   ", "text") is None


def test_build_field_mappings_reports_unmapped_required_fields() -> None:
    parsed = parse_csv("Phone,Fleet Size\n555-0100,12\n555-0101,4\n")
    mappings = build_field_mappings(parsed, "companies")

    assert [item.system_field for item in mappings] == ["phone", None]
    assert mappings[1].new_field_name == "fleet_size"
    assert mappings[1].new_field_type == "number"
    assert mappings[1].sample_values == ["12", "4"]
    assert unmapped_required_fields("companies", mappings) == ["name"]


def test_map_rows_routes_custom_fields_into_custom_data_and_drops_unmapped() -> None:
    parsed = parse_csv("Company Name,Fleet Size,Region,Ignored\nBeta Haul,7,Gulf,x\n")
    fleet = CustomField(table_name="companies", field_name="fleet_size", field_type="number")
    mappings = [
        FieldMapping(csv_column="Company Name", system_field="name"),
        FieldMapping(csv_column="Fleet Size", system_field="custom:fleet_size"),
        FieldMapping(csv_column="Region", create_new=True, new_field_name="region"),
        FieldMapping(csv_column="Ignored"),
    ]

    rows = map_rows(parsed, mappings, "companies", [fleet])

    assert rows == [{"name": "Beta Haul", "custom_data": {"fleet_size": 7.0, "region": "Gulf"}}]
