from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from dismantlepro.config import get_settings
from dismantlepro.db.models import CustomField
from dismantlepro.db.repositories import Repository
from dismantlepro.types import (
    COMPANY_STATUSES,
    CONTACT_ROLES,
    FieldMapping,
    ImportFieldType,
    ImportResult,
    ImportTable,
)

logger = logging.getLogger(__name__)

CUSTOM_PREFIX = "custom:"
SAMPLE_SIZE = 5

_NORMALIZE_RE = re.compile(r"[\s_\-.,;:/\\()\[\]{}'\"#&+*!?|]+")
_DATE_RE = re.compile(r"^\d{1,2}[/-]\d{1,2}[/-]\d{2,4}$|^\d{4}[/-]\d{1,2}[/-]\d{1,2}$")
_BOOL_RE = re.compile(r"^(true|false|yes|no|1|0)$", re.IGNORECASE)
_DATE_FORMATS = ("%Y-%m-%d", "%Y/%m/%d", "%m/%d/%Y", "%m-%d-%Y", "%m/%d/%y", "%m-%d-%y")
_TRUE_TOKENS = {"true", "yes", "1"}


@dataclass(frozen=True, slots=True)
class SystemField:
    name: str
    field_type: ImportFieldType = "text"
    required: bool = False

    @property
    def label(self) -> str:
        return self.name.replace("_", " ").capitalize()


@dataclass(slots=True)
class ParsedCsv:
    headers: list[str] = field(default_factory=list)
    rows: list[dict[str, str]] = field(default_factory=list)


def _fields(required: tuple[str, ...], *entries: str | tuple[str, ImportFieldType]) -> tuple[SystemField, ...]:
    out: list[SystemField] = []
    for entry in entries:
        name, field_type = entry if isinstance(entry, tuple) else (entry, "text")
        out.append(SystemField(name=name, field_type=field_type, required=name in required))
    return tuple(out)


SYSTEM_FIELDS: dict[str, tuple[SystemField, ...]] = {
    "companies": _fields(
        ("name",),
        "name",
        "industry",
        "website",
        "phone",
        "address",
        "city",
        "state",
        "zip",
        "status",
        ("tags", "json"),
        "notes",
        "mc_number",
        "dot_number",
        ("credit_limit", "number"),
        "payment_terms",
        "billing_email",
    ),
    "customers": _fields(
        ("name",),
        "name",
        "company",
        "email",
        "phone",
        "address",
        "billing_address",
        "billing_city",
        "billing_state",
        "billing_zip",
        "payment_terms",
        "notes",
        "mc_number",
        "dot_number",
        ("credit_limit", "number"),
    ),
    "contacts": _fields(
        ("first_name",),
        "first_name",
        "last_name",
        "title",
        "email",
        "phone",
        "mobile",
        "role",
        "company_name",
        "notes",
        ("is_primary", "boolean"),
    ),
    "inland_quotes": _fields(
        ("customer_name", "origin_address", "destination_address"),
        "quote_number",
        "customer_name",
        "origin_address",
        "destination_address",
        "equipment_type",
        ("weight_lbs", "number"),
        ("length_inches", "number"),
        ("width_inches", "number"),
        ("height_inches", "number"),
        ("total_price", "number"),
        "notes",
    ),
}


def system_fields_for(target_table: str) -> tuple[SystemField, ...]:
    try:
        return SYSTEM_FIELDS[target_table]
    except KeyError:
        raise ValueError(f"unsupported import table '{target_table}'") from None


def parse_csv(text: str) -> ParsedCsv:
    rows: list[list[str]] = []
    row: list[str] = []
    cell: list[str] = []
    in_quotes = False
    i = 0
    length = len(text)

    def end_row() -> None:
        if any(value != "" for value in row):
            rows.append(list(row))
        row.clear()

    while i < length:
        char = text[i]
        next_char = text[i + 1] if i + 1 < length else ""
        if in_quotes:
            if char == '"' and next_char == '"':
                cell.append('"')
                i += 1
            elif char == '"':
                in_quotes = False
            else:
                cell.append(char)
        elif char == '"':
            in_quotes = True
        elif char == ",":
            row.append("".join(cell).strip())
            cell.clear()
        elif char == "\n" or (char == "\r" and next_char == "\n"):
            row.append("".join(cell).strip())
            cell.clear()
            end_row()
            if char == "\r":
                i += 1
        elif char != "\r":
            cell.append(char)
        i += 1

    if cell or row:
        row.append("".join(cell).strip())
        end_row()

    if len(rows) < 2:
        return ParsedCsv()

    headers = rows[0]
    records = [
        {header: (values[index] if index < len(values) else "") for index, header in enumerate(headers)}
        for values in rows[1:]
    ]
    return ParsedCsv(headers=headers, rows=records)


def normalize_column_name(name: str) -> str:
    return _NORMALIZE_RE.sub("_", name.strip().lower()).strip("_")


def suggest_field_name(column: str) -> str:
    value = re.sub(r"[\s\-]+", "_", column.strip().lower())
    return re.sub(r"[^a-z0-9_]", "", value)


def auto_match_column(
    column: str,
    system_fields: tuple[SystemField, ...] | list[SystemField],
    custom_fields: list[CustomField] | None = None,
) -> str | None:
    normalized = normalize_column_name(column)
    if not normalized:
        return None

    for system_field in system_fields:
        if normalized == normalize_column_name(system_field.name):
            return system_field.name

    for system_field in system_fields:
        candidate = normalize_column_name(system_field.name)
        if candidate in normalized or normalized in candidate:
            return system_field.name

    for custom in custom_fields or []:
        candidate = normalize_column_name(custom.field_name)
        if candidate and (normalized == candidate or candidate in normalized):
            return f"{CUSTOM_PREFIX}{custom.field_name}"
    return None


def _to_float(value: str) -> float | None:
    try:
        number = float(value)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def detect_field_type(samples: list[str]) -> ImportFieldType:
    values = [value.strip() for value in samples if value and value.strip()][:SAMPLE_SIZE]
    if not values:
        return "text"
    if all(_to_float(value) is not None for value in values):
        return "number"
    if all(_DATE_RE.match(value) for value in values):
        return "date"
    if all(_BOOL_RE.match(value) for value in values):
        return "boolean"
    return "text"


def sample_values(parsed: ParsedCsv, column: str) -> list[str]:
    return [row[column] for row in parsed.rows[:SAMPLE_SIZE] if row.get(column)]


def build_field_mappings(
    parsed: ParsedCsv,
    target_table: ImportTable,
    custom_fields: list[CustomField] | None = None,
) -> list[FieldMapping]:
    system_fields = system_fields_for(target_table)
    mappings: list[FieldMapping] = []
    for column in parsed.headers:
        samples = sample_values(parsed, column)
        mappings.append(
            FieldMapping(
                csv_column=column,
                system_field=auto_match_column(column, system_fields, custom_fields),
                create_new=False,
                new_field_name=suggest_field_name(column),
                new_field_type=detect_field_type(samples),
                sample_values=samples,
            )
        )
    return mappings


def unmapped_required_fields(target_table: ImportTable, mappings: list[FieldMapping]) -> list[str]:
    mapped = {mapping.system_field for mapping in mappings if mapping.system_field}
    return [item.name for item in system_fields_for(target_table) if item.required and item.name not in mapped]


def _parse_date(value: str) -> datetime | None:
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    return None


def convert_value(value: str | None, field_type: ImportFieldType) -> Any:
    if value is None or not value.strip():
        return None
    text = value.strip()

    if field_type == "number":
        return _to_float(text.replace(",", "").replace("$", ""))
    if field_type == "boolean":
        return text.lower() in _TRUE_TOKENS
    if field_type == "date":
        parsed = _parse_date(text)
        return parsed.isoformat() if parsed else None
    if field_type == "json":
        if ";" in text:
            return [item.strip() for item in text.split(";") if item.strip()]
        return text
    return text


def mapping_field_type(
    mapping: FieldMapping,
    target_table: ImportTable,
    custom_fields: list[CustomField] | None = None,
) -> ImportFieldType:
    if mapping.system_field:
        if mapping.system_field.startswith(CUSTOM_PREFIX):
            name = mapping.system_field[len(CUSTOM_PREFIX) :]
            for custom in custom_fields or []:
                if custom.field_name == name:
                    return custom.field_type
            return "text"
        for system_field in system_fields_for(target_table):
            if system_field.name == mapping.system_field:
                return system_field.field_type
        return "text"
    return mapping.new_field_type


def map_rows(
    parsed: ParsedCsv,
    mappings: list[FieldMapping],
    target_table: ImportTable,
    custom_fields: list[CustomField] | None = None,
) -> list[dict[str, Any]]:
    types = [mapping_field_type(mapping, target_table, custom_fields) for mapping in mappings]
    mapped_rows: list[dict[str, Any]] = []
    for row in parsed.rows:
        mapped: dict[str, Any] = {}
        for mapping, field_type in zip(mappings, types):
            value = convert_value(row.get(mapping.csv_column, ""), field_type)
            if mapping.system_field and mapping.system_field.startswith(CUSTOM_PREFIX):
                mapped.setdefault("custom_data", {})[mapping.system_field[len(CUSTOM_PREFIX) :]] = value
            elif mapping.system_field:
                mapped[mapping.system_field] = value
            elif mapping.create_new and mapping.new_field_name:
                mapped.setdefault("custom_data", {})[mapping.new_field_name] = value
        mapped_rows.append(mapped)
    return mapped_rows


def _required_message(field_name: str) -> str:
    return f"{field_name.replace('_', ' ').capitalize()} is required"


class CsvImporter:
    """Imports parsed CSV rows one at a time; a failing row never aborts the others."""

    def __init__(self, repo: Repository, *, error_display_limit: int | None = None):
        self.repo = repo
        self.error_display_limit = (
            error_display_limit if error_display_limit is not None else get_settings().import_error_display_limit
        )

    def preview(self, csv_text: str, target_table: ImportTable) -> tuple[ParsedCsv, list[FieldMapping]]:
        parsed = parse_csv(csv_text)
        if not parsed.headers or not parsed.rows:
            raise ValueError("Invalid CSV file. Please check the format.")
        custom_fields = self.repo.list_custom_fields(target_table)
        return parsed, build_field_mappings(parsed, target_table, custom_fields)

    def run(
        self,
        csv_text: str,
        target_table: ImportTable,
        mappings: list[FieldMapping] | None = None,
        *,
        created_by: int | None = None,
    ) -> ImportResult:
        parsed, suggested = self.preview(csv_text, target_table)
        mappings = mappings if mappings is not None else suggested

        missing = unmapped_required_fields(target_table, mappings)
        if missing:
            raise ValueError(f"Required fields are not mapped: {', '.join(missing)}")

        result = ImportResult(target_table=target_table, total_rows=len(parsed.rows))
        for mapping in mappings:
            if mapping.system_field or not (mapping.create_new and mapping.new_field_name):
                continue
            self.repo.ensure_custom_field(
                table_name=target_table,
                field_name=mapping.new_field_name,
                field_type=mapping.new_field_type,
                display_name=mapping.csv_column,
            )
            result.created_custom_fields.append(mapping.new_field_name)

        custom_fields = self.repo.list_custom_fields(target_table)
        required = [item.name for item in system_fields_for(target_table) if item.required]

        for index, row in enumerate(map_rows(parsed, mappings, target_table, custom_fields)):
            line = index + 2
            missing_value = next((name for name in required if row.get(name) in (None, "")), None)
            if missing_value:
                result.errors.append(f"Row {line}: {_required_message(missing_value)}")
                continue
            try:
                self._insert(target_table, row, created_by=created_by)
            except Exception as exc:
                self.repo.session.rollback()
                logger.warning("Import row %s into %s failed: %s", line, target_table, exc)
                result.errors.append(f"Row {line}: {exc}")
                continue
            result.success_count += 1

        result.visible_errors = result.errors[: self.error_display_limit]
        result.hidden_error_count = max(len(result.errors) - self.error_display_limit, 0)
        logger.info(
            "Imported %s/%s rows into %s (%s errors)",
            result.success_count,
            result.total_rows,
            target_table,
            len(result.errors),
        )
        return result

    def _insert(self, target_table: ImportTable, row: dict[str, Any], *, created_by: int | None) -> None:
        if target_table == "companies":
            self.repo.import_company(_company_values(row))
        elif target_table == "customers":
            self.repo.import_customer(_customer_values(row))
        elif target_table == "contacts":
            values = _contact_values(row)
            company_name = row.get("company_name")
            company = self.repo.find_company_by_name(str(company_name)) if company_name else None
            if company is None:
                company = self.repo.get_or_create_unassigned_company()
            values["company_id"] = company.id
            self.repo.import_contact(values)
        elif target_table == "inland_quotes":
            self.repo.import_inland_quote(_inland_values(row), created_by=created_by)
        else:
            raise ValueError(f"unsupported import table '{target_table}'")


def _text(row: dict[str, Any], key: str) -> str | None:
    value = row.get(key)
    if value in (None, ""):
        return None
    if isinstance(value, list):
        return "; ".join(str(item) for item in value)
    return str(value)


def _number(row: dict[str, Any], key: str) -> float | None:
    value = row.get(key)
    if isinstance(value, bool) or value in (None, ""):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    return convert_value(str(value), "number")


def _company_values(row: dict[str, Any]) -> dict[str, Any]:
    status = _text(row, "status")
    status = status.lower() if status else None
    tags = row.get("tags")
    if isinstance(tags, str):
        tags = [tags]
    return {
        "name": _text(row, "name"),
        "industry": _text(row, "industry"),
        "website": _text(row, "website"),
        "phone": _text(row, "phone"),
        "address": _text(row, "address"),
        "city": _text(row, "city"),
        "state": _text(row, "state"),
        "zip": _text(row, "zip"),
        "status": status if status in COMPANY_STATUSES else "active",
        "tags": tags if isinstance(tags, list) else [],
        "notes": _text(row, "notes"),
        "mc_number": _text(row, "mc_number"),
        "dot_number": _text(row, "dot_number"),
        "credit_limit": _number(row, "credit_limit"),
        "payment_terms": _text(row, "payment_terms"),
        "billing_email": _text(row, "billing_email"),
        "custom_data": row.get("custom_data") or None,
    }


def _customer_values(row: dict[str, Any]) -> dict[str, Any]:
    values = {
        key: _text(row, key)
        for key in (
            "name",
            "company",
            "email",
            "phone",
            "address",
            "billing_address",
            "billing_city",
            "billing_state",
            "billing_zip",
            "payment_terms",
            "notes",
            "mc_number",
            "dot_number",
        )
    }
    values["credit_limit"] = _number(row, "credit_limit")
    values["custom_data"] = row.get("custom_data") or None
    return values


def _contact_values(row: dict[str, Any]) -> dict[str, Any]:
    role = _text(row, "role")
    role = role.lower() if role else None
    return {
        "first_name": _text(row, "first_name"),
        "last_name": _text(row, "last_name"),
        "title": _text(row, "title"),
        "email": _text(row, "email"),
        "phone": _text(row, "phone"),
        "mobile": _text(row, "mobile"),
        "role": role if role in CONTACT_ROLES else "general",
        "notes": _text(row, "notes"),
        "is_primary": row.get("is_primary") is True,
        "custom_data": row.get("custom_data") or None,
    }


def _inland_values(row: dict[str, Any]) -> dict[str, Any]:
    total = _number(row, "total_price")
    return {
        "quote_number": _text(row, "quote_number"),
        "customer_name": _text(row, "customer_name"),
        "pickup_address": _text(row, "origin_address"),
        "dropoff_address": _text(row, "destination_address"),
        "equipment_description": _text(row, "equipment_type"),
        "weight_lbs": _number(row, "weight_lbs"),
        "length_inches": _number(row, "length_inches"),
        "width_inches": _number(row, "width_inches"),
        "height_inches": _number(row, "height_inches"),
        "manual_total": total,
        "subtotal": total or 0.0,
        "total": total or 0.0,
        "notes": _text(row, "notes"),
        "custom_data": row.get("custom_data") or None,
    }
