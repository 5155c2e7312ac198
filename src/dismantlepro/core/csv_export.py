"""CSV export of the CRM tables and the equipment catalog.

CRM exports use the importer's own column labels, plus one column per custom
field, so an exported file goes back through the import flow with every
column auto-matched.
"""

from __future__ import annotations

import csv
import io
import json
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from dismantlepro.core.csv_import import system_fields_for
from dismantlepro.db.models import Company, Contact, Customer, EquipmentDimensions, LocationCost
from dismantlepro.db.repositories import Repository
from dismantlepro.types import LOCATIONS, CostField, ExportTable

logger = logging.getLogger(__name__)

_CRM_MODELS: dict[str, type[Company] | type[Contact] | type[Customer]] = {
    "companies": Company,
    "contacts": Contact,
    "customers": Customer,
}

DIMENSION_HEADERS = [
    "Operating Weight (lbs)",
    "Transport Length (in)",
    "Transport Width (in)",
    "Transport Height (in)",
    "Has Front Image",
    "Has Side Image",
]


@dataclass(slots=True)
class CsvExport:
    table: ExportTable
    headers: list[str]
    rows: list[list[str]] = field(default_factory=list)

    @property
    def filename(self) -> str:
        return f"{self.table}-export.csv"

    @property
    def content(self) -> str:
        return to_csv(self.headers, self.rows)


def format_cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, list):
        # the importer's json type splits on ";"
        return "; ".join(str(item) for item in value)
    if isinstance(value, dict):
        return json.dumps(value, sort_keys=True)
    return str(value)


def to_csv(headers: list[str], rows: list[list[str]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(headers)
    writer.writerows(rows)
    return buffer.getvalue()


def _record_value(record: Any, name: str) -> Any:
    if name == "company_name":
        return record.company.name if record.company else None
    return getattr(record, name, None)


def export_crm_table(repo: Repository, table: str) -> CsvExport:
    system_fields = system_fields_for(table)
    custom_fields = repo.list_custom_fields(table)
    headers = [item.label for item in system_fields] + [item.field_name for item in custom_fields]

    export = CsvExport(table=table, headers=headers)
    for record in repo.export_rows(_CRM_MODELS[table]):
        custom_data = record.custom_data or {}
        export.rows.append(
            [format_cell(_record_value(record, item.name)) for item in system_fields]
            + [format_cell(custom_data.get(item.field_name)) for item in custom_fields]
        )
    return export


def _dimension_cells(dimensions: EquipmentDimensions | None) -> list[str]:
    if dimensions is None:
        return ["", "", "", "", "No", "No"]
    return [
        format_cell(dimensions.operating_weight),
        format_cell(dimensions.transport_length),
        format_cell(dimensions.transport_width),
        format_cell(dimensions.transport_height),
        format_cell(bool(dimensions.front_image_base64)),
        format_cell(bool(dimensions.side_image_base64)),
    ]


def export_equipment(repo: Repository) -> CsvExport:
    """Every model with its dimensions and the cost schedule for each location."""
    cost_headers = [f"{location} - {cost_field.label}" for location in LOCATIONS for cost_field in CostField]
    export = CsvExport(
        table="equipment",
        headers=["Make", "Model", "Equipment Type", *DIMENSION_HEADERS, *cost_headers, "Last Updated"],
    )
    for model, dimensions, costs in repo.equipment_catalog():
        cost_cells: list[str] = []
        for location in LOCATIONS:
            schedule: LocationCost | None = costs.get(location)
            cost_cells.extend(
                format_cell(getattr(schedule, cost_field.value) if schedule else None) for cost_field in CostField
            )
        stamps = [model.updated_at, dimensions.updated_at if dimensions else None]
        stamps.extend(row.updated_at for row in costs.values())
        last_updated = max(
            (stamp for stamp in stamps if stamp is not None),
            key=lambda stamp: stamp.replace(tzinfo=None),
            default=None,
        )
        export.rows.append(
            [
                model.make.name,
                model.name,
                dimensions.equipment_type if dimensions else "",
                *_dimension_cells(dimensions),
                *cost_cells,
                format_cell(last_updated.date() if last_updated else None),
            ]
        )
    return export


def export_dimensions(repo: Repository) -> CsvExport:
    export = CsvExport(table="dimensions", headers=["Make", "Model", "Equipment Type", *DIMENSION_HEADERS])
    for model, dimensions, _costs in repo.equipment_catalog():
        if dimensions is None:
            continue
        export.rows.append([model.make.name, model.name, dimensions.equipment_type, *_dimension_cells(dimensions)])
    return export


def export_table(repo: Repository, table: ExportTable) -> CsvExport:
    if table in _CRM_MODELS:
        export = export_crm_table(repo, table)
    elif table == "equipment":
        export = export_equipment(repo)
    elif table == "dimensions":
        export = export_dimensions(repo)
    else:
        raise ValueError(f"unsupported export table '{table}'")
    logger.info("Exported %s rows from %s", len(export.rows), table)
    return export
