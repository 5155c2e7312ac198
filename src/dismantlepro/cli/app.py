from __future__ import annotations

import json
from pathlib import Path

import typer
import uvicorn

from dismantlepro.api.app import create_app
from dismantlepro.config import get_settings
from dismantlepro.core.csv_export import export_table
from dismantlepro.core.csv_import import CsvImporter
from dismantlepro.core.quotes import service_for
from dismantlepro.core.silhouette import detect_equipment_type
from dismantlepro.db.init import init_database
from dismantlepro.db.repositories import Repository
from dismantlepro.db.session import SessionLocal
from dismantlepro.logging_config import configure_logging
from dismantlepro.pdf.renderer import PdfRenderError

app = typer.Typer(help="Dismantle Pro CLI")
import_app = typer.Typer(help="Bulk imports")
export_app = typer.Typer(help="CSV exports")
equipment_app = typer.Typer(help="Equipment catalog helpers")
quote_app = typer.Typer(help="Quote documents")
user_app = typer.Typer(help="API users")

app.add_typer(import_app, name="import")
app.add_typer(export_app, name="export")
app.add_typer(equipment_app, name="equipment")
app.add_typer(quote_app, name="quote")
app.add_typer(user_app, name="user")

IMPORT_TABLES = ("companies", "customers", "contacts", "inland_quotes")
EXPORT_TABLES = ("companies", "contacts", "customers", "equipment", "dimensions")

_INITIALIZED = False


def ensure_initialized() -> None:
    global _INITIALIZED
    if _INITIALIZED:
        return
    init_database()
    _INITIALIZED = True


@app.command("init")
def init_cmd(seed_makes: bool = typer.Option(True, "--seed-makes/--no-seed-makes")) -> None:
    """Create tables and directories, then seed settings and the Unassigned company."""
    configure_logging()
    result = init_database(seed_equipment=seed_makes)
    typer.echo(json.dumps({"ok": True, **result}, indent=2))


@import_app.command("csv")
def import_csv(
    file: Path = typer.Option(..., "--file", exists=True, readable=True),
    table: str = typer.Option(..., "--table"),
    preview: bool = typer.Option(False, "--preview", help="Show the suggested mapping without importing"),
) -> None:
    configure_logging()
    ensure_initialized()
    if table not in IMPORT_TABLES:
        raise typer.BadParameter(f"table must be one of {', '.join(IMPORT_TABLES)}", param_hint="--table")

    csv_text = file.read_text(encoding="utf-8-sig")
    with SessionLocal() as db:
        importer = CsvImporter(Repository(db))
        try:
            if preview:
                parsed, mappings = importer.preview(csv_text, table)
                typer.echo(
                    json.dumps(
                        {
                            "headers": parsed.headers,
                            "rows": len(parsed.rows),
                            "mappings": [item.model_dump() for item in mappings],
                        },
                        indent=2,
                    )
                )
                return
            result = importer.run(csv_text, table)
        except ValueError as exc:
            typer.secho(str(exc), fg=typer.colors.RED, err=True)
            raise typer.Exit(code=1) from exc

    typer.echo(
        json.dumps(
            {
                "message": result.summary,
                "success_count": result.success_count,
                "errors": result.visible_errors,
                "hidden_error_count": result.hidden_error_count,
                "created_custom_fields": result.created_custom_fields,
            },
            indent=2,
        )
    )


@export_app.command("csv")
def export_csv(
    table: str = typer.Option(..., "--table"),
    output: Path | None = typer.Option(None, "--output", help="File or directory; prints to stdout when omitted"),
) -> None:
    configure_logging()
    ensure_initialized()
    if table not in EXPORT_TABLES:
        raise typer.BadParameter(f"table must be one of {', '.join(EXPORT_TABLES)}", param_hint="--table")

    with SessionLocal() as db:
        export = export_table(Repository(db), table)

    if output is None:
        typer.echo(export.content, nl=False)
        return
    target = output
    if target.is_dir() or target.suffix.lower() != ".csv":
        target.mkdir(parents=True, exist_ok=True)
        target = target / export.filename
    target.write_text(export.content, encoding="utf-8")
    typer.echo(json.dumps({"path": str(target), "rows": len(export.rows)}))


@equipment_app.command("classify")
def equipment_classify(
    make: str = typer.Option(..., "--make"),
    model: str = typer.Option(..., "--model"),
) -> None:
    typer.echo(detect_equipment_type(make, model))


@quote_app.command("pdf")
def quote_pdf(
    quote_id: int = typer.Option(..., "--id"),
    quote_type: str = typer.Option("dismantle", "--type"),
    output: Path | None = typer.Option(None, "--output", help="File or directory; defaults to PDF_OUTPUT_DIR"),
    renderer: str | None = typer.Option(None, "--renderer"),
) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        try:
            document = service_for(quote_type, db).render_pdf(quote_id, renderer)
        except (ValueError, PdfRenderError) as exc:
            typer.secho(str(exc), fg=typer.colors.RED, err=True)
            raise typer.Exit(code=1) from exc

    target = output or get_settings().pdf_output_dir
    if target.is_dir() or target.suffix.lower() != ".pdf":
        target.mkdir(parents=True, exist_ok=True)
        target = target / document.filename
    target.write_bytes(document.content)
    typer.echo(json.dumps({"path": str(target), "renderer": document.renderer, "bytes": len(document.content)}))


@user_app.command("create")
def user_create(
    email: str = typer.Option(..., "--email"),
    first_name: str = typer.Option("", "--first-name"),
    last_name: str = typer.Option("", "--last-name"),
    role: str = typer.Option("member", "--role"),
) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        try:
            user = Repository(db).create_user(email=email, first_name=first_name, last_name=last_name, role=role)
        except ValueError as exc:
            typer.secho(str(exc), fg=typer.colors.RED, err=True)
            raise typer.Exit(code=1) from exc
        typer.echo(json.dumps({"id": user.id, "email": user.email, "api_token": user.api_token}, indent=2))


@app.command("serve")
def serve(
    host: str | None = typer.Option(None, "--host"),
    port: int | None = typer.Option(None, "--port"),
) -> None:
    configure_logging()
    ensure_initialized()
    settings = get_settings()
    app_instance = create_app()
    uvicorn.run(app_instance, host=host or settings.app_host, port=port or settings.app_port)
