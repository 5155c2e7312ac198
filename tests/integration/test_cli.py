import json
from pathlib import Path

from typer.testing import CliRunner

from dismantlepro.cli.app import app
from dismantlepro.core.quotes import QuoteService
from dismantlepro.db.repositories import Repository
from dismantlepro.db.session import SessionLocal
from dismantlepro.types import DismantleQuoteInput

runner = CliRunner()


def test_classify_command() -> None:
    result = runner.invoke(app, ["equipment", "classify", "--make", "Caterpillar", "--model", "950M"])
    assert result.exit_code == 0
    assert result.stdout.strip() == "wheel_loader"


def test_import_preview_then_commit(tmp_path: Path) -> None:
    csv_file = tmp_path / "companies.csv"
    csv_file.write_text("Company Name,Phone\nAcme Rigging,555-0100\n,555-0101\n", encoding="utf-8")

    preview = runner.invoke(app, ["import", "csv", "--file", str(csv_file), "--table", "companies", "--preview"])
    assert preview.exit_code == 0
    assert json.loads(preview.stdout)["mappings"][0]["system_field"] == "name"

    commit = runner.invoke(app, ["import", "csv", "--file", str(csv_file), "--table", "companies"])
    assert commit.exit_code == 0
    body = json.loads(commit.stdout)
    assert body["success_count"] == 1
    assert body["errors"] == ["Row 3: Name is required"]


def test_import_rejects_unknown_table(tmp_path: Path) -> None:
    csv_file = tmp_path / "x.csv"
    csv_file.write_text("a\n1\n", encoding="utf-8")
    result = runner.invoke(app, ["import", "csv", "--file", str(csv_file), "--table", "makes"])
    assert result.exit_code != 0


def test_user_create_and_quote_pdf(tmp_path: Path) -> None:
    created = runner.invoke(app, ["user", "create", "--email", "Ops@Example.com"])
    assert created.exit_code == 0
    assert json.loads(created.stdout)["email"] == "ops@example.com"

    with SessionLocal() as db:
        quote = QuoteService(db).create(
            DismantleQuoteInput.model_validate(
                {
                    "customer_name": "Dana",
                    "equipment_blocks": [{"make_name": "Volvo", "model_name": "A40G", "costs": {"loading_cost": 10}}],
                }
            )
        )
        quote_id = quote.id

    result = runner.invoke(
        app, ["quote", "pdf", "--id", str(quote_id), "--renderer", "vector", "--output", str(tmp_path)]
    )
    assert result.exit_code == 0
    written = Path(json.loads(result.stdout)["path"])
    assert written.parent == tmp_path
    assert written.read_bytes().startswith(b"%PDF")

    missing = runner.invoke(app, ["quote", "pdf", "--id", "9999"])
    assert missing.exit_code == 1


def test_quote_pdf_with_slash_in_model_name(tmp_path: Path) -> None:
    with SessionLocal() as db:
        quote = QuoteService(db).create(
            DismantleQuoteInput.model_validate(
                {
                    "customer_name": "Dana",
                    "equipment_blocks": [{"make_name": "Caterpillar", "model_name": "D6/D6R", "costs": {"loading_cost": 10}}],
                }
            )
        )
        quote_id, number = quote.id, quote.quote_number

    result = runner.invoke(
        app, ["quote", "pdf", "--id", str(quote_id), "--renderer", "vector", "--output", str(tmp_path)]
    )
    assert result.exit_code == 0
    written = Path(json.loads(result.stdout)["path"])
    assert written == tmp_path / f"Quote_{number}_Caterpillar_D6_D6R.pdf"
    assert written.read_bytes().startswith(b"%PDF")


def test_export_csv_to_stdout_and_file(tmp_path: Path) -> None:
    with SessionLocal() as db:
        Repository(db).create_customer({"name": "Dana Ruiz", "company": "Acme", "credit_limit": 5000.0})

    printed = runner.invoke(app, ["export", "csv", "--table", "customers"])
    assert printed.exit_code == 0
    lines = printed.stdout.splitlines()
    assert lines[0].startswith("Name,Company,Email")
    assert lines[1].startswith("Dana Ruiz,Acme,")
    assert lines[1].endswith(",5000")

    written = runner.invoke(app, ["export", "csv", "--table", "customers", "--output", str(tmp_path)])
    assert written.exit_code == 0
    body = json.loads(written.stdout)
    assert body == {"path": str(tmp_path / "customers-export.csv"), "rows": 1}

    assert runner.invoke(app, ["export", "csv", "--table", "quotes"]).exit_code != 0
