"""Integration tests for end-to-end CLI workflows."""

import pytest
from pnlkit.cli.main import cli


def _invoke(cli_runner, temp_db, *args):
    return cli_runner.invoke(cli, ["--db-path", temp_db.database_path, *args])


def test_full_workflow(cli_runner, temp_db, fixtures_dir):
    """Test complete workflow: import → aggregate → show → list → check."""
    csv_file = str(fixtures_dir / "pnl_export.csv")

    # Step 1: Import and aggregate
    result = _invoke(cli_runner, temp_db, "import", csv_file, "--location", "amsterdam", "--aggregate")
    assert result.exit_code == 0
    assert "Imported: 9 line items" in result.output
    assert "Skipped: 4 rows" in result.output
    assert "Periods: 2025-03, 2025-04" in result.output
    assert "Aggregated amsterdam 2025-03: 8 line items" in result.output
    assert "Row 13: Missing GL account" in result.output

    # Step 2: Show the March summary
    result = _invoke(
        cli_runner, temp_db, "summary", "show", "--location", "amsterdam", "--year", "2025", "--month", "mrt"
    )
    assert result.exit_code == 0
    assert "P&L Summary: amsterdam 2025-03 (8 line items)" in result.output
    lines = {line.strip().split("  ")[0]: line for line in result.output.splitlines() if line.strip()}
    assert "€2,800.00" in lines["Total revenue"]
    assert "€300.00" in lines["Cost of sales"]
    assert "€2,500.00" in lines["Gross profit"]
    assert "€1,050.00" in lines["Result"]
    assert "-€50.00" in lines["Financial result"]

    # Step 3: Breakdown shows ledger accounts
    result = _invoke(
        cli_runner,
        temp_db,
        "summary",
        "show",
        "--location",
        "amsterdam",
        "--year",
        "2025",
        "--month",
        "3",
        "--breakdown",
    )
    assert result.exit_code == 0
    assert "Omzet lunch (btw laag) [food]" in result.output
    assert "Bruto Salarissen keuken [contract]" in result.output

    # Step 4: List summaries
    result = _invoke(cli_runner, temp_db, "summary", "list", "--location", "amsterdam")
    assert result.exit_code == 0
    assert "2025-03" in result.output
    assert "2025-04" in result.output

    # Step 5: Reconcile against the known revenue
    result = _invoke(
        cli_runner,
        temp_db,
        "check",
        "reconcile",
        "--location",
        "amsterdam",
        "--year",
        "2025",
        "--month",
        "3",
        "--expected-revenue",
        "2.800,00",
    )
    assert result.exit_code == 0
    assert "Conservation: OK" in result.output
    assert "Revenue: OK" in result.output


def test_aggregate_single_scope(cli_runner, temp_db, fixtures_dir):
    """Aggregating one scope prints its P&L."""
    _invoke(cli_runner, temp_db, "import", str(fixtures_dir / "pnl_export_semicolon.csv"), "--location", "utrecht")

    result = _invoke(
        cli_runner, temp_db, "aggregate", "--location", "utrecht", "--year", "2025", "--month", "maart"
    )

    assert result.exit_code == 0
    assert "P&L Summary: utrecht 2025-03 (3 line items)" in result.output
    assert "€2,000.00" in result.output
    summary = temp_db.get_summary("utrecht", 2025, 3)
    assert summary is not None
    assert summary.labor_total == -1000


def test_aggregate_all(cli_runner, temp_db, fixtures_dir):
    """--all re-aggregates every stored scope."""
    _invoke(cli_runner, temp_db, "import", str(fixtures_dir / "pnl_export_semicolon.csv"), "--location", "utrecht")
    _invoke(cli_runner, temp_db, "import", str(fixtures_dir / "pnl_export.csv"), "--location", "amsterdam")

    result = _invoke(cli_runner, temp_db, "aggregate", "--all", "--workers", "2")

    assert result.exit_code == 0
    assert "Re-aggregated 4 scopes" in result.output
    assert len(temp_db.list_summaries()) == 4

    result = _invoke(cli_runner, temp_db, "aggregate", "--all", "--location", "utrecht", "--year", "2025")
    assert result.exit_code == 0
    assert "Re-aggregated 2 scopes" in result.output


def test_aggregate_all_reports_failed_scopes(cli_runner, temp_db, make_item):
    """Invalid stored scopes are reported and make the command fail."""
    temp_db.add_line_items([make_item("Autokosten", "-10"), make_item("Autokosten", "-10", month=13)])

    result = _invoke(cli_runner, temp_db, "aggregate", "--all")

    assert result.exit_code == 1
    assert "Re-aggregated 1 scopes" in result.output
    assert "amsterdam 2025-13" in result.output


def test_aggregate_all_without_line_items(cli_runner, temp_db):
    """An empty store is reported."""
    result = _invoke(cli_runner, temp_db, "aggregate", "--all")

    assert result.exit_code == 0
    assert "No line items found." in result.output


@pytest.mark.parametrize(
    "args,message",
    [
        (["--location", "amsterdam", "--year", "2025", "--month", "13"], "Month must be between 1 and 12"),
        (["--location", "", "--year", "2025", "--month", "3"], "Location ID must be a non-empty string"),
        (["--location", "amsterdam", "--year", "2025"], "Specify --year and --month"),
        (["--location", "amsterdam", "--this-month", "--last-month"], "Only one period option"),
        (["--location", "amsterdam", "--last-month", "--year", "2025"], "cannot be combined"),
        (["--year", "2025", "--month", "3"], "--location is required"),
    ],
)
def test_aggregate_invalid_scope(cli_runner, temp_db, args, message):
    """Invalid scopes exit with an error message."""
    result = _invoke(cli_runner, temp_db, "aggregate", *args)

    assert result.exit_code == 1
    assert "Error:" in result.output
    assert message in result.output


def test_aggregate_last_month(cli_runner, temp_db):
    """--last-month aggregates the previous month."""
    result = _invoke(cli_runner, temp_db, "aggregate", "--location", "amsterdam", "--last-month", "--quiet")

    assert result.exit_code == 0
    assert "Aggregated amsterdam" in result.output
    assert "0 line items" in result.output


def test_summary_show_missing(cli_runner, temp_db):
    """Showing an unaggregated scope fails."""
    result = _invoke(cli_runner, temp_db, "summary", "show", "--location", "amsterdam", "--year", "2025", "--month", "3")

    assert result.exit_code == 1
    assert "No summary stored" in result.output


def test_summary_list_empty(cli_runner, temp_db):
    """An empty store has no summaries."""
    result = _invoke(cli_runner, temp_db, "summary", "list")

    assert result.exit_code == 0
    assert "No summaries found." in result.output


def test_check_duplicates(cli_runner, temp_db, fixtures_dir):
    """Importing the same export twice shows up as duplicates."""
    csv_file = str(fixtures_dir / "pnl_export_semicolon.csv")
    _invoke(cli_runner, temp_db, "import", csv_file, "--location", "utrecht", "--import-id", "first")
    _invoke(cli_runner, temp_db, "import", csv_file, "--location", "utrecht", "--import-id", "second")

    result = _invoke(
        cli_runner, temp_db, "check", "duplicates", "--location", "utrecht", "--year", "2025", "--month", "3"
    )

    assert result.exit_code == 0
    assert "Omzet lunch (btw laag)" in result.output
    assert "imports: first, second" in result.output
    assert "Excess removed by deduplication" in result.output

    # Duplicates are counted once
    result = _invoke(
        cli_runner, temp_db, "aggregate", "--location", "utrecht", "--year", "2025", "--month", "3", "--quiet"
    )
    assert "3 line items" in result.output


def test_check_duplicates_none(cli_runner, temp_db, fixtures_dir):
    """A clean scope reports no duplicates."""
    _invoke(cli_runner, temp_db, "import", str(fixtures_dir / "pnl_export_semicolon.csv"), "--location", "utrecht")

    result = _invoke(
        cli_runner, temp_db, "check", "duplicates", "--location", "utrecht", "--year", "2025", "--month", "4"
    )

    assert result.exit_code == 0
    assert "No duplicate line items found" in result.output


def test_check_reconcile_revenue_mismatch(cli_runner, temp_db, fixtures_dir):
    """Revenue outside the tolerance fails the check."""
    _invoke(cli_runner, temp_db, "import", str(fixtures_dir / "pnl_export.csv"), "--location", "amsterdam")

    result = _invoke(
        cli_runner,
        temp_db,
        "check",
        "reconcile",
        "--location",
        "amsterdam",
        "--year",
        "2025",
        "--month",
        "3",
        "--expected-revenue",
        "5000",
    )

    assert result.exit_code == 1
    assert "Conservation: OK" in result.output
    assert "Revenue: FAILED" in result.output


def test_check_without_line_items(cli_runner, temp_db):
    """Checks need stored line items."""
    result = _invoke(
        cli_runner, temp_db, "check", "reconcile", "--location", "amsterdam", "--year", "2025", "--month", "3"
    )

    assert result.exit_code == 1
    assert "No line items found" in result.output


def test_import_missing_columns(cli_runner, temp_db, fixtures_dir):
    """Import errors are reported with a non-zero exit code."""
    result = _invoke(
        cli_runner, temp_db, "import", str(fixtures_dir / "pnl_export_missing_cols.csv"), "--location", "amsterdam"
    )

    assert result.exit_code == 1
    assert "missing required columns" in result.output


def test_invalid_environment_setting(cli_runner, temp_db, monkeypatch):
    """Invalid PNLKIT_* settings stop the CLI."""
    monkeypatch.setenv("PNLKIT_PAGE_SIZE", "zero")

    result = _invoke(cli_runner, temp_db, "summary", "list")

    assert result.exit_code == 1
    assert "PNLKIT_PAGE_SIZE" in result.output


def test_help_does_not_need_database(cli_runner):
    """Help output works without touching a database."""
    result = cli_runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "aggregate" in result.output
    assert "import" in result.output
