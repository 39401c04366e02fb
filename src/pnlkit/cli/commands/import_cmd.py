"""Ledger CSV import command."""

import click
from pnlkit.cli.error_handling import handle_domain_error
from pnlkit.domain.aggregation_service import AggregationService
from pnlkit.domain.errors import DomainError
from pnlkit.domain.ledger_import import LedgerImportService


@click.command("import")
@click.argument("csv_file", type=click.Path(exists=True))
@click.option("--location", "location_id", required=True, help="Location the export belongs to")
@click.option("--import-id", help="Batch identifier stored on every row (defaults to a new UUID)")
@click.option("--replace", is_flag=True, help="Replace stored line items of the imported periods")
@click.option(
    "--aggregate", "run_aggregate", is_flag=True, help="Aggregate the imported periods afterwards"
)
@click.pass_context
def import_csv(
    ctx,
    csv_file: str,
    location_id: str,
    import_id: str | None,
    replace: bool,
    run_aggregate: bool,
):
    """Import ledger line items from a P&L CSV export.

    Examples:
        pnlkit import export_2025.csv --location amsterdam-centrum
        pnlkit import export_2025.csv --location amsterdam-centrum --replace --aggregate
    """
    db = ctx.obj["db"]
    service = LedgerImportService(db)

    try:
        result = service.import_csv(
            csv_file_path=csv_file,
            location_id=location_id,
            import_id=import_id,
            replace_existing=replace,
        )
    except (DomainError, ValueError, FileNotFoundError) as e:
        handle_domain_error(ctx, e)
        return

    click.echo("\nImport complete:")
    click.echo(f"  Imported: {result['imported']} line items")
    click.echo(f"  Skipped: {result['skipped']} rows")
    click.echo(f"  Import ID: {result['import_id']}")
    if result["periods"]:
        periods = ", ".join(f"{year}-{month:02d}" for year, month in result["periods"])
        click.echo(f"  Periods: {periods}")
    if result["errors"]:
        click.echo(f"  Errors: {len(result['errors'])}")
        for error in result["errors"]:
            click.echo(f"    {error}", err=True)

    if run_aggregate and result["periods"]:
        settings = ctx.obj["settings"]
        aggregation = AggregationService(db, page_size=settings.page_size)
        for year, month in result["periods"]:
            summary = aggregation.aggregate_period(location_id, year, month)
            click.echo(
                f"  Aggregated {summary.scope}: {summary.record_count} line items"
            )


def register_commands(cli):
    """Register import command with main CLI."""
    cli.add_command(import_csv)
