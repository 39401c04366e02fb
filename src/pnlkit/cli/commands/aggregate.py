"""Aggregation commands."""

import click
from pnlkit.cli.commands.summary import echo_summary
from pnlkit.cli.error_handling import handle_domain_error
from pnlkit.cli.period_options import resolve_cli_period
from pnlkit.domain.aggregation_service import AggregationService
from pnlkit.domain.errors import DomainError
from pnlkit.utils.period_parser import parse_year


@click.command("aggregate")
@click.option("--location", "location_id", help="Location ID (required unless --all)")
@click.option("--year", help="Reporting year (with --all: only this year)")
@click.option("--month", help="Reporting month as number or name (e.g. 3, mrt, March)")
@click.option("--this-month", is_flag=True, help="Use the current month")
@click.option("--last-month", is_flag=True, help="Use the previous month")
@click.option("--all", "all_scopes", is_flag=True, help="Re-aggregate every stored scope")
@click.option("--workers", type=click.IntRange(min=1), help="Worker threads for --all")
@click.option("--quiet", is_flag=True, help="Do not print the summary")
@click.pass_context
def aggregate(
    ctx,
    location_id: str | None,
    year: str | None,
    month: str | None,
    this_month: bool,
    last_month: bool,
    all_scopes: bool,
    workers: int | None,
    quiet: bool,
):
    """Aggregate stored line items into period summaries.

    Without --all, aggregates one location and month and prints its summary.
    With --all, re-aggregates every stored scope, optionally filtered by
    --location and --year.

    Examples:
        pnlkit aggregate --location amsterdam-centrum --year 2025 --month mrt
        pnlkit aggregate --location amsterdam-centrum --last-month
        pnlkit aggregate --all --year 2025 --workers 4
    """
    db = ctx.obj["db"]
    settings = ctx.obj["settings"]
    service = AggregationService(
        db,
        max_workers=workers or settings.max_workers,
        page_size=settings.page_size,
    )

    if all_scopes:
        if month or this_month or last_month:
            click.echo("Error: --all cannot be combined with a month option.", err=True)
            ctx.exit(1)
        try:
            year_filter = parse_year(year) if year else None
        except ValueError as e:
            handle_domain_error(ctx, e)
            return

        batch = service.reaggregate(location_id=location_id, year=year_filter)
        if batch.succeeded == 0 and batch.failed == 0:
            click.echo("No line items found.")
            return

        click.echo(f"Re-aggregated {batch.succeeded} scopes")
        for summary in batch.summaries:
            click.echo(f"  {summary.scope}: {summary.record_count} line items")
        if batch.failures:
            click.echo(f"Failed: {batch.failed} scopes", err=True)
            for failure in batch.failures:
                click.echo(f"  {failure.scope}: {failure.message}", err=True)
            ctx.exit(1)
        return

    if location_id is None:
        click.echo("Error: --location is required unless --all is given.", err=True)
        ctx.exit(1)

    period_year, period_month = resolve_cli_period(
        ctx,
        year=year,
        month=month,
        period_flags={"this-month": this_month, "last-month": last_month},
    )

    try:
        summary = service.aggregate_period(location_id, period_year, period_month)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if quiet:
        click.echo(f"Aggregated {summary.scope}: {summary.record_count} line items")
    else:
        echo_summary(summary)


def register_commands(cli):
    """Register aggregate command with main CLI."""
    cli.add_command(aggregate)
