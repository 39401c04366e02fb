"""Summary commands."""

import click
from pnlkit.cli.error_handling import handle_domain_error
from pnlkit.cli.period_options import resolve_cli_period, scope_options
from pnlkit.domain.aggregation_service import AggregationService
from pnlkit.domain.entities import AggregatedPeriodSummary, BucketId
from pnlkit.domain.errors import DomainError
from pnlkit.domain.presentation import display_amount, format_amount, summary_rows
from pnlkit.utils.period_parser import parse_year


def echo_summary(summary: AggregatedPeriodSummary, breakdown: bool = False) -> None:
    """Print a summary as a P&L statement."""
    click.echo(f"\nP&L Summary: {summary.scope} ({summary.record_count} line items)")
    click.echo("-" * 80)
    click.echo(f"{'Line':<50} {'Amount':>20}")
    click.echo("-" * 80)

    for row in summary_rows(summary):
        amount_str = format_amount(row.amount)
        if row.is_total:
            click.echo("-" * 80)
            click.echo(f"{row.label:<50} {amount_str:>20}")
            continue
        click.echo(f"    {row.label:<46} {amount_str:>20}")
        if breakdown and row.bucket is not None:
            _echo_breakdown(summary, row.bucket)
    click.echo("=" * 80)

    if summary.rollup_excluded_total != 0:
        excluded_str = format_amount(summary.rollup_excluded_total)
        click.echo(f"{'Excluded rollups (not in totals)':<50} {excluded_str:>20}")
        if breakdown:
            _echo_breakdown(summary, BucketId.ROLLUP_EXCLUDED)


def _echo_breakdown(summary: AggregatedPeriodSummary, bucket: BucketId) -> None:
    # Indent detail lines one level below their bucket
    for line in summary.breakdown:
        if line.bucket is not bucket:
            continue
        label = f"{line.label} [{line.group}]" if line.group else line.label
        amount_str = format_amount(display_amount(bucket, line.amount))
        click.echo(f"        {label[:42]:<42} {amount_str:>20}")


@click.group()
def summary_group():
    """Show stored P&L summaries."""
    pass


@summary_group.command("show")
@scope_options
@click.option("--breakdown", is_flag=True, help="Show the ledger accounts of every line")
@click.pass_context
def show_summary(
    ctx,
    location_id: str,
    year: str | None,
    month: str | None,
    this_month: bool,
    last_month: bool,
    breakdown: bool,
):
    """Show the stored summary of one location and month.

    Examples:
        pnlkit summary show --location amsterdam-centrum --year 2025 --month 3
        pnlkit summary show --location amsterdam-centrum --last-month --breakdown
    """
    db = ctx.obj["db"]
    service = AggregationService(db)

    period_year, period_month = resolve_cli_period(
        ctx,
        year=year,
        month=month,
        period_flags={"this-month": this_month, "last-month": last_month},
    )

    try:
        summary = service.get_summary(location_id, period_year, period_month)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    echo_summary(summary, breakdown=breakdown)


@summary_group.command("list")
@click.option("--location", "location_id", help="Only list this location")
@click.option("--year", help="Only list this year")
@click.pass_context
def list_summaries(ctx, location_id: str | None, year: str | None):
    """List stored summaries."""
    db = ctx.obj["db"]
    service = AggregationService(db)

    try:
        year_filter = parse_year(year) if year else None
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    summaries = service.list_summaries(location_id=location_id, year=year_filter)
    if not summaries:
        click.echo("No summaries found.")
        return

    click.echo("\nSummaries:")
    click.echo("-" * 100)
    click.echo(
        f"{'Location':<24} {'Period':<8} {'Revenue':>18} {'Gross profit':>18} "
        f"{'Result':>18} {'Rows':>8}"
    )
    click.echo("-" * 100)
    for s in summaries:
        click.echo(
            f"{s.location_id[:24]:<24} {s.year}-{s.month:02d}  "
            f"{format_amount(s.revenue_total):>18} {format_amount(s.gross_profit):>18} "
            f"{format_amount(s.result):>18} {s.record_count:>8d}"
        )


def register_commands(cli):
    """Register summary commands with main CLI."""
    cli.add_command(summary_group, name="summary")
