"""Data quality check commands."""

from decimal import Decimal

import click
from pnlkit.cli.error_handling import handle_domain_error
from pnlkit.cli.period_options import resolve_cli_period, scope_options
from pnlkit.domain.aggregation_service import AggregationService
from pnlkit.domain.entities import Scope
from pnlkit.domain.errors import DomainError
from pnlkit.domain.presentation import format_amount
from pnlkit.domain.reconciliation import check_conservation, compare_revenue, find_duplicates
from pnlkit.utils.amount_parser import parse_amount


def _load_line_items(ctx, service, location_id, year, month, this_month, last_month):
    period_year, period_month = resolve_cli_period(
        ctx,
        year=year,
        month=month,
        period_flags={"this-month": this_month, "last-month": last_month},
    )
    scope = Scope(location_id=location_id, year=period_year, month=period_month)
    try:
        items = service.get_line_items(location_id, period_year, period_month)
    except DomainError as e:
        handle_domain_error(ctx, e)
    return scope, items


@click.group()
def check_group():
    """Check stored line items for data quality problems."""
    pass


@check_group.command("duplicates")
@scope_options
@click.pass_context
def check_duplicates(
    ctx,
    location_id: str,
    year: str | None,
    month: str | None,
    this_month: bool,
    last_month: bool,
):
    """List line items recorded more than once in a scope.

    Duplicates are counted once by aggregation; this shows what was dropped.
    """
    db = ctx.obj["db"]
    service = AggregationService(db)
    scope, items = _load_line_items(
        ctx, service, location_id, year, month, this_month, last_month
    )

    duplicates = find_duplicates(items)
    if not duplicates:
        click.echo(f"No duplicate line items found for {scope} ({len(items)} line items).")
        return

    click.echo(f"\nDuplicate line items for {scope}:")
    click.echo("-" * 80)
    click.echo(f"{'Line':<50} {'Count':>7} {'Amount':>21}")
    click.echo("-" * 80)
    excess_total = Decimal("0")
    for group in duplicates:
        excess_total += group.excess_amount
        click.echo(
            f"{group.label[:50]:<50} {group.count:>7d} {format_amount(group.amount):>21}"
        )
        if group.import_ids:
            click.echo(f"    imports: {', '.join(group.import_ids)}")
    click.echo("-" * 80)
    click.echo(f"{'Excess removed by deduplication':<58} {format_amount(excess_total):>21}")


@check_group.command("reconcile")
@scope_options
@click.option("--expected-revenue", help="Revenue total known from another source")
@click.option("--tolerance", default="1", show_default=True, help="Allowed revenue difference")
@click.pass_context
def reconcile(
    ctx,
    location_id: str,
    year: str | None,
    month: str | None,
    this_month: bool,
    last_month: bool,
    expected_revenue: str | None,
    tolerance: str,
):
    """Verify that aggregation accounts for every line item.

    Recomputes the summary of the scope, checks that the bucket totals equal
    the deduplicated input and optionally compares revenue with an expected
    figure. Exits with status 1 when a check fails.
    """
    db = ctx.obj["db"]
    service = AggregationService(db)
    scope, items = _load_line_items(
        ctx, service, location_id, year, month, this_month, last_month
    )

    try:
        summary = service.aggregator.aggregate(items, scope)
        report = check_conservation(items, summary)
        revenue_check = None
        if expected_revenue is not None:
            revenue_check = compare_revenue(
                summary, parse_amount(expected_revenue), parse_amount(tolerance)
            )
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\nReconciliation for {scope}:")
    click.echo("-" * 80)
    click.echo(f"{'Input total':<50} {format_amount(report.input_total):>20}")
    click.echo(f"{'Duplicates removed':<50} {report.duplicate_count:>20d}")
    click.echo(f"{'Deduplicated total':<50} {format_amount(report.deduplicated_total):>20}")
    click.echo(f"{'Bucket total':<50} {format_amount(report.bucket_total):>20}")
    click.echo(f"{'Unclassified revenue':<50} {format_amount(summary.unclassified_revenue):>20}")
    click.echo(f"{'Unclassified costs':<50} {format_amount(summary.unclassified_costs):>20}")
    click.echo("-" * 80)

    failed = False
    if report.balanced:
        click.echo("Conservation: OK")
    else:
        click.echo(f"Conservation: FAILED (difference {report.difference})", err=True)
        failed = True

    if revenue_check is not None:
        click.echo(f"{'Revenue total':<50} {format_amount(revenue_check.actual):>20}")
        click.echo(f"{'Expected revenue':<50} {format_amount(revenue_check.expected):>20}")
        click.echo(f"{'Difference':<50} {format_amount(revenue_check.difference):>20}")
        if revenue_check.ratio is not None:
            click.echo(f"{'Ratio':<50} {revenue_check.ratio:>20.4f}")
        if revenue_check.within_tolerance:
            click.echo("Revenue: OK")
        else:
            click.echo(
                f"Revenue: FAILED (off by more than {format_amount(revenue_check.tolerance)})",
                err=True,
            )
            failed = True

    if failed:
        ctx.exit(1)


def register_commands(cli):
    """Register check commands with main CLI."""
    cli.add_command(check_group, name="check")
