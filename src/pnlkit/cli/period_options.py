"""CLI helpers for reporting period resolution."""

import click

from pnlkit.utils.period_parser import parse_month, parse_year, resolve_period


def scope_options(func):
    """Add --location, --year, --month and the relative period flags."""
    options = [
        click.option("--location", "location_id", required=True, help="Location ID"),
        click.option("--year", help="Reporting year (e.g. 2025)"),
        click.option("--month", help="Reporting month as number or name (e.g. 3, mrt, March)"),
        click.option("--this-month", is_flag=True, help="Use the current month"),
        click.option("--last-month", is_flag=True, help="Use the previous month"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def resolve_cli_period(
    ctx,
    *,
    year: str | None,
    month: str | None,
    period_flags: dict[str, bool],
) -> tuple[int, int]:
    """Resolve (year, month) from period flags or explicit --year/--month."""
    period_count = sum(1 for is_set in period_flags.values() if is_set)

    if period_count > 1:
        click.echo(
            "Error: Only one period option (--this-month, --last-month) can be specified at a time.",
            err=True,
        )
        ctx.exit(1)

    if period_count > 0 and (year or month):
        click.echo(
            "Error: Period options (--this-month, --last-month) cannot be combined with --year or --month.",
            err=True,
        )
        ctx.exit(1)

    if period_count == 1:
        for period, is_set in period_flags.items():
            if is_set:
                return resolve_period(period)

    if not year or not month:
        click.echo(
            "Error: Specify --year and --month, or one of --this-month, --last-month.",
            err=True,
        )
        ctx.exit(1)

    try:
        return parse_year(year), parse_month(month)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)
