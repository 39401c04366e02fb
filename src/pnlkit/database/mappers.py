"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so the stored schema can change
without touching the aggregation code.
"""

from decimal import Decimal

from pnlkit.domain import entities as domain
from pnlkit.database.models import (
    LineItem as ORMLineItem,
    PeriodSummary as ORMPeriodSummary,
    SummaryBreakdown as ORMSummaryBreakdown,
)
from pnlkit.utils.amount_parser import to_decimal

SUMMARY_AMOUNT_FIELDS = (
    "revenue_from_produced_goods",
    "revenue_from_merchandise_sales",
    "unclassified_revenue",
    "revenue_total",
    "cost_of_sales_total",
    "labor_total",
    "other_costs_total",
    "depreciation_total",
    "financial_result_total",
    "unclassified_costs",
    "rollup_excluded_total",
    "gross_profit",
    "result",
)


def _money(value) -> Decimal:
    return Decimal("0") if value is None else Decimal(value)


def _money_to_orm(value) -> str:
    """Exact string form of an amount; keeps every digit and the exponent."""
    return str(to_decimal(value))


def line_item_to_domain(orm_item: ORMLineItem) -> domain.LineItem:
    """Convert SQLAlchemy LineItem model to domain LineItem entity."""
    return domain.LineItem(
        location_id=orm_item.location_id,
        year=orm_item.year,
        month=orm_item.month,
        category=orm_item.category,
        subcategory=orm_item.subcategory,
        gl_account=orm_item.gl_account,
        amount=_money(orm_item.amount),
        import_id=orm_item.import_id,
    )


def line_item_to_orm(item: domain.LineItem) -> ORMLineItem:
    """Convert domain LineItem entity to a new SQLAlchemy LineItem model."""
    return ORMLineItem(
        location_id=item.location_id,
        year=item.year,
        month=item.month,
        category=item.category or "",
        subcategory=item.subcategory,
        gl_account=item.gl_account,
        amount=_money_to_orm(item.amount),
        import_id=item.import_id,
    )


def breakdown_to_domain(orm_line: ORMSummaryBreakdown) -> domain.BreakdownLine:
    """Convert SQLAlchemy SummaryBreakdown model to domain BreakdownLine."""
    return domain.BreakdownLine(
        bucket=domain.BucketId(orm_line.bucket),
        label=orm_line.label,
        amount=_money(orm_line.amount),
        record_count=orm_line.record_count,
        group=orm_line.detail_group,
    )


def summary_to_domain(orm_summary: ORMPeriodSummary) -> domain.AggregatedPeriodSummary:
    """Convert SQLAlchemy PeriodSummary model to domain summary entity."""
    amounts = {
        name: _money(getattr(orm_summary, name)) for name in SUMMARY_AMOUNT_FIELDS
    }
    return domain.AggregatedPeriodSummary(
        location_id=orm_summary.location_id,
        year=orm_summary.year,
        month=orm_summary.month,
        record_count=orm_summary.record_count,
        breakdown=tuple(breakdown_to_domain(line) for line in orm_summary.breakdown),
        **amounts,
    )


def apply_summary(orm_summary: ORMPeriodSummary, summary: domain.AggregatedPeriodSummary) -> None:
    """Copy a domain summary onto a SQLAlchemy PeriodSummary model."""
    orm_summary.location_id = summary.location_id
    orm_summary.year = summary.year
    orm_summary.month = summary.month
    for name in SUMMARY_AMOUNT_FIELDS:
        setattr(orm_summary, name, _money_to_orm(getattr(summary, name)))
    orm_summary.record_count = summary.record_count
    orm_summary.breakdown = [
        ORMSummaryBreakdown(
            bucket=line.bucket.value,
            detail_group=line.group,
            label=line.label,
            amount=_money_to_orm(line.amount),
            record_count=line.record_count,
        )
        for line in summary.breakdown
    ]
