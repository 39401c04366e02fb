"""Display helpers for aggregated summaries.

Summaries store costs with their ledger sign (negative). Costs are shown as
absolute values only here, when rows are prepared for display.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from pnlkit.domain.entities import AggregatedPeriodSummary, BucketId

BUCKET_LABELS: dict[BucketId, str] = {
    BucketId.REVENUE_PRODUCED_GOODS: "Revenue produced goods",
    BucketId.REVENUE_MERCHANDISE: "Revenue merchandise sales",
    BucketId.UNCLASSIFIED_REVENUE: "Unclassified revenue",
    BucketId.COST_OF_SALES: "Cost of sales",
    BucketId.LABOR: "Labor",
    BucketId.OTHER_COSTS: "Other costs",
    BucketId.DEPRECIATION: "Depreciation",
    BucketId.FINANCIAL_RESULT: "Financial result",
    BucketId.UNCLASSIFIED_COSTS: "Unclassified costs",
    BucketId.ROLLUP_EXCLUDED: "Excluded rollups",
}

_REVENUE_LINES = (
    BucketId.REVENUE_PRODUCED_GOODS,
    BucketId.REVENUE_MERCHANDISE,
    BucketId.UNCLASSIFIED_REVENUE,
)

_COST_LINES = (
    BucketId.COST_OF_SALES,
    BucketId.LABOR,
    BucketId.OTHER_COSTS,
    BucketId.DEPRECIATION,
    BucketId.UNCLASSIFIED_COSTS,
)


@dataclass(frozen=True)
class DisplayRow:
    """One line of a rendered P&L."""

    label: str
    amount: Decimal
    bucket: Optional[BucketId] = None
    is_total: bool = False


def display_amount(bucket: BucketId, amount: Decimal) -> Decimal:
    """Convert a stored bucket amount to its display value.

    Cost buckets are shown as absolute values. Revenue buckets, the
    financial result (which can be income) and excluded rollups keep
    their sign.
    """
    if bucket.is_revenue or bucket in (BucketId.FINANCIAL_RESULT, BucketId.ROLLUP_EXCLUDED):
        return amount
    return abs(amount)


def summary_rows(summary: AggregatedPeriodSummary) -> list[DisplayRow]:
    """Lay out a summary as P&L display rows.

    Returns:
        Revenue lines, revenue total, cost of sales, gross profit, the
        remaining cost lines, financial result and the result.
    """
    totals = summary.bucket_totals()

    def line(bucket: BucketId) -> DisplayRow:
        return DisplayRow(
            label=BUCKET_LABELS[bucket],
            amount=display_amount(bucket, totals[bucket]),
            bucket=bucket,
        )

    rows = [line(bucket) for bucket in _REVENUE_LINES]
    rows.append(DisplayRow("Total revenue", summary.revenue_total, is_total=True))
    rows.append(line(BucketId.COST_OF_SALES))
    rows.append(DisplayRow("Gross profit", summary.gross_profit, is_total=True))
    rows.extend(line(bucket) for bucket in _COST_LINES if bucket is not BucketId.COST_OF_SALES)
    rows.append(line(BucketId.FINANCIAL_RESULT))
    rows.append(DisplayRow("Result", summary.result, is_total=True))
    return rows


def format_amount(amount: Decimal) -> str:
    """Format an amount as euros with two decimals, e.g. "€1,234.56"."""
    quantized = amount.quantize(Decimal("0.01"))
    sign = "-" if quantized < 0 else ""
    return f"{sign}€{abs(quantized):,.2f}"
