"""Domain model entities for pnlkit.

These are pure data classes representing ledger and reporting concepts,
independent of database schema. Amounts are always Decimal and keep the
sign of the source ledger: revenue positive, costs negative.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Optional


class BucketId(str, Enum):
    """Named accumulators of an aggregated period summary."""

    REVENUE_PRODUCED_GOODS = "revenue_produced_goods"
    REVENUE_MERCHANDISE = "revenue_merchandise"
    UNCLASSIFIED_REVENUE = "unclassified_revenue"
    COST_OF_SALES = "cost_of_sales"
    LABOR = "labor"
    OTHER_COSTS = "other_costs"
    DEPRECIATION = "depreciation"
    FINANCIAL_RESULT = "financial_result"
    UNCLASSIFIED_COSTS = "unclassified_costs"
    ROLLUP_EXCLUDED = "rollup_excluded"

    @property
    def is_revenue(self) -> bool:
        return self in REVENUE_BUCKETS

    @property
    def in_result(self) -> bool:
        """Whether the bucket takes part in revenue/result totals."""
        return self is not BucketId.ROLLUP_EXCLUDED


REVENUE_BUCKETS = frozenset(
    {
        BucketId.REVENUE_PRODUCED_GOODS,
        BucketId.REVENUE_MERCHANDISE,
        BucketId.UNCLASSIFIED_REVENUE,
    }
)


class MatchKind(str, Enum):
    """How a rule pattern is compared against a ledger label."""

    EXACT = "exact"
    PREFIX = "prefix"


class MatchField(str, Enum):
    """Which line item field a rule inspects."""

    CATEGORY = "category"
    SUBCATEGORY = "subcategory"


class RollupPolicy(str, Enum):
    """What to do with a parent rollup row when child rows are present."""

    SUM_ALL = "sum_all"
    PREFER_CHILDREN = "prefer_children"


@dataclass(frozen=True)
class Scope:
    """One aggregation unit: a location in a given month."""

    location_id: str
    year: int
    month: int

    def __str__(self) -> str:
        return f"{self.location_id} {self.year}-{self.month:02d}"


@dataclass(frozen=True)
class LineItem:
    """One row of the ledger export for a location and period."""

    location_id: str
    year: int
    month: int
    category: str
    amount: Decimal
    subcategory: Optional[str] = None
    gl_account: Optional[str] = None
    import_id: Optional[str] = None

    @property
    def scope(self) -> Scope:
        return Scope(self.location_id, self.year, self.month)

    @property
    def label(self) -> str:
        """Finest classification label available on the row."""
        return (self.subcategory or "").strip() or (self.category or "").strip()


@dataclass(frozen=True)
class CategoryRule:
    """A single classification rule mapping a ledger label to a bucket."""

    match_field: MatchField
    kind: MatchKind
    pattern: str
    bucket: BucketId
    group: Optional[str] = None

    def matches(self, value: Optional[str]) -> bool:
        candidate = (value or "").strip().casefold()
        if not candidate:
            return False
        pattern = self.pattern.strip().casefold()
        if self.kind is MatchKind.EXACT:
            return candidate == pattern
        return candidate.startswith(pattern)


@dataclass(frozen=True)
class BreakdownLine:
    """Sub-category detail of a bucket within one summary."""

    bucket: BucketId
    label: str
    amount: Decimal
    record_count: int
    group: Optional[str] = None


@dataclass(frozen=True)
class AggregatedPeriodSummary:
    """Categorized financial summary of one (location, year, month) scope."""

    location_id: str
    year: int
    month: int
    revenue_from_produced_goods: Decimal = Decimal("0")
    revenue_from_merchandise_sales: Decimal = Decimal("0")
    unclassified_revenue: Decimal = Decimal("0")
    revenue_total: Decimal = Decimal("0")
    cost_of_sales_total: Decimal = Decimal("0")
    labor_total: Decimal = Decimal("0")
    other_costs_total: Decimal = Decimal("0")
    depreciation_total: Decimal = Decimal("0")
    financial_result_total: Decimal = Decimal("0")
    unclassified_costs: Decimal = Decimal("0")
    rollup_excluded_total: Decimal = Decimal("0")
    gross_profit: Decimal = Decimal("0")
    result: Decimal = Decimal("0")
    record_count: int = 0
    breakdown: tuple[BreakdownLine, ...] = field(default_factory=tuple)

    @property
    def scope(self) -> Scope:
        return Scope(self.location_id, self.year, self.month)

    def bucket_totals(self) -> dict[BucketId, Decimal]:
        """Return the signed total of every bucket."""
        return {
            BucketId.REVENUE_PRODUCED_GOODS: self.revenue_from_produced_goods,
            BucketId.REVENUE_MERCHANDISE: self.revenue_from_merchandise_sales,
            BucketId.UNCLASSIFIED_REVENUE: self.unclassified_revenue,
            BucketId.COST_OF_SALES: self.cost_of_sales_total,
            BucketId.LABOR: self.labor_total,
            BucketId.OTHER_COSTS: self.other_costs_total,
            BucketId.DEPRECIATION: self.depreciation_total,
            BucketId.FINANCIAL_RESULT: self.financial_result_total,
            BucketId.UNCLASSIFIED_COSTS: self.unclassified_costs,
            BucketId.ROLLUP_EXCLUDED: self.rollup_excluded_total,
        }

    def group_totals(self, bucket: BucketId) -> dict[Optional[str], Decimal]:
        """Sum breakdown lines of a bucket per detail group."""
        totals: dict[Optional[str], Decimal] = {}
        for line in self.breakdown:
            if line.bucket is bucket:
                totals[line.group] = totals.get(line.group, Decimal("0")) + line.amount
        return totals
