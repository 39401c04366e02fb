"""Line item aggregation into period summaries."""

import logging
from decimal import Decimal
from typing import Iterable, Optional

from pnlkit.domain import errors
from pnlkit.domain.category_rules import DEFAULT_RULES, CategoryRuleSet, Classification
from pnlkit.domain.entities import (
    AggregatedPeriodSummary,
    BreakdownLine,
    BucketId,
    LineItem,
    RollupPolicy,
    Scope,
)
from pnlkit.domain.reconciliation import deduplicate

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
_BUCKET_ORDER = {bucket: index for index, bucket in enumerate(BucketId)}


def validate_scope(scope: Scope) -> None:
    """Check that a scope identifies a single location and month.

    Raises:
        InvalidScopeError: If the location ID is empty or year/month are not
            integers in range
    """
    location_id = scope.location_id
    if not isinstance(location_id, str) or not location_id.strip():
        raise errors.InvalidScopeError(errors.empty_location())

    year = scope.year
    if isinstance(year, bool) or not isinstance(year, int) or not 1 <= year <= 9999:
        raise errors.InvalidScopeError(errors.invalid_year(year))

    month = scope.month
    if isinstance(month, bool) or not isinstance(month, int) or not 1 <= month <= 12:
        raise errors.InvalidScopeError(errors.invalid_month(month))


class LineItemAggregator:
    """Aggregates the line items of one scope into an AggregatedPeriodSummary.

    The aggregator holds only its (immutable) rule set, so one instance can
    be shared between threads.
    """

    def __init__(self, rules: Optional[CategoryRuleSet] = None):
        """Initialize aggregator.

        Args:
            rules: Classification rules (defaults to DEFAULT_RULES)
        """
        self.rules = rules or DEFAULT_RULES

    def aggregate(self, line_items: Iterable[LineItem], scope: Scope) -> AggregatedPeriodSummary:
        """Build the summary of one scope.

        The caller selects the line items of the scope; they are not filtered
        here. Repeated facts are counted once and every retained item lands
        in exactly one bucket.

        Args:
            line_items: All line items of the scope, in any order
            scope: Location and period being aggregated

        Returns:
            AggregatedPeriodSummary for the scope

        Raises:
            InvalidScopeError: If the scope is structurally invalid
        """
        validate_scope(scope)

        items = list(line_items)
        retained = deduplicate(items)
        classified = [(item, self.rules.classify(item)) for item in retained]
        classified = self._apply_rollup_policies(classified)

        totals: dict[BucketId, Decimal] = {bucket: ZERO for bucket in BucketId}
        details: dict[tuple[BucketId, str, Optional[str]], list] = {}
        for item, classification in classified:
            bucket = classification.bucket
            totals[bucket] += item.amount
            detail = details.setdefault(
                (bucket, item.label, classification.group), [ZERO, 0]
            )
            detail[0] += item.amount
            detail[1] += 1

        logger.debug(
            "Aggregated %s: %d items, %d duplicates, %d unclassified",
            scope,
            len(retained),
            len(items) - len(retained),
            sum(1 for _, classification in classified if classification.is_fallback),
        )

        return self._build_summary(scope, totals, details, len(retained))

    def _apply_rollup_policies(
        self, classified: list[tuple[LineItem, Classification]]
    ) -> list[tuple[LineItem, Classification]]:
        """Set aside parent rollup rows whose children are present."""
        preferring_children = {
            bucket
            for bucket in BucketId
            if self.rules.policy_for(bucket) is RollupPolicy.PREFER_CHILDREN
        }
        if not preferring_children:
            return classified

        def category_key(item: LineItem) -> str:
            return (item.category or "").strip().casefold()

        def is_rollup(item: LineItem, classification: Classification) -> bool:
            return classification.matched_on_category and not (item.subcategory or "").strip()

        with_children: set[tuple[BucketId, str]] = set()
        for item, classification in classified:
            if classification.bucket in preferring_children and not is_rollup(item, classification):
                with_children.add((classification.bucket, category_key(item)))

        adjusted = []
        for item, classification in classified:
            if (
                is_rollup(item, classification)
                and (classification.bucket, category_key(item)) in with_children
            ):
                classification = Classification(
                    BucketId.ROLLUP_EXCLUDED, classification.rule, classification.group
                )
            adjusted.append((item, classification))
        return adjusted

    def _build_summary(
        self,
        scope: Scope,
        totals: dict[BucketId, Decimal],
        details: dict[tuple[BucketId, str, Optional[str]], list],
        record_count: int,
    ) -> AggregatedPeriodSummary:
        revenue_total = sum(
            (amount for bucket, amount in totals.items() if bucket.is_revenue), ZERO
        )
        result = sum(
            (amount for bucket, amount in totals.items() if bucket.in_result), ZERO
        )
        breakdown = tuple(
            BreakdownLine(bucket=bucket, label=label, amount=amount, record_count=count, group=group)
            for (bucket, label, group), (amount, count) in sorted(
                details.items(),
                key=lambda entry: (_BUCKET_ORDER[entry[0][0]], entry[0][1], entry[0][2] or ""),
            )
        )

        return AggregatedPeriodSummary(
            location_id=scope.location_id,
            year=scope.year,
            month=scope.month,
            revenue_from_produced_goods=totals[BucketId.REVENUE_PRODUCED_GOODS],
            revenue_from_merchandise_sales=totals[BucketId.REVENUE_MERCHANDISE],
            unclassified_revenue=totals[BucketId.UNCLASSIFIED_REVENUE],
            revenue_total=revenue_total,
            cost_of_sales_total=totals[BucketId.COST_OF_SALES],
            labor_total=totals[BucketId.LABOR],
            other_costs_total=totals[BucketId.OTHER_COSTS],
            depreciation_total=totals[BucketId.DEPRECIATION],
            financial_result_total=totals[BucketId.FINANCIAL_RESULT],
            unclassified_costs=totals[BucketId.UNCLASSIFIED_COSTS],
            rollup_excluded_total=totals[BucketId.ROLLUP_EXCLUDED],
            gross_profit=revenue_total + totals[BucketId.COST_OF_SALES],
            result=result,
            record_count=record_count,
            breakdown=breakdown,
        )


def aggregate(
    line_items: Iterable[LineItem],
    scope: Scope,
    rules: Optional[CategoryRuleSet] = None,
) -> AggregatedPeriodSummary:
    """Aggregate line items of one scope with the given (or default) rules."""
    return LineItemAggregator(rules).aggregate(line_items, scope)
