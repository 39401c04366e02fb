"""Deduplication and reconciliation helpers for ledger line items."""

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from pnlkit.domain.entities import AggregatedPeriodSummary, LineItem
from pnlkit.utils.amount_parser import to_decimal

DedupKey = tuple[str, str, str, Decimal]


def normalize_item(item: LineItem) -> LineItem:
    """Return the item with a Decimal amount."""
    if isinstance(item.amount, Decimal):
        return item
    return replace(item, amount=to_decimal(item.amount))


def dedup_key(item: LineItem) -> DedupKey:
    """Identity of a line item within one scope.

    Location and period are left out because the input is already scoped.
    Text fields are compared as stored; missing subcategory or GL account
    count as empty strings.
    """
    return (
        item.category or "",
        item.subcategory or "",
        item.gl_account or "",
        to_decimal(item.amount),
    )


def _representation_rank(amount: Decimal) -> tuple[int, bool]:
    """Order equal amounts such as -300 and -300.00 independently of input order."""
    return amount.as_tuple().exponent, amount.is_signed()


def _canonical_amount(amounts: Iterable[Decimal]) -> Decimal:
    return min(amounts, key=_representation_rank)


def deduplicate(items: Iterable[LineItem]) -> list[LineItem]:
    """Drop repeated facts, keeping one item per key in first-seen position.

    When duplicates write the amount differently, the survivor carries the
    representation with the most decimals, so totals do not depend on order.
    """
    retained: dict[DedupKey, LineItem] = {}
    for item in items:
        item = normalize_item(item)
        key = dedup_key(item)
        kept = retained.get(key)
        if kept is None or _representation_rank(item.amount) < _representation_rank(kept.amount):
            retained[key] = item
    return list(retained.values())


@dataclass(frozen=True)
class ConservationReport:
    """Comparison of input amounts against the buckets of a summary."""

    input_total: Decimal
    deduplicated_total: Decimal
    bucket_total: Decimal
    duplicate_count: int

    @property
    def difference(self) -> Decimal:
        return self.bucket_total - self.deduplicated_total

    @property
    def balanced(self) -> bool:
        return self.difference == 0


def check_conservation(
    items: Sequence[LineItem], summary: AggregatedPeriodSummary
) -> ConservationReport:
    """Verify that every deduplicated amount ended up in some bucket.

    Args:
        items: Line items the summary was computed from
        summary: Summary to check

    Returns:
        ConservationReport; ``balanced`` is True when bucket totals equal the
        deduplicated input total exactly
    """
    retained = deduplicate(items)
    return ConservationReport(
        input_total=sum((to_decimal(item.amount) for item in items), Decimal("0")),
        deduplicated_total=sum((item.amount for item in retained), Decimal("0")),
        bucket_total=sum(summary.bucket_totals().values(), Decimal("0")),
        duplicate_count=len(items) - len(retained),
    )


@dataclass(frozen=True)
class DuplicateGroup:
    """A fact recorded more than once in the same scope."""

    category: str
    subcategory: str
    gl_account: str
    amount: Decimal
    count: int
    import_ids: tuple[str, ...]

    @property
    def label(self) -> str:
        return self.subcategory or self.category

    @property
    def excess_amount(self) -> Decimal:
        """Amount that naive summation would double count."""
        return self.amount * (self.count - 1)


def find_duplicates(items: Iterable[LineItem]) -> list[DuplicateGroup]:
    """Group line items sharing a dedup key, largest groups first."""
    groups: dict[DedupKey, list[LineItem]] = {}
    for item in items:
        groups.setdefault(dedup_key(item), []).append(item)

    duplicates = []
    for key, members in groups.items():
        if len(members) < 2:
            continue
        category, subcategory, gl_account, _ = key
        amount = _canonical_amount(to_decimal(member.amount) for member in members)
        import_ids = tuple(
            sorted({member.import_id for member in members if member.import_id})
        )
        duplicates.append(
            DuplicateGroup(
                category=category,
                subcategory=subcategory,
                gl_account=gl_account,
                amount=amount,
                count=len(members),
                import_ids=import_ids,
            )
        )

    return sorted(duplicates, key=lambda group: (-group.count, group.label, group.amount))


@dataclass(frozen=True)
class RevenueCheck:
    """Aggregated revenue compared with an externally known figure."""

    actual: Decimal
    expected: Decimal
    tolerance: Decimal

    @property
    def difference(self) -> Decimal:
        return self.actual - self.expected

    @property
    def ratio(self) -> Optional[Decimal]:
        if self.expected == 0:
            return None
        return self.actual / self.expected

    @property
    def within_tolerance(self) -> bool:
        return abs(self.difference) <= self.tolerance


def compare_revenue(
    summary: AggregatedPeriodSummary,
    expected,
    tolerance=Decimal("1"),
) -> RevenueCheck:
    """Compare the revenue total of a summary with an expected amount."""
    return RevenueCheck(
        actual=summary.revenue_total,
        expected=to_decimal(expected),
        tolerance=to_decimal(tolerance),
    )
