"""Aggregation domain service backed by the line item store."""

import concurrent.futures
import logging
import os
from dataclasses import dataclass, field
from typing import Optional

from pnlkit.config import DEFAULT_PAGE_SIZE
from pnlkit.database.base import Database
from pnlkit.domain import errors
from pnlkit.domain.aggregator import LineItemAggregator, validate_scope
from pnlkit.domain.category_rules import CategoryRuleSet
from pnlkit.domain.entities import AggregatedPeriodSummary, LineItem, Scope

logger = logging.getLogger(__name__)


@dataclass
class ScopeFailure:
    """A scope that could not be aggregated in a batch run."""

    scope: Scope
    message: str


@dataclass
class BatchResult:
    """Outcome of re-aggregating many scopes."""

    summaries: list[AggregatedPeriodSummary] = field(default_factory=list)
    failures: list[ScopeFailure] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return len(self.summaries)

    @property
    def failed(self) -> int:
        return len(self.failures)


class AggregationService:
    """Service for aggregating stored line items into period summaries."""

    def __init__(
        self,
        db: Database,
        rules: Optional[CategoryRuleSet] = None,
        max_workers: Optional[int] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ):
        """Initialize aggregation service.

        Args:
            db: Database instance
            rules: Classification rules (defaults to the standard chart of accounts)
            max_workers: Worker threads for batch runs (defaults to CPU count)
            page_size: Rows per page when reading line items
        """
        self.db = db
        self.aggregator = LineItemAggregator(rules)
        self.max_workers = max_workers or os.cpu_count() or 1
        self.page_size = page_size

    def aggregate_period(self, location_id: str, year: int, month: int) -> AggregatedPeriodSummary:
        """Aggregate one scope from stored line items and store the summary.

        All pages of the scope are read before aggregation starts.

        Args:
            location_id: Location identifier
            year: Reporting year
            month: Reporting month (1-12)

        Returns:
            The stored summary

        Raises:
            InvalidScopeError: If the scope is invalid
        """
        scope = Scope(location_id=location_id, year=year, month=month)
        validate_scope(scope)

        items = self.db.list_line_items(location_id, year, month, page_size=self.page_size)
        summary = self.aggregator.aggregate(items, scope)
        self.db.upsert_summary(summary)
        logger.info("Aggregated %s from %d line items", scope, len(items))
        return summary

    def reaggregate(
        self, location_id: Optional[str] = None, year: Optional[int] = None
    ) -> BatchResult:
        """Re-aggregate every stored scope, optionally filtered.

        Line items are read and summaries written on the calling thread;
        only the aggregation itself runs in the worker pool. A failing scope
        is recorded and does not stop the others.

        Args:
            location_id: Optional location filter
            year: Optional year filter

        Returns:
            BatchResult with stored summaries and per-scope failures
        """
        scopes = self.db.list_scopes(location_id=location_id, year=year)
        batch = BatchResult()
        if not scopes:
            return batch

        inputs: dict[Scope, list[LineItem]] = {}
        for scope in scopes:
            inputs[scope] = self.db.list_line_items(
                scope.location_id, scope.year, scope.month, page_size=self.page_size
            )

        with concurrent.futures.ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            future_to_scope = {
                executor.submit(self.aggregator.aggregate, items, scope): scope
                for scope, items in inputs.items()
            }
            completed: dict[Scope, AggregatedPeriodSummary] = {}
            for future in concurrent.futures.as_completed(future_to_scope):
                scope = future_to_scope[future]
                try:
                    completed[scope] = future.result()
                except errors.DomainError as e:
                    logger.warning("Skipping %s: %s", scope, e)
                    batch.failures.append(ScopeFailure(scope=scope, message=str(e)))

        for scope in scopes:
            summary = completed.get(scope)
            if summary is None:
                continue
            self.db.upsert_summary(summary)
            batch.summaries.append(summary)

        batch.failures.sort(
            key=lambda failure: (
                failure.scope.location_id,
                failure.scope.year,
                failure.scope.month,
            )
        )
        logger.info(
            "Re-aggregated %d scopes (%d failed)", batch.succeeded, batch.failed
        )
        return batch

    def get_summary(self, location_id: str, year: int, month: int) -> AggregatedPeriodSummary:
        """Get the stored summary of a scope.

        Raises:
            NotFoundError: If the scope has not been aggregated
        """
        summary = self.db.get_summary(location_id, year, month)
        if summary is None:
            raise errors.NotFoundError(errors.summary_not_found(location_id, year, month))
        return summary

    def list_summaries(
        self, location_id: Optional[str] = None, year: Optional[int] = None
    ) -> list[AggregatedPeriodSummary]:
        """List stored summaries."""
        return self.db.list_summaries(location_id=location_id, year=year)

    def get_line_items(self, location_id: str, year: int, month: int) -> list[LineItem]:
        """Get every stored line item of a scope.

        Raises:
            InvalidScopeError: If the scope is invalid
            NotFoundError: If the scope has no line items
        """
        validate_scope(Scope(location_id=location_id, year=year, month=month))
        items = self.db.list_line_items(location_id, year, month, page_size=self.page_size)
        if not items:
            raise errors.NotFoundError(errors.no_line_items(location_id, year, month))
        return items
