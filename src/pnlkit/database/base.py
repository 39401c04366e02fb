"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Iterable, Iterator, Optional

from pnlkit.config import DEFAULT_PAGE_SIZE
# Import entities directly to avoid circular import through domain/__init__.py
from pnlkit.domain.entities import AggregatedPeriodSummary, LineItem, Scope


class Database(ABC):
    """Abstract database interface for pnlkit."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Line item operations
    @abstractmethod
    def add_line_items(self, items: Iterable[LineItem]) -> int:
        """Store line items. Returns number of rows written."""
        pass

    @abstractmethod
    def delete_line_items(self, location_id: str, year: int, month: int) -> int:
        """Delete the line items of a scope. Returns number of rows deleted."""
        pass

    @abstractmethod
    def replace_line_items(
        self, location_id: str, periods: Iterable[tuple[int, int]], items: Iterable[LineItem]
    ) -> int:
        """Delete the line items of the given periods and store items, atomically.

        Returns number of rows deleted.
        """
        pass

    @abstractmethod
    def count_line_items(self, location_id: str, year: int, month: int) -> int:
        """Count the line items of a scope."""
        pass

    @abstractmethod
    def iter_line_item_pages(
        self,
        location_id: str,
        year: int,
        month: int,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> Iterator[list[LineItem]]:
        """Yield the line items of a scope in pages of at most page_size."""
        pass

    def list_line_items(
        self,
        location_id: str,
        year: int,
        month: int,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> list[LineItem]:
        """Get every line item of a scope, reading all pages."""
        items: list[LineItem] = []
        for page in self.iter_line_item_pages(location_id, year, month, page_size=page_size):
            items.extend(page)
        return items

    @abstractmethod
    def list_scopes(
        self, location_id: Optional[str] = None, year: Optional[int] = None
    ) -> list[Scope]:
        """List scopes that have line items, ordered by location and period."""
        pass

    # Summary operations
    @abstractmethod
    def upsert_summary(self, summary: AggregatedPeriodSummary) -> None:
        """Create or replace the stored summary of the summary's scope."""
        pass

    @abstractmethod
    def get_summary(
        self, location_id: str, year: int, month: int
    ) -> Optional[AggregatedPeriodSummary]:
        """Get the stored summary of a scope."""
        pass

    @abstractmethod
    def list_summaries(
        self, location_id: Optional[str] = None, year: Optional[int] = None
    ) -> list[AggregatedPeriodSummary]:
        """List stored summaries, optionally filtered by location and year."""
        pass
