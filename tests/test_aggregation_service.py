"""Tests for the aggregation service."""

import pytest
from decimal import Decimal

from pnlkit.domain.aggregator import aggregate
from pnlkit.domain.aggregation_service import AggregationService
from pnlkit.domain.category_rules import DEFAULT_RULES
from pnlkit.domain.entities import BucketId, RollupPolicy, Scope
from pnlkit.domain.errors import InvalidScopeError, NotFoundError


def test_aggregate_period_stores_summary(aggregation_service, temp_db, scenario_items):
    """Aggregating a scope reads every page and upserts the summary."""
    temp_db.add_line_items(scenario_items)

    summary = aggregation_service.aggregate_period("amsterdam", 2025, 3)

    assert summary.revenue_from_produced_goods == Decimal("2000")
    assert summary.cost_of_sales_total == Decimal("-300")
    assert summary.gross_profit == Decimal("1700")
    assert summary.record_count == 3
    assert temp_db.get_summary("amsterdam", 2025, 3) == summary


def test_aggregate_period_matches_in_memory_aggregate(aggregation_service, temp_db, make_item):
    """Stored amounts with more than two decimals aggregate without rounding."""
    items = [
        make_item("Autokosten", "-10.001", subcategory="Brandstoffen"),
        make_item("Autokosten", "-10.004", subcategory="Brandstoffen"),
        make_item("Autokosten", "-10.004", subcategory="Brandstoffen", import_id="again"),
    ]
    temp_db.add_line_items(items)

    summary = aggregation_service.aggregate_period("amsterdam", 2025, 3)
    expected = aggregate(items, Scope(location_id="amsterdam", year=2025, month=3))

    assert summary.record_count == 2
    assert str(summary.other_costs_total) == "-20.005"
    assert repr(summary) == repr(expected)
    assert repr(temp_db.get_summary("amsterdam", 2025, 3)) == repr(expected)


def test_aggregate_period_empty_scope(aggregation_service, temp_db):
    """A valid scope without line items stores a zero summary."""
    summary = aggregation_service.aggregate_period("amsterdam", 2025, 3)

    assert summary.record_count == 0
    assert summary.result == 0
    assert temp_db.get_summary("amsterdam", 2025, 3) is not None


@pytest.mark.parametrize("location_id,year,month", [("", 2025, 3), ("amsterdam", 2025, 13)])
def test_aggregate_period_invalid_scope(aggregation_service, temp_db, location_id, year, month):
    """Invalid scopes raise and store nothing."""
    with pytest.raises(InvalidScopeError):
        aggregation_service.aggregate_period(location_id, year, month)

    assert temp_db.list_summaries() == []


def test_aggregate_period_is_idempotent(aggregation_service, temp_db, scenario_items):
    """Re-running a scope replaces its summary with an equal one."""
    temp_db.add_line_items(scenario_items)

    first = aggregation_service.aggregate_period("amsterdam", 2025, 3)
    second = aggregation_service.aggregate_period("amsterdam", 2025, 3)

    assert first == second
    assert len(temp_db.list_summaries()) == 1


def test_service_uses_configured_rules(temp_db, make_item):
    """Rules passed to the service drive classification."""
    rules = DEFAULT_RULES.with_rollup_policy(
        BucketId.REVENUE_PRODUCED_GOODS, RollupPolicy.PREFER_CHILDREN
    )
    produced = "Netto-omzet uit leveringen geproduceerde goederen"
    temp_db.add_line_items(
        [
            make_item(produced, "1000"),
            make_item(produced, "1000", subcategory="Omzet lunch (btw laag)"),
        ]
    )
    service = AggregationService(temp_db, rules=rules)

    summary = service.aggregate_period("amsterdam", 2025, 3)

    assert summary.revenue_total == Decimal("1000")
    assert summary.rollup_excluded_total == Decimal("1000")


class TestReaggregate:
    """Tests for batch re-aggregation."""

    def test_reaggregate_all_scopes(self, aggregation_service, temp_db, make_item):
        """Every stored scope is aggregated and stored in scope order."""
        for location_id, month in [("utrecht", 1), ("amsterdam", 2), ("amsterdam", 1)]:
            temp_db.add_line_items(
                [
                    make_item("Autokosten", f"-{month}0", location_id=location_id, month=month),
                    make_item("Kantoorkosten", "-5", location_id=location_id, month=month),
                    make_item("Kantoorkosten", "-5", location_id=location_id, month=month),
                ]
            )

        batch = aggregation_service.reaggregate()

        assert batch.succeeded == 3
        assert batch.failed == 0
        assert [summary.scope for summary in batch.summaries] == [
            Scope("amsterdam", 2025, 1),
            Scope("amsterdam", 2025, 2),
            Scope("utrecht", 2025, 1),
        ]
        assert all(summary.record_count == 2 for summary in batch.summaries)
        assert temp_db.get_summary("amsterdam", 2025, 2).other_costs_total == Decimal("-25")
        assert len(temp_db.list_summaries()) == 3

    def test_reaggregate_filters(self, aggregation_service, temp_db, make_item):
        """Location and year filters limit the scopes."""
        temp_db.add_line_items([make_item("Autokosten", "-1", location_id="utrecht")])
        temp_db.add_line_items([make_item("Autokosten", "-1", year=2024)])
        temp_db.add_line_items([make_item("Autokosten", "-1")])

        batch = aggregation_service.reaggregate(location_id="amsterdam", year=2025)

        assert [summary.scope for summary in batch.summaries] == [Scope("amsterdam", 2025, 3)]

    def test_reaggregate_without_scopes(self, aggregation_service):
        """An empty store gives an empty batch result."""
        batch = aggregation_service.reaggregate()

        assert batch.summaries == []
        assert batch.failures == []

    def test_invalid_scope_does_not_abort_siblings(self, aggregation_service, temp_db, make_item):
        """A failing scope is recorded while its siblings are stored."""
        temp_db.add_line_items(
            [
                make_item("Autokosten", "-10"),
                make_item("Autokosten", "-10", location_id=""),
                make_item("Autokosten", "-10", month=13),
                make_item("Autokosten", "-10", month=4),
            ]
        )

        batch = aggregation_service.reaggregate()

        assert [summary.scope for summary in batch.summaries] == [
            Scope("amsterdam", 2025, 3),
            Scope("amsterdam", 2025, 4),
        ]
        assert [failure.scope for failure in batch.failures] == [
            Scope("", 2025, 3),
            Scope("amsterdam", 2025, 13),
        ]
        assert "Location ID" in batch.failures[0].message
        assert "Month" in batch.failures[1].message
        assert len(temp_db.list_summaries()) == 2


def test_get_summary_missing_raises(aggregation_service):
    """Reading an unaggregated scope raises NotFoundError."""
    with pytest.raises(NotFoundError, match="No summary stored"):
        aggregation_service.get_summary("amsterdam", 2025, 3)


def test_list_summaries(aggregation_service, temp_db, scenario_items):
    """Stored summaries are listed."""
    temp_db.add_line_items(scenario_items)
    aggregation_service.aggregate_period("amsterdam", 2025, 3)

    summaries = aggregation_service.list_summaries(location_id="amsterdam")

    assert [summary.scope for summary in summaries] == [Scope("amsterdam", 2025, 3)]


def test_get_line_items(aggregation_service, temp_db, scenario_items):
    """Line items of a scope are read across pages."""
    temp_db.add_line_items(scenario_items)

    assert aggregation_service.get_line_items("amsterdam", 2025, 3) == scenario_items

    with pytest.raises(NotFoundError):
        aggregation_service.get_line_items("amsterdam", 2025, 4)
    with pytest.raises(InvalidScopeError):
        aggregation_service.get_line_items("amsterdam", 2025, 0)
