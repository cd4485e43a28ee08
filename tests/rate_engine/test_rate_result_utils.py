import asyncio

import pytest

from modules.rate_engine.rate_engine_schema import RateFiltersModel, ZoneLabel
from modules.rate_engine.rate_result_utils import (
    filter_quotes,
    get_cheapest_option,
    get_most_expensive_option,
    get_price_summary,
    group_by_zone,
    rank_quotes,
    sort_by_pickup_time,
    sort_by_price,
    sort_by_recommended_and_price,
)


@pytest.fixture
def quotes(engine_service, make_request):
    # surface 75 (recommended, Today), air 85 (Today)
    result = asyncio.run(engine_service.calculate_rates_for_user(make_request(), user_id=None))
    surface, air = result.quotes
    # a third, cheaper option picked up tomorrow
    late = air.model_copy(
        update={"courier_id": 9, "courier_name": "Late Air", "total_price": 60.0, "expected_pickup": "Tomorrow"}
    )
    return [surface, air, late]


def test_cheapest_and_most_expensive(quotes):
    assert get_cheapest_option(quotes).courier_id == 9
    assert get_most_expensive_option(quotes).courier_id == 2
    assert get_cheapest_option([]) is None
    assert get_most_expensive_option([]) is None


def test_sort_by_price(quotes):
    assert [q.courier_id for q in sort_by_price(quotes)] == [9, 1, 2]
    assert [q.courier_id for q in sort_by_price(quotes, order="desc")] == [2, 1, 9]
    # input untouched
    assert [q.courier_id for q in quotes] == [1, 2, 9]


def test_sort_by_pickup_time_is_stable(quotes):
    assert [q.courier_id for q in sort_by_pickup_time(quotes[::-1])] == [2, 1, 9]


def test_sort_by_recommended_then_price(quotes):
    assert [q.courier_id for q in sort_by_recommended_and_price(quotes)] == [1, 9, 2]


def test_filter_quotes(quotes):
    assert [q.courier_id for q in filter_quotes(quotes, RateFiltersModel(max_price=80))] == [1, 9]
    assert [q.courier_id for q in filter_quotes(quotes, RateFiltersModel(min_price=80))] == [2]
    assert [q.courier_id for q in filter_quotes(quotes, RateFiltersModel(courier_type="AIR"))] == [2, 9]
    assert [q.courier_id for q in filter_quotes(quotes, RateFiltersModel(exclude_courier_ids=[1, 9]))] == [2]
    assert filter_quotes(quotes, RateFiltersModel(zone=ZoneLabel.Z_A)) == []
    assert len(filter_quotes(quotes, RateFiltersModel(cod_supported=True, rto_supported=True))) == 3


def test_group_by_zone(quotes):
    groups = group_by_zone(quotes)
    assert list(groups) == ["Zone C"]
    assert len(groups["Zone C"]) == 3


def test_price_summary(quotes):
    summary = get_price_summary(quotes)
    assert summary.total_couriers == 3
    assert summary.cheapest.courier_id == 9
    assert summary.most_expensive.courier_id == 2
    assert summary.average_price == pytest.approx(220 / 3)
    assert (summary.price_range.min, summary.price_range.max) == (60, 85)

    empty = get_price_summary([])
    assert empty.total_couriers == 0
    assert empty.cheapest is None


def test_rank_quotes(quotes):
    assert [q.courier_id for q in rank_quotes(quotes, "price")] == [9, 1, 2]
    assert [q.courier_id for q in rank_quotes(quotes, "recommended")] == [1, 9, 2]
    assert [q.courier_id for q in rank_quotes(quotes)] == [1, 2, 9]
    assert [q.courier_id for q in rank_quotes(quotes, "unknown")] == [1, 2, 9]
