"""
Presentation helpers for rate quotes.

The engine returns quotes in plan order; ranking, filtering and summaries are
applied by callers through these helpers. None of them mutate their input.
"""

from collections import defaultdict
from typing import Dict, List, Optional

from modules.rate_engine.rate_engine_schema import (
    PriceRangeModel,
    PriceSummaryModel,
    RateFiltersModel,
    RateQuoteModel,
)
from modules.rate_engine.charge_calculator import PICKUP_TODAY


def get_cheapest_option(quotes: List[RateQuoteModel]) -> Optional[RateQuoteModel]:
    if not quotes:
        return None
    # min keeps the first of equal prices
    return min(quotes, key=lambda quote: quote.total_price)


def get_most_expensive_option(
    quotes: List[RateQuoteModel],
) -> Optional[RateQuoteModel]:
    if not quotes:
        return None
    return max(quotes, key=lambda quote: quote.total_price)


def filter_quotes(
    quotes: List[RateQuoteModel], filters: RateFiltersModel
) -> List[RateQuoteModel]:
    def matches(quote: RateQuoteModel) -> bool:
        if filters.max_price is not None and quote.total_price > filters.max_price:
            return False
        if filters.min_price is not None and quote.total_price < filters.min_price:
            return False
        if filters.courier_type and quote.courier_type != filters.courier_type:
            return False
        if (
            filters.cod_supported is not None
            and quote.is_cod_applicable != filters.cod_supported
        ):
            return False
        if (
            filters.rto_supported is not None
            and quote.is_rto_applicable != filters.rto_supported
        ):
            return False
        if filters.zone and quote.zone != filters.zone:
            return False
        if quote.courier_id in filters.exclude_courier_ids:
            return False
        return True

    return [quote for quote in quotes if matches(quote)]


def sort_by_price(
    quotes: List[RateQuoteModel], order: str = "asc"
) -> List[RateQuoteModel]:
    return sorted(
        quotes, key=lambda quote: quote.total_price, reverse=(order == "desc")
    )


def sort_by_pickup_time(quotes: List[RateQuoteModel]) -> List[RateQuoteModel]:
    return sorted(quotes, key=lambda quote: quote.expected_pickup != PICKUP_TODAY)


def sort_by_recommended_and_price(
    quotes: List[RateQuoteModel],
) -> List[RateQuoteModel]:
    return sorted(quotes, key=lambda quote: (not quote.recommended, quote.total_price))


def group_by_zone(quotes: List[RateQuoteModel]) -> Dict[str, List[RateQuoteModel]]:
    groups = defaultdict(list)
    for quote in quotes:
        groups[quote.zone_name].append(quote)
    return dict(groups)


def get_price_summary(quotes: List[RateQuoteModel]) -> PriceSummaryModel:
    if not quotes:
        return PriceSummaryModel()

    prices = [quote.total_price for quote in quotes]

    return PriceSummaryModel(
        total_couriers=len(quotes),
        serviceable=len(quotes),
        cheapest=get_cheapest_option(quotes),
        most_expensive=get_most_expensive_option(quotes),
        average_price=sum(prices) / len(prices),
        price_range=PriceRangeModel(min=min(prices), max=max(prices)),
    )


SORTERS = {
    "price": sort_by_price,
    "recommended": sort_by_recommended_and_price,
    "pickup": sort_by_pickup_time,
}


def rank_quotes(
    quotes: List[RateQuoteModel], sort_by: Optional[str] = None
) -> List[RateQuoteModel]:
    """Apply an optional named ordering, unknown names keep plan order."""
    sorter = SORTERS.get(sort_by or "")
    return sorter(quotes) if sorter else list(quotes)
