import asyncio

import pytest

from conftest import PRICINGS, FakeClassifier, FakePlanStore, build_plan_model
from modules.rate_engine.rate_engine_schema import RateOutcome, ZoneLabel
from modules.rate_engine.rate_engine_service import (
    MESSAGE_NO_COURIERS,
    MESSAGE_NO_PLAN,
    MESSAGE_NO_SERVICEABLE_COURIER,
    MESSAGE_NOT_SERVICEABLE,
    RateEngineService,
    validate_rate_request,
)


def run(coroutine):
    return asyncio.run(coroutine)


def test_metro_to_metro_quotes_every_eligible_courier_in_plan_order(engine_service, make_request):
    result = run(engine_service.calculate_rates_for_user(make_request(), user_id="7"))

    assert result.outcome == RateOutcome.SUCCESS
    assert result.is_success
    # reversed and inactive couriers never quote a forward shipment
    assert [quote.courier_id for quote in result.quotes] == [1, 2]
    assert [quote.total_price for quote in result.quotes] == [75, 85]
    assert {quote.zone for quote in result.quotes} == {ZoneLabel.Z_C}
    assert [quote.expected_pickup for quote in result.quotes] == ["Today", "Today"]


def test_same_city_prepaid(engine_service, make_request):
    result = run(
        engine_service.calculate_rates_for_user(
            make_request(delivery_pincode="110002", weight=1), user_id=None
        )
    )

    surface, air = result.quotes
    assert surface.zone == ZoneLabel.Z_A
    assert surface.breakdown.weight_increment_ratio == 1
    assert surface.weight_charges == 10
    assert surface.cod_charges == 0
    assert surface.rto_charges == 40
    assert air.weight_charges == 0
    assert air.rto_charges == 50


def test_cross_state_cod_underweight(engine_service, make_request):
    rate_request = make_request(
        delivery_pincode="841301", weight=0.3, payment_type=1, collectable_amount=1000
    )
    result = run(engine_service.calculate_rates_for_user(rate_request, user_id=None))

    assert result.outcome == RateOutcome.SUCCESS
    for quote, pricing in zip(result.quotes, PRICINGS):
        assert quote.zone == ZoneLabel.Z_D
        assert quote.final_weight == pricing["weight_slab"]
        assert quote.breakdown.weight_increment_ratio == 0
        assert quote.weight_charges == 0
    assert [quote.cod_charges for quote in result.quotes] == [40, 50]
    assert [quote.total_price for quote in result.quotes] == [95, 130]


def test_courier_without_zone_pricing_is_skipped(engine_service, make_request):
    result = run(
        engine_service.calculate_rates_for_user(
            make_request(delivery_pincode="781001"), user_id=None
        )
    )

    assert result.outcome == RateOutcome.SUCCESS
    assert [quote.courier_id for quote in result.quotes] == [1]
    assert result.quotes[0].zone == ZoneLabel.Z_E


def test_no_serviceable_courier(classifier, fixed_now, make_request):
    plan = build_plan_model(pricings=[PRICINGS[1]])
    service = RateEngineService(classifier, FakePlanStore(default_plan=plan), clock=lambda: fixed_now)

    result = run(service.calculate_rates_for_user(make_request(delivery_pincode="781001"), user_id=None))

    assert result.outcome == RateOutcome.NO_SERVICEABLE_COURIER
    assert result.message == MESSAGE_NO_SERVICEABLE_COURIER
    assert result.quotes == []


def test_reversed_order_only_uses_reversed_couriers(engine_service, make_request):
    result = run(
        engine_service.calculate_rates_for_user(make_request(is_reversed_order=True), user_id=None)
    )

    assert [quote.courier_id for quote in result.quotes] == [3]
    assert all(quote.is_reversed_courier for quote in result.quotes)


@pytest.mark.parametrize("is_reversed_order", [False, True])
def test_reversed_flag_matches_request(engine_service, make_request, is_reversed_order):
    result = run(
        engine_service.calculate_rates_for_user(
            make_request(is_reversed_order=is_reversed_order), user_id=None
        )
    )
    assert result.quotes
    assert all(quote.is_reversed_courier == is_reversed_order for quote in result.quotes)


def test_unknown_pincode_is_not_serviceable(engine_service, make_request):
    result = run(
        engine_service.calculate_rates_for_user(make_request(delivery_pincode="999999"), user_id=None)
    )

    assert result.outcome == RateOutcome.NOT_SERVICEABLE
    assert result.message == MESSAGE_NOT_SERVICEABLE


def test_invalid_request_never_reaches_classifier(engine_service, classifier, make_request):
    rate_request = make_request(
        weight=0,
        box_height=0,
        payment_type=1,
        collectable_amount=None,
        pickup_pincode="12345",
    )
    result = run(engine_service.calculate_rates_for_user(rate_request, user_id=None))

    assert result.outcome == RateOutcome.VALIDATION_ERROR
    assert result.errors == [
        "Weight must be greater than 0",
        "Box dimensions must be greater than 0",
        "Collectable amount is required for COD and cannot be negative",
        "Pickup and delivery pincodes must be 6 digit numbers",
    ]
    assert classifier.calls == []


def test_unknown_payment_type(make_request):
    assert validate_rate_request(make_request(payment_type=2)) == [
        "Payment type must be 0 (prepaid) or 1 (COD)"
    ]
    assert validate_rate_request(make_request(payment_type=1, collectable_amount=0)) == []


@pytest.mark.parametrize(
    "overrides",
    [
        dict(weight=float("nan")),
        dict(weight=float("inf")),
        dict(box_length=float("inf")),
        dict(box_width=float("-inf")),
        dict(box_height=float("nan")),
        dict(payment_type=1, collectable_amount=float("nan")),
        dict(payment_type=1, collectable_amount=float("inf")),
    ],
)
def test_non_finite_amounts_are_validation_errors(engine_service, classifier, make_request, overrides):
    result = run(engine_service.calculate_rates_for_user(make_request(**overrides), user_id=None))

    assert result.outcome == RateOutcome.VALIDATION_ERROR
    assert "Weight, box dimensions and collectable amount must be finite numbers" in result.errors
    assert classifier.calls == []


@pytest.mark.parametrize("pincode", ["²²²²²²", "١١٠٠٠١", "11000１"])
def test_non_ascii_digit_pincodes_are_validation_errors(engine_service, classifier, make_request, pincode):
    result = run(engine_service.calculate_rates_for_user(make_request(delivery_pincode=pincode), user_id=None))

    assert result.outcome == RateOutcome.VALIDATION_ERROR
    assert result.errors == ["Pickup and delivery pincodes must be 6 digit numbers"]
    assert classifier.calls == []


def test_no_plan(classifier, make_request):
    service = RateEngineService(classifier, FakePlanStore())
    result = run(service.calculate_rates_for_user(make_request(), user_id="42"))

    assert result.outcome == RateOutcome.NO_PLAN
    assert result.message == MESSAGE_NO_PLAN


def test_plan_without_couriers(classifier, make_request):
    service = RateEngineService(classifier, FakePlanStore(default_plan=build_plan_model(pricings=[])))
    result = run(service.calculate_rates_for_user(make_request(), user_id=None))

    assert result.outcome == RateOutcome.NO_COURIERS
    assert result.message == MESSAGE_NO_COURIERS


def test_explicit_plan_and_user_plan(classifier, fixed_now, basic_plan, make_request):
    premium = build_plan_model(pricings=[PRICINGS[1]], plan_id=2, name="Premium")
    store = FakePlanStore(
        plans={1: basic_plan, 2: premium},
        user_plans={"7": premium},
        default_plan=basic_plan,
    )
    service = RateEngineService(classifier, store, clock=lambda: fixed_now)

    by_user = run(service.calculate_rates_for_user(make_request(), user_id="7"))
    by_plan = run(service.calculate_rates_for_user(make_request(), user_id="7", plan_id=1))
    unknown_plan = run(service.calculate_rates_for_user(make_request(), user_id="7", plan_id=99))

    assert [quote.courier_id for quote in by_user.quotes] == [2]
    assert [quote.courier_id for quote in by_plan.quotes] == [1, 2]
    assert unknown_plan.outcome == RateOutcome.NO_PLAN


def test_calculate_rates_with_given_plan(engine_service, basic_plan, make_request):
    result = run(engine_service.calculate_rates(make_request(), basic_plan))
    assert [quote.courier_id for quote in result.quotes] == [1, 2]

    assert run(engine_service.calculate_rates(make_request(), None)).outcome == RateOutcome.NO_PLAN


def test_invalid_courier_pricing_is_skipped(classifier, fixed_now, make_request):
    broken = dict(PRICINGS[0], increment_weight=0)
    plan = build_plan_model(pricings=[broken, PRICINGS[1]])
    service = RateEngineService(classifier, FakePlanStore(default_plan=plan), clock=lambda: fixed_now)

    result = run(service.calculate_rates_for_user(make_request(), user_id=None))

    assert [quote.courier_id for quote in result.quotes] == [2]


def test_repeated_calls_are_identical(engine_service, make_request):
    rate_request = make_request(payment_type=1, collectable_amount=3210.5, weight=2.75)

    first = run(engine_service.calculate_rates_for_user(rate_request, user_id=None))
    second = run(engine_service.calculate_rates_for_user(rate_request, user_id=None))

    assert first == second


def test_pickup_after_cutoff_is_tomorrow(classifier, plan_store, make_request):
    from datetime import datetime
    from utils.datetime import IST

    def quote_pickups(hour):
        now = IST.localize(datetime(2026, 1, 15, hour, 0, 0))
        service = RateEngineService(classifier, plan_store, clock=lambda: now)
        result = run(service.calculate_rates_for_user(make_request(), user_id=None))
        return [quote.expected_pickup for quote in result.quotes]

    # surface cuts off at 14:00, the air courier has no cutoff and uses noon
    assert quote_pickups(13) == ["Today", "Tomorrow"]
    assert quote_pickups(15) == ["Tomorrow", "Tomorrow"]


def test_pincode_lookups_run_concurrently(plan_store, make_request):
    class SlowClassifier(FakeClassifier):
        def __init__(self):
            super().__init__()
            self.in_flight = 0
            self.max_in_flight = 0

        async def classify(self, pincode):
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
            await asyncio.sleep(0.01)
            self.in_flight -= 1
            return await super().classify(pincode)

    classifier = SlowClassifier()
    service = RateEngineService(classifier, plan_store)

    result = run(service.calculate_rates_for_user(make_request(), user_id=None))

    assert result.is_success
    assert classifier.max_in_flight == 2
    assert sorted(classifier.calls) == ["110001", "400001"]


def test_classifier_failure_propagates(plan_store, make_request):
    service = RateEngineService(FakeClassifier(error=RuntimeError("pincode store down")), plan_store)

    with pytest.raises(RuntimeError, match="pincode store down"):
        run(service.calculate_rates_for_user(make_request(), user_id=None))
