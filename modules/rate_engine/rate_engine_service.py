import asyncio
import math
from datetime import datetime
from typing import Callable, Iterable, List, Optional

from context_manager.context import context_user_data
from logger import logger

from data.locations import north_east_states

from modules.rate_engine.rate_engine_schema import (
    AddressClassificationModel,
    PaymentType,
    PlanModel,
    RateCalculationResult,
    RateOutcome,
    RateQuoteModel,
    RateRequestModel,
)
from modules.rate_engine.charge_calculator import ChargeCalculator
from modules.rate_engine.weight_normalizer import WeightNormalizer
from modules.rate_engine.zone_resolver import resolve_zone


MESSAGE_VALIDATION_ERROR = "Validation error occurred."
MESSAGE_NOT_SERVICEABLE = "Invalid or not serviceable pincode"
MESSAGE_NO_PLAN = "No plan assigned to user"
MESSAGE_NO_COURIERS = "No couriers available in plan"
MESSAGE_NO_SERVICEABLE_COURIER = "No serviceable couriers"
MESSAGE_SUCCESS = "Rates calculated successfully"


def is_valid_pincode(pincode: str) -> bool:
    return pincode.isascii() and pincode.isdigit() and len(pincode) == 6


def validate_rate_request(rate_request: RateRequestModel) -> List[str]:
    errors = []

    # NaN compares False against every bound below
    amounts = (
        rate_request.weight,
        rate_request.box_length,
        rate_request.box_width,
        rate_request.box_height,
        rate_request.collectable_amount,
    )
    if any(value is not None and not math.isfinite(value) for value in amounts):
        errors.append("Weight, box dimensions and collectable amount must be finite numbers")

    if rate_request.weight <= 0:
        errors.append("Weight must be greater than 0")

    if (
        rate_request.box_length <= 0
        or rate_request.box_width <= 0
        or rate_request.box_height <= 0
    ):
        errors.append("Box dimensions must be greater than 0")

    if rate_request.payment_type not in (PaymentType.PREPAID, PaymentType.COD):
        errors.append("Payment type must be 0 (prepaid) or 1 (COD)")

    if rate_request.payment_type == PaymentType.COD and (
        rate_request.collectable_amount is None or rate_request.collectable_amount < 0
    ):
        errors.append("Collectable amount is required for COD and cannot be negative")

    for pincode in (rate_request.pickup_pincode, rate_request.delivery_pincode):
        if not is_valid_pincode(pincode):
            errors.append("Pickup and delivery pincodes must be 6 digit numbers")
            break

    return errors


class RateEngineService:
    """
    Quotes a shipment across every courier in a plan.

    Collaborators are injected:
        pincode_classifier: `async classify(pincode) -> AddressClassificationModel | None`
        plan_store: `async get_plan(plan_id)` and `async get_user_plan(user_id)`,
            both returning `PlanModel | None`
        clock: returns the current time, used for the pickup cutoff

    Business outcomes (invalid request, unknown pincode, no plan, nothing
    serviceable) come back as a `RateCalculationResult`. Errors raised by the
    collaborators propagate to the caller.
    """

    def __init__(
        self,
        pincode_classifier,
        plan_store=None,
        north_east: Iterable[str] = north_east_states,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.pincode_classifier = pincode_classifier
        self.plan_store = plan_store
        self.north_east = list(north_east)
        self.clock = clock

    @staticmethod
    def _result(
        outcome: RateOutcome,
        message: str,
        quotes: List[RateQuoteModel] = None,
        errors: List[str] = None,
    ) -> RateCalculationResult:
        return RateCalculationResult(
            outcome=outcome,
            message=message,
            quotes=quotes or [],
            errors=errors or [],
        )

    async def classify_addresses(self, rate_request: RateRequestModel):
        # no ordering dependency between the two lookups
        return await asyncio.gather(
            self.pincode_classifier.classify(rate_request.pickup_pincode),
            self.pincode_classifier.classify(rate_request.delivery_pincode),
        )

    async def calculate_rates(
        self, rate_request: RateRequestModel, plan: Optional[PlanModel]
    ) -> RateCalculationResult:
        errors = validate_rate_request(rate_request)
        if errors:
            return self._result(
                RateOutcome.VALIDATION_ERROR, MESSAGE_VALIDATION_ERROR, errors=errors
            )

        pickup, delivery = await self.classify_addresses(rate_request)
        if not pickup or not delivery:
            return self._result(RateOutcome.NOT_SERVICEABLE, MESSAGE_NOT_SERVICEABLE)

        return self.quote_plan(rate_request, plan, pickup, delivery)

    async def calculate_rates_for_user(
        self,
        rate_request: RateRequestModel,
        user_id,
        plan_id: Optional[int] = None,
    ) -> RateCalculationResult:
        """
        Quote against the user's plan, or against `plan_id` when given.
        """
        errors = validate_rate_request(rate_request)
        if errors:
            return self._result(
                RateOutcome.VALIDATION_ERROR, MESSAGE_VALIDATION_ERROR, errors=errors
            )

        pickup, delivery = await self.classify_addresses(rate_request)
        if not pickup or not delivery:
            return self._result(RateOutcome.NOT_SERVICEABLE, MESSAGE_NOT_SERVICEABLE)

        if plan_id is not None:
            plan = await self.plan_store.get_plan(plan_id)
        else:
            plan = await self.plan_store.get_user_plan(user_id)

        return self.quote_plan(rate_request, plan, pickup, delivery)

    def quote_plan(
        self,
        rate_request: RateRequestModel,
        plan: Optional[PlanModel],
        pickup: AddressClassificationModel,
        delivery: AddressClassificationModel,
    ) -> RateCalculationResult:
        if plan is None:
            return self._result(RateOutcome.NO_PLAN, MESSAGE_NO_PLAN)

        if not plan.courier_pricings:
            return self._result(RateOutcome.NO_COURIERS, MESSAGE_NO_COURIERS)

        zone = resolve_zone(pickup, delivery, self.north_east)
        # one instant for every courier in this request
        now = self.clock() if self.clock else None

        logger.info(
            extra=context_user_data.get(),
            msg=f"Quoting plan {plan.id} for {pickup.pincode} -> {delivery.pincode} in {zone.value}",
        )

        quotes = []
        for courier_pricing in plan.courier_pricings:
            courier = courier_pricing.courier

            if not courier.is_active:
                continue

            if courier.is_reversed_courier != bool(rate_request.is_reversed_order):
                continue

            pricing_errors = ChargeCalculator.validate_courier_pricing(courier_pricing)
            if pricing_errors:
                logger.warning(
                    extra=context_user_data.get(),
                    msg=f"Skipping courier {courier.name}: {', '.join(pricing_errors)}",
                )
                continue

            normalized_weight = WeightNormalizer.normalize_weight(
                rate_request, courier_pricing
            )
            quote = ChargeCalculator.calculate_charge(
                normalized_weight, zone, courier_pricing, rate_request, now
            )
            if quote is None:
                continue

            quotes.append(quote)

        if not quotes:
            return self._result(
                RateOutcome.NO_SERVICEABLE_COURIER, MESSAGE_NO_SERVICEABLE_COURIER
            )

        return self._result(RateOutcome.SUCCESS, MESSAGE_SUCCESS, quotes=quotes)
