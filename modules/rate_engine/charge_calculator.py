"""
Charge Calculator

Turns a normalized weight, a resolved zone and one courier's pricing terms into
a full price breakdown: base, weight increments, COD, RTO and total.

Monetary arithmetic runs in Decimal and is converted to 2 decimal place floats
only when the quote is built.
"""

from datetime import datetime, time
from decimal import Decimal, ROUND_HALF_UP, ROUND_CEILING
from typing import Dict, List, Optional

from context_manager.context import context_user_data
from logger import logger

from modules.rate_engine.rate_engine_schema import (
    CourierPricingModel,
    PaymentType,
    PriceBreakdownModel,
    RateQuoteModel,
    RateRequestModel,
    ZoneLabel,
    ZonePricingModel,
)
from modules.rate_engine.weight_normalizer import NormalizedWeight
from modules.rate_engine.zone_resolver import get_zone_name

from utils.datetime import now_ist, parse_time_of_day, to_ist


PICKUP_TODAY = "Today"
PICKUP_TOMORROW = "Tomorrow"
# cutoff for couriers without a configured pickup time
DEFAULT_PICKUP_CUTOFF = time(12, 0, 0)


class ChargeCalculator:

    @staticmethod
    def _to_decimal(value) -> Decimal:
        if value is None:
            return Decimal("0")
        return Decimal(str(value))

    @staticmethod
    def _round_price(value: Decimal) -> float:
        return float(value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))

    @staticmethod
    def calculate_weight_increment_ratio(
        final_weight, weight_slab, increment_weight
    ) -> int:
        """
        Number of increment steps billed above the slab.

        Formula: ceil((final_weight - weight_slab) / increment_weight), never below 0
        """
        final_weight = ChargeCalculator._to_decimal(final_weight)
        weight_slab = ChargeCalculator._to_decimal(weight_slab)
        increment_weight = ChargeCalculator._to_decimal(increment_weight)

        if final_weight <= weight_slab:
            return 0

        steps = ((final_weight - weight_slab) / increment_weight).to_integral_value(
            rounding=ROUND_CEILING
        )
        return max(0, int(steps))

    @staticmethod
    def calculate_cod_charges(
        payment_type: int,
        collectable_amount,
        cod_charge_hard,
        cod_charge_percent,
        is_cod_applicable: bool,
    ) -> Decimal:
        """
        COD charge is the larger of the hard floor and the percentage of the
        collectable amount. Prepaid shipments and couriers without COD pay 0.
        """
        if payment_type != PaymentType.COD or not is_cod_applicable:
            return Decimal("0")

        percentage_charge = (
            ChargeCalculator._to_decimal(cod_charge_percent)
            * ChargeCalculator._to_decimal(collectable_amount)
            / Decimal("100")
        )
        return max(ChargeCalculator._to_decimal(cod_charge_hard), percentage_charge)

    @staticmethod
    def calculate_rto_charges(
        is_rto_applicable: bool,
        zone_pricing: ZonePricingModel,
        subtotal: Decimal,
        cod_charges: Decimal,
        weight_increment_ratio: int,
    ) -> Decimal:
        """
        Return-to-origin charge.

        Same-as-forward RTO mirrors the forward base and weight charge, a
        returned shipment collects no cash so COD is excluded. Otherwise the
        zone's own RTO tariff applies.
        """
        if not is_rto_applicable:
            return Decimal("0")

        if zone_pricing.is_rto_same_as_fw:
            return subtotal - cod_charges

        return ChargeCalculator._to_decimal(
            zone_pricing.rto_base_price
        ) + ChargeCalculator._to_decimal(zone_pricing.rto_increment_price) * Decimal(
            max(0, weight_increment_ratio)
        )

    @staticmethod
    def calculate_expected_pickup(
        pickup_time: Optional[str], now: Optional[datetime] = None
    ) -> str:
        """
        "Tomorrow" once today's pickup cutoff has passed, "Today" otherwise.
        Couriers without a usable cutoff are held to the 12:00 default.
        """
        try:
            cutoff = parse_time_of_day(pickup_time)
        except ValueError:
            logger.warning(
                extra=context_user_data.get(),
                msg=f"Invalid pickup cutoff '{pickup_time}', using {DEFAULT_PICKUP_CUTOFF}",
            )
            cutoff = None

        if cutoff is None:
            cutoff = DEFAULT_PICKUP_CUTOFF

        current = to_ist(now) if now is not None else now_ist()
        return PICKUP_TOMORROW if current.time() > cutoff else PICKUP_TODAY

    @staticmethod
    def calculate_excess_charges(
        weight_diff_kg,
        courier_pricing: CourierPricingModel,
        zone_pricing: ZonePricingModel,
    ) -> Dict[str, float]:
        """
        Extra forward and RTO charge for weight found above the declared weight,
        used when settling weight disputes.
        """
        weight_diff = ChargeCalculator._to_decimal(weight_diff_kg)
        if weight_diff <= 0:
            return {"fw_excess": 0.0, "rto_excess": 0.0}

        increments = ChargeCalculator.calculate_weight_increment_ratio(
            weight_diff, 0, courier_pricing.increment_weight
        )
        fw_excess = ChargeCalculator._to_decimal(
            zone_pricing.increment_price
        ) * Decimal(increments)

        rto_excess = Decimal("0")
        if courier_pricing.is_rto_applicable:
            if zone_pricing.is_rto_same_as_fw:
                rto_excess = fw_excess
            else:
                rto_excess = ChargeCalculator._to_decimal(
                    zone_pricing.rto_increment_price
                ) * Decimal(increments)

        return {
            "fw_excess": ChargeCalculator._round_price(fw_excess),
            "rto_excess": ChargeCalculator._round_price(rto_excess),
        }

    @staticmethod
    def validate_courier_pricing(courier_pricing: CourierPricingModel) -> List[str]:
        errors = []

        if not courier_pricing.courier_id or not courier_pricing.courier.name:
            errors.append("Courier ID and name are required")

        if courier_pricing.weight_slab < 0:
            errors.append("Weight slab cannot be negative")

        if courier_pricing.increment_weight <= 0:
            errors.append("Increment weight must be greater than 0")

        if not courier_pricing.zone_pricing:
            errors.append("Zone pricing is required")

        return errors

    @staticmethod
    def calculate_charge(
        normalized_weight: NormalizedWeight,
        zone: ZoneLabel,
        courier_pricing: CourierPricingModel,
        rate_request: RateRequestModel,
        now: Optional[datetime] = None,
    ) -> Optional[RateQuoteModel]:
        """
        Price one courier for one shipment.

        Returns None when the courier has no pricing for the zone, the caller
        filters it out.
        """
        zone_pricing = courier_pricing.get_zone_pricing(zone)
        if zone_pricing is None:
            return None

        to_decimal = ChargeCalculator._to_decimal
        round_price = ChargeCalculator._round_price

        weight_increment_ratio = ChargeCalculator.calculate_weight_increment_ratio(
            normalized_weight.final_weight,
            courier_pricing.weight_slab,
            courier_pricing.increment_weight,
        )

        base_price = to_decimal(zone_pricing.base_price)
        weight_charges = to_decimal(zone_pricing.increment_price) * Decimal(
            weight_increment_ratio
        )

        cod_charges = ChargeCalculator.calculate_cod_charges(
            payment_type=rate_request.payment_type,
            collectable_amount=rate_request.collectable_amount,
            cod_charge_hard=courier_pricing.cod_charge_hard,
            cod_charge_percent=courier_pricing.cod_charge_percent,
            is_cod_applicable=courier_pricing.is_cod_applicable,
        )

        subtotal = base_price + weight_charges + cod_charges

        rto_charges = ChargeCalculator.calculate_rto_charges(
            is_rto_applicable=courier_pricing.is_rto_applicable,
            zone_pricing=zone_pricing,
            subtotal=subtotal,
            cod_charges=cod_charges,
            weight_increment_ratio=weight_increment_ratio,
        )

        if courier_pricing.is_fw_applicable:
            fw_charges = base_price + weight_charges
            total_price = subtotal
        else:
            fw_charges = Decimal("0")
            total_price = Decimal("0")

        courier = courier_pricing.courier

        return RateQuoteModel(
            courier_id=courier_pricing.courier_id,
            courier_name=courier.name,
            courier_code=courier.courier_code,
            courier_type=courier.type,
            zone=zone,
            zone_name=get_zone_name(zone),
            final_weight=float(normalized_weight.final_weight),
            volumetric_weight=float(normalized_weight.volumetric_weight),
            base_price=round_price(base_price),
            weight_charges=round_price(weight_charges),
            cod_charges=round_price(cod_charges),
            rto_charges=round_price(rto_charges),
            fw_charges=round_price(fw_charges),
            total_price=round_price(total_price),
            expected_pickup=ChargeCalculator.calculate_expected_pickup(
                courier.pickup_time, now
            ),
            is_reversed_courier=courier.is_reversed_courier,
            is_cod_applicable=courier_pricing.is_cod_applicable,
            is_rto_applicable=courier_pricing.is_rto_applicable,
            recommended=courier.recommended,
            breakdown=PriceBreakdownModel(
                actual_weight=float(normalized_weight.actual_weight),
                volumetric_weight=float(normalized_weight.volumetric_weight),
                chargeable_weight=float(normalized_weight.final_weight),
                min_weight=float(normalized_weight.min_weight),
                weight_increment_ratio=weight_increment_ratio,
            ),
        )
