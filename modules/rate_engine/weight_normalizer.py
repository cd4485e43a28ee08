"""
Weight Normalizer

Reconciles actual weight, volumetric weight and the courier's minimum billable
weight into the single weight the charge calculator bills on.

All weights are fractional kilograms. The only rounding step is the
volumetric weight, which is rounded half-up to a whole kilogram.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict

from modules.rate_engine.rate_engine_schema import (
    CourierPricingModel,
    RateRequestModel,
    SizeUnit,
    WeightUnit,
)


@dataclass(frozen=True)
class NormalizedWeight:
    """Result of weight normalization for one courier"""

    actual_weight: Decimal
    volumetric_weight: Decimal
    final_weight: Decimal
    min_weight: Decimal

    def to_dict(self) -> Dict[str, float]:
        return {
            "actual_weight": float(self.actual_weight),
            "volumetric_weight": float(self.volumetric_weight),
            "final_weight": float(self.final_weight),
            "min_weight": float(self.min_weight),
        }


class WeightNormalizer:
    """
    Usage:
        normalized = WeightNormalizer.normalize_weight(rate_request, courier_pricing)
        normalized.final_weight
    """

    # Industry standard volumetric divisors: cm³ / 5000 and in³ / 5 give kilograms
    VOLUMETRIC_DIVISOR_CM = Decimal("5000")
    VOLUMETRIC_DIVISOR_INCH = Decimal("5")

    GRAMS_PER_KG = Decimal("1000")

    @staticmethod
    def _to_decimal(value) -> Decimal:
        return Decimal(str(value or 0))

    @classmethod
    def to_kilograms(cls, weight: float, weight_unit: WeightUnit) -> Decimal:
        """
        Convert weight to kilograms.

        Args:
            weight: Weight in `weight_unit`
            weight_unit: kg or g

        Returns:
            Weight in kg, unrounded
        """
        weight = cls._to_decimal(weight)
        if WeightUnit(weight_unit) == WeightUnit.G:
            return weight / cls.GRAMS_PER_KG
        return weight

    @classmethod
    def calculate_volumetric_weight(
        cls,
        length: float,
        width: float,
        height: float,
        size_unit: SizeUnit = SizeUnit.CM,
    ) -> Decimal:
        """
        Calculate volumetric weight.

        Formula: round_half_up(L × W × H / divisor), divisor 5000 for cm, 5 for inch

        Returns:
            Volumetric weight in whole kilograms
        """
        volume = (
            cls._to_decimal(length) * cls._to_decimal(width) * cls._to_decimal(height)
        )
        divisor = (
            cls.VOLUMETRIC_DIVISOR_INCH
            if SizeUnit(size_unit) == SizeUnit.INCH
            else cls.VOLUMETRIC_DIVISOR_CM
        )
        return (volume / divisor).quantize(Decimal("1"), rounding=ROUND_HALF_UP)

    @classmethod
    def normalize_weight(
        cls,
        rate_request: RateRequestModel,
        courier_pricing: CourierPricingModel,
    ) -> NormalizedWeight:
        """
        Final weight is the larger of volumetric and actual weight, never below
        the courier's weight slab.
        """
        actual_weight = cls.to_kilograms(rate_request.weight, rate_request.weight_unit)
        volumetric_weight = cls.calculate_volumetric_weight(
            rate_request.box_length,
            rate_request.box_width,
            rate_request.box_height,
            rate_request.size_unit,
        )
        min_weight = cls._to_decimal(courier_pricing.weight_slab)

        final_weight = max(volumetric_weight, actual_weight)
        if final_weight < min_weight:
            final_weight = min_weight

        return NormalizedWeight(
            actual_weight=actual_weight,
            volumetric_weight=volumetric_weight,
            final_weight=final_weight,
            min_weight=min_weight,
        )
