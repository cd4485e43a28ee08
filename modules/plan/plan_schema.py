from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List

from modules.rate_engine.rate_engine_schema import ZoneLabel
from modules.plan.plan_migration import (
    is_legacy_courier_pricing,
    migrate_legacy_courier_pricing,
)


class ZonePricingInsertModel(BaseModel):
    zone: ZoneLabel
    base_price: float = Field(ge=0)
    increment_price: float = Field(ge=0)
    is_rto_same_as_fw: bool = True
    rto_base_price: float = Field(default=0, ge=0)
    rto_increment_price: float = Field(default=0, ge=0)
    flat_rto_charge: float = Field(default=0, ge=0)


class CourierPricingInsertModel(BaseModel):
    courier_id: int
    weight_slab: float = Field(ge=0)
    increment_weight: float = Field(ge=0.1)
    increment_price: float = Field(default=0, ge=0)
    cod_charge_hard: float = Field(default=0, ge=0)
    cod_charge_percent: float = Field(default=0, ge=0, le=100)
    is_cod_applicable: bool = True
    is_rto_applicable: bool = True
    is_fw_applicable: bool = True
    is_cod_reversal_applicable: bool = False
    zone_pricing: List[ZonePricingInsertModel]

    @model_validator(mode="before")
    @classmethod
    def migrate_legacy_shape(cls, data):
        if is_legacy_courier_pricing(data):
            return migrate_legacy_courier_pricing(data)
        return data

    @field_validator("zone_pricing")
    @classmethod
    def one_row_per_zone(cls, zone_pricing):
        zones = [row.zone for row in zone_pricing]
        if len(zones) != len(set(zones)):
            raise ValueError("Zone pricing must not repeat a zone")
        return zone_pricing


class PlanInsertModel(BaseModel):
    name: str = Field(min_length=3, max_length=100)
    description: Optional[str] = Field(default="", max_length=500)
    is_default: bool = False
    features: List[str] = []
    courier_pricings: List[CourierPricingInsertModel] = []


class PlanUpdateModel(BaseModel):
    name: Optional[str] = Field(default=None, min_length=3, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    is_default: Optional[bool] = None
    features: Optional[List[str]] = None
    # when given, replaces every courier pricing of the plan
    courier_pricings: Optional[List[CourierPricingInsertModel]] = None
