from enum import Enum, IntEnum
from typing import Optional, List

from pydantic import BaseModel, ConfigDict, field_validator


class ZoneLabel(str, Enum):
    Z_A = "Z_A"
    Z_B = "Z_B"
    Z_C = "Z_C"
    Z_D = "Z_D"
    Z_E = "Z_E"


class AddressRelationship(str, Enum):
    SAME_CITY = "same_city"
    SAME_STATE = "same_state"
    METRO_TO_METRO = "metro_to_metro"
    NORTH_EAST = "north_east"
    REST_OF_INDIA = "rest_of_india"


class PaymentType(IntEnum):
    PREPAID = 0
    COD = 1


class WeightUnit(str, Enum):
    KG = "kg"
    G = "g"


class SizeUnit(str, Enum):
    CM = "cm"
    INCH = "in"


class AddressClassificationModel(BaseModel):
    pincode: int
    city: str
    state: str
    district: str
    is_metro: bool = False

    model_config = ConfigDict(frozen=True)


class ZonePricingModel(BaseModel):
    zone: ZoneLabel
    base_price: float = 0
    increment_price: float = 0
    is_rto_same_as_fw: bool = True
    rto_base_price: float = 0
    rto_increment_price: float = 0
    flat_rto_charge: float = 0

    model_config = ConfigDict(from_attributes=True)


class CourierModel(BaseModel):
    id: int
    name: str
    code: Optional[str] = None
    courier_code: Optional[str] = None
    type: Optional[str] = None
    is_active: bool = True
    is_reversed_courier: bool = False
    recommended: bool = False
    pickup_time: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class CourierPricingModel(BaseModel):
    courier_id: int
    courier: CourierModel
    weight_slab: float
    increment_weight: float
    increment_price: float = 0
    cod_charge_hard: float = 0
    cod_charge_percent: float = 0
    is_cod_applicable: bool = True
    is_rto_applicable: bool = True
    is_fw_applicable: bool = True
    is_cod_reversal_applicable: bool = False
    zone_pricing: List[ZonePricingModel] = []

    model_config = ConfigDict(from_attributes=True)

    def get_zone_pricing(self, zone: ZoneLabel) -> Optional[ZonePricingModel]:
        for zone_pricing in self.zone_pricing:
            if zone_pricing.zone == zone:
                return zone_pricing
        return None


class PlanModel(BaseModel):
    id: int
    name: str
    code: Optional[str] = None
    description: Optional[str] = None
    is_default: bool = False
    features: List[str] = []
    courier_pricings: List[CourierPricingModel] = []

    model_config = ConfigDict(from_attributes=True)


class RateRequestModel(BaseModel):
    pickup_pincode: str
    delivery_pincode: str
    weight: float
    weight_unit: WeightUnit = WeightUnit.KG
    box_length: float
    box_width: float
    box_height: float
    size_unit: SizeUnit = SizeUnit.CM
    # kept as a plain int so an unknown payment type reaches the engine's validation
    payment_type: int
    collectable_amount: Optional[float] = None
    is_reversed_order: bool = False

    @field_validator("pickup_pincode", "delivery_pincode", mode="before")
    @classmethod
    def pincode_as_string(cls, value):
        if value is None:
            return ""
        return str(value).strip()

    @field_validator("size_unit", mode="before")
    @classmethod
    def accept_inch_alias(cls, value):
        if isinstance(value, str) and value.strip().lower() in ("inch", "inches"):
            return SizeUnit.INCH
        return value


class PriceBreakdownModel(BaseModel):
    actual_weight: float
    volumetric_weight: float
    chargeable_weight: float
    min_weight: float
    weight_increment_ratio: int


class RateQuoteModel(BaseModel):
    courier_id: int
    courier_name: str
    courier_code: Optional[str] = None
    courier_type: Optional[str] = None
    zone: ZoneLabel
    zone_name: str
    final_weight: float
    volumetric_weight: float
    base_price: float
    weight_charges: float
    cod_charges: float
    rto_charges: float
    fw_charges: float
    total_price: float
    expected_pickup: str
    is_reversed_courier: bool
    is_cod_applicable: bool = True
    is_rto_applicable: bool = True
    recommended: bool = False
    breakdown: PriceBreakdownModel


class RateOutcome(str, Enum):
    SUCCESS = "success"
    VALIDATION_ERROR = "validation_error"
    NOT_SERVICEABLE = "not_serviceable"
    NO_PLAN = "no_plan"
    NO_COURIERS = "no_couriers"
    NO_SERVICEABLE_COURIER = "no_serviceable_courier"


class RateCalculationResult(BaseModel):
    outcome: RateOutcome
    quotes: List[RateQuoteModel] = []
    message: Optional[str] = None
    errors: List[str] = []

    @property
    def is_success(self) -> bool:
        return self.outcome == RateOutcome.SUCCESS


class RateFiltersModel(BaseModel):
    max_price: Optional[float] = None
    min_price: Optional[float] = None
    courier_type: Optional[str] = None
    cod_supported: Optional[bool] = None
    rto_supported: Optional[bool] = None
    zone: Optional[ZoneLabel] = None
    exclude_courier_ids: List[int] = []


class PriceRangeModel(BaseModel):
    min: float = 0
    max: float = 0


class PriceSummaryModel(BaseModel):
    total_couriers: int = 0
    serviceable: int = 0
    cheapest: Optional[RateQuoteModel] = None
    most_expensive: Optional[RateQuoteModel] = None
    average_price: float = 0
    price_range: PriceRangeModel = PriceRangeModel()
