"""
One-way migration of the historical named-zone pricing shape.

Older plans stored zone pricing as a dict keyed by named zones with camelCase
fields:

    {"withinCity": {"basePrice": 30, "incrementPrice": 10, "isRTOSameAsFW": true}, ...}

Everything downstream works with lettered zone rows (Z_A .. Z_E). Input in the
old shape is converted on the way in and never stored.
"""

from typing import Dict, List


LEGACY_ZONE_KEYS = {
    "withinCity": "Z_A",
    "withinZone": "Z_B",
    "withinMetro": "Z_C",
    "withinRoi": "Z_D",
    "northEast": "Z_E",
}

LEGACY_COURIER_FIELDS = {
    "courierId": "courier_id",
    "weightSlab": "weight_slab",
    "incrementWeight": "increment_weight",
    "incrementPrice": "increment_price",
    "codChargeHard": "cod_charge_hard",
    "codChargePercent": "cod_charge_percent",
}


def is_legacy_courier_pricing(data) -> bool:
    return isinstance(data, dict) and isinstance(data.get("zonePricing"), dict)


def migrate_legacy_zone_pricing(zone_pricing: Dict[str, dict]) -> List[dict]:
    """
    Convert named zones to lettered zone rows, in Z_A .. Z_E order.

    Unknown keys raise ValueError. Zones absent from the input stay absent,
    the courier then simply cannot quote for them.
    """
    unknown = set(zone_pricing) - set(LEGACY_ZONE_KEYS)
    if unknown:
        raise ValueError(f"Unknown legacy zone keys: {sorted(unknown)}")

    rows = []
    for legacy_key, zone in LEGACY_ZONE_KEYS.items():
        pricing = zone_pricing.get(legacy_key)
        if pricing is None:
            continue

        # older records omit the flag, it meant "same as forward"
        is_rto_same_as_fw = pricing.get("isRTOSameAsFW")
        rows.append(
            {
                "zone": zone,
                "base_price": pricing.get("basePrice", 0) or 0,
                "increment_price": pricing.get("incrementPrice", 0) or 0,
                "is_rto_same_as_fw": True
                if is_rto_same_as_fw is None
                else bool(is_rto_same_as_fw),
                "rto_base_price": pricing.get("rtoBasePrice", 0) or 0,
                "rto_increment_price": pricing.get("rtoIncrementPrice", 0) or 0,
            }
        )
    return rows


def migrate_legacy_courier_pricing(data: dict) -> dict:
    migrated = {
        LEGACY_COURIER_FIELDS.get(key, key): value
        for key, value in data.items()
        if key not in ("zonePricing", "basePrice")
    }
    migrated["zone_pricing"] = migrate_legacy_zone_pricing(data["zonePricing"])
    return migrated
