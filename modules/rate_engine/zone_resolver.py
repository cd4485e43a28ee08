from typing import Iterable, Optional

from data.locations import north_east_states, zone_names
from modules.rate_engine.rate_engine_schema import (
    AddressClassificationModel,
    AddressRelationship,
    ZoneLabel,
)


ZONE_BY_RELATIONSHIP = {
    AddressRelationship.SAME_CITY: ZoneLabel.Z_A,
    AddressRelationship.SAME_STATE: ZoneLabel.Z_B,
    AddressRelationship.METRO_TO_METRO: ZoneLabel.Z_C,
    AddressRelationship.NORTH_EAST: ZoneLabel.Z_E,
    AddressRelationship.REST_OF_INDIA: ZoneLabel.Z_D,
}


def _normalize(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def classify_relationship(
    pickup: AddressClassificationModel,
    delivery: AddressClassificationModel,
    north_east: Iterable[str] = north_east_states,
) -> AddressRelationship:
    """
    Relationship between two addresses, first match wins.

    The north-east check runs after the metro check: a metro pair where one
    side sits in a north-east state is still metro-to-metro.
    """
    north_east = {_normalize(state) for state in north_east}

    # For A Zone -> Same city (district)
    if _normalize(pickup.district) == _normalize(delivery.district):
        return AddressRelationship.SAME_CITY

    # For B Zone -> Same state
    if _normalize(pickup.state) == _normalize(delivery.state):
        return AddressRelationship.SAME_STATE

    # For C Zone -> Metro to Metro
    if pickup.is_metro and delivery.is_metro:
        return AddressRelationship.METRO_TO_METRO

    # For E Zone -> North East
    if (
        _normalize(pickup.state) in north_east
        or _normalize(delivery.state) in north_east
    ):
        return AddressRelationship.NORTH_EAST

    return AddressRelationship.REST_OF_INDIA


def resolve_zone(
    pickup: AddressClassificationModel,
    delivery: AddressClassificationModel,
    north_east: Iterable[str] = north_east_states,
) -> ZoneLabel:
    return ZONE_BY_RELATIONSHIP[classify_relationship(pickup, delivery, north_east)]


def get_zone_name(zone: ZoneLabel) -> str:
    return zone_names[ZoneLabel(zone).value]
