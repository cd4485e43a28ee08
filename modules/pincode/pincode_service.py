import asyncio
import http
from typing import Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from context_manager.context import context_user_data
from logger import logger

from data.locations import metro_cities

# schema
from schema.base import GenericResponseModel
from modules.pincode.pincode_schema import PincodeDetailsResponseModel
from modules.rate_engine.rate_engine_schema import AddressClassificationModel

# models
from models import Pincode_Mapping


class PincodeService:
    """
    Pincode classifier backed by the pincode_mapping table.

    Lookups are blocking SQLAlchemy queries, each runs on its own session in
    the default executor so concurrent classifications don't share a session.
    """

    def __init__(self, session_factory, metro: Iterable[str] = metro_cities):
        self.session_factory = session_factory
        self.metro = {city.strip().lower() for city in metro}

    @staticmethod
    def parse_pincode(pincode) -> Optional[int]:
        value = str(pincode).strip() if pincode is not None else ""
        if not (value.isascii() and value.isdigit()):
            return None
        return int(value)

    def get_pincode_record(self, pincode: int):
        db: Session = self.session_factory()
        try:
            # the unique index on pincode keeps this an index-only scan
            return (
                db.query(
                    Pincode_Mapping.pincode,
                    Pincode_Mapping.city,
                    Pincode_Mapping.state,
                    Pincode_Mapping.district,
                )
                .filter(
                    Pincode_Mapping.pincode == pincode,
                    Pincode_Mapping.is_deleted.is_(False),
                )
                .first()
            )
        finally:
            db.close()

    def to_classification(self, record) -> AddressClassificationModel:
        city = (record.city or "").strip().lower()
        return AddressClassificationModel(
            pincode=record.pincode,
            city=city,
            state=(record.state or "").strip().lower(),
            district=(record.district or city).strip().lower(),
            is_metro=city in self.metro,
        )

    def classify_sync(self, pincode) -> Optional[AddressClassificationModel]:
        parsed = self.parse_pincode(pincode)
        if parsed is None:
            return None

        record = self.get_pincode_record(parsed)
        if not record:
            logger.info(
                extra=context_user_data.get(),
                msg=f"Pincode {parsed} not found in pincode mapping",
            )
            return None

        return self.to_classification(record)

    async def classify(self, pincode) -> Optional[AddressClassificationModel]:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.classify_sync, pincode)

    async def get_pincode_details(self, pincode: int) -> GenericResponseModel:

        try:
            loop = asyncio.get_running_loop()
            pincode_data = await loop.run_in_executor(
                None, self.get_pincode_record, pincode
            )

            if not pincode_data:
                return GenericResponseModel(
                    status_code=http.HTTPStatus.NOT_FOUND,
                    status=False,
                    message="Pincode not found",
                )

            response_data = PincodeDetailsResponseModel(
                pincode=pincode_data.pincode,
                city=pincode_data.city,
                state=pincode_data.state,
                district=pincode_data.district or pincode_data.city,
            )

            return GenericResponseModel(
                status_code=http.HTTPStatus.OK,
                status=True,
                data=response_data,
                message="Pincode data fetched successfully",
            )

        except SQLAlchemyError as e:
            logger.error(
                extra=context_user_data.get(),
                msg="Error fetching pincode details: {}".format(str(e)),
            )

            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="Could not fetch pincode details",
            )
