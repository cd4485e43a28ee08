from sqlalchemy import Column, String, Integer, Index

from database import DBBaseClass, DBBase


class Pincode_Mapping(DBBase, DBBaseClass):

    __tablename__ = "pincode_mapping"

    pincode = Column(Integer, nullable=False, unique=True)
    # city, state and district are stored in lowercase for case-insensitive comparisons
    city = Column(String(50), nullable=False)
    state = Column(String(50), nullable=False)
    # older pincode masters carry no district, the city stands in for it
    district = Column(String(50), nullable=True)

    # covering index, lookups by pincode never touch the table
    __table_args__ = (
        Index(
            "ix_pincode_mapping_pincode_city_state_district",
            "pincode",
            "city",
            "state",
            "district",
        ),
    )
