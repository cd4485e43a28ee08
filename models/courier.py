from sqlalchemy import Column, String, Boolean, Numeric, UniqueConstraint

from database import DBBaseClass, DBBase


class Courier(DBBase, DBBaseClass):
    __tablename__ = "courier"

    name = Column(String(255), nullable=False)
    code = Column(String(50), nullable=False)
    courier_code = Column(String(50), nullable=True)

    # SURFACE / AIR
    type = Column(String(50), nullable=True)

    is_active = Column(Boolean, nullable=False, default=True)
    is_reversed_courier = Column(Boolean, nullable=False, default=False)
    recommended = Column(Boolean, nullable=False, default=False)

    # daily pickup cutoff, "HH:MM:SS" in IST
    pickup_time = Column(String(8), nullable=True)

    weight_slab = Column(Numeric(10, 3), nullable=False, default=0.5)
    weight_unit = Column(String(5), nullable=False, default="kg")
    increment_weight = Column(Numeric(10, 3), nullable=False, default=0.5)

    cod_charge_hard = Column(Numeric(10, 2), nullable=False, default=40)
    cod_charge_percent = Column(Numeric(5, 2), nullable=False, default=1.5)

    __table_args__ = (
        UniqueConstraint("code", "name", "weight_slab", name="uq_courier_code_name_slab"),
    )
