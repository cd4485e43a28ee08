from sqlalchemy import (
    Column,
    Integer,
    Boolean,
    Numeric,
    ForeignKey,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from database import DBBaseClass, DBBase


class Plan_Courier_Pricing(DBBase, DBBaseClass):
    __tablename__ = "plan_courier_pricing"

    plan_id = Column(Integer, ForeignKey("plan.id"), nullable=False, index=True)
    courier_id = Column(Integer, ForeignKey("courier.id"), nullable=False)

    plan = relationship("Plan", back_populates="courier_pricings")
    courier = relationship("Courier", lazy="joined")

    # minimum chargeable weight and the step billed above it (kg)
    weight_slab = Column(Numeric(10, 3), nullable=False)
    increment_weight = Column(Numeric(10, 3), nullable=False)
    increment_price = Column(Numeric(10, 2), nullable=False, default=0)

    cod_charge_hard = Column(Numeric(10, 2), nullable=False, default=0)
    cod_charge_percent = Column(Numeric(5, 2), nullable=False, default=0)

    is_cod_applicable = Column(Boolean, nullable=False, default=True)
    is_rto_applicable = Column(Boolean, nullable=False, default=True)
    is_fw_applicable = Column(Boolean, nullable=False, default=True)
    is_cod_reversal_applicable = Column(Boolean, nullable=False, default=False)

    zone_pricing = relationship(
        "Zone_Pricing",
        back_populates="plan_courier_pricing",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="Zone_Pricing.zone",
    )

    __table_args__ = (
        UniqueConstraint("plan_id", "courier_id", name="uq_plan_courier"),
    )
