from sqlalchemy import (
    Column,
    String,
    Integer,
    Boolean,
    Numeric,
    ForeignKey,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from database import DBBaseClass, DBBase


class Zone_Pricing(DBBase, DBBaseClass):
    __tablename__ = "zone_pricing"

    plan_courier_pricing_id = Column(
        Integer, ForeignKey("plan_courier_pricing.id"), nullable=False, index=True
    )
    plan_courier_pricing = relationship(
        "Plan_Courier_Pricing", back_populates="zone_pricing"
    )

    # Z_A .. Z_E
    zone = Column(String(3), nullable=False)

    base_price = Column(Numeric(10, 2), nullable=False)
    increment_price = Column(Numeric(10, 2), nullable=False)

    is_rto_same_as_fw = Column(Boolean, nullable=False, default=True)
    rto_base_price = Column(Numeric(10, 2), nullable=False, default=0)
    rto_increment_price = Column(Numeric(10, 2), nullable=False, default=0)
    flat_rto_charge = Column(Numeric(10, 2), nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint("plan_courier_pricing_id", "zone", name="uq_pricing_zone"),
    )
