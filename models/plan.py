from sqlalchemy import Column, String, Boolean, JSON
from sqlalchemy.orm import relationship

from database import DBBaseClass, DBBase


class Plan(DBBase, DBBaseClass):
    __tablename__ = "plan"

    name = Column(String(100), nullable=False)
    code = Column(String(50), nullable=False, unique=True)
    description = Column(String(500), nullable=True)
    is_default = Column(Boolean, nullable=False, default=False, index=True)
    features = Column(JSON, nullable=False, default=list)

    # insertion order is the quoting order
    courier_pricings = relationship(
        "Plan_Courier_Pricing",
        back_populates="plan",
        cascade="all, delete-orphan",
        order_by="Plan_Courier_Pricing.id",
    )
    users = relationship("User", back_populates="plan")
