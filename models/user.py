from sqlalchemy import Column, String, Integer, ForeignKey
from sqlalchemy.orm import relationship

from database import DBBaseClass, DBBase


class User(DBBase, DBBaseClass):
    __tablename__ = "user"

    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True)

    # no plan means the default plan applies
    plan_id = Column(Integer, ForeignKey("plan.id"), nullable=True, index=True)
    plan = relationship("Plan", back_populates="users")
