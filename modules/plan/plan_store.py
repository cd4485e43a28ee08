import asyncio
from typing import Optional

from sqlalchemy.orm import Session, selectinload

from context_manager.context import context_user_data
from logger import logger

# schema
from modules.rate_engine.rate_engine_schema import PlanModel

# models
from models import Plan, Plan_Courier_Pricing, User


class PlanStore:
    """
    Read side of plans, as the rate engine consumes them.

    Each read opens its own session from `session_factory` and runs in the
    default executor.
    """

    def __init__(self, session_factory):
        self.session_factory = session_factory

    @staticmethod
    def _plan_query(db: Session):
        return db.query(Plan).options(
            selectinload(Plan.courier_pricings).selectinload(
                Plan_Courier_Pricing.zone_pricing
            ),
            selectinload(Plan.courier_pricings).joinedload(
                Plan_Courier_Pricing.courier
            ),
        )

    @staticmethod
    def fetch_plan(db: Session, plan_id) -> Optional[PlanModel]:
        plan = (
            PlanStore._plan_query(db)
            .filter(Plan.id == plan_id, Plan.is_deleted.is_(False))
            .first()
        )
        return PlanModel.model_validate(plan) if plan else None

    @staticmethod
    def fetch_default_plan(db: Session) -> Optional[PlanModel]:
        plan = (
            PlanStore._plan_query(db)
            .filter(Plan.is_default.is_(True), Plan.is_deleted.is_(False))
            .order_by(Plan.id)
            .first()
        )
        return PlanModel.model_validate(plan) if plan else None

    @staticmethod
    def fetch_user_plan(db: Session, user_id) -> Optional[PlanModel]:
        """The user's plan, falling back to the default plan."""
        user = None
        if user_id is not None and str(user_id).isascii() and str(user_id).isdigit():
            user = (
                db.query(User)
                .filter(User.id == int(user_id), User.is_deleted.is_(False))
                .first()
            )

        if user and user.plan_id:
            plan = PlanStore.fetch_plan(db, user.plan_id)
            if plan:
                return plan

        logger.info(
            extra=context_user_data.get(),
            msg=f"No plan assigned to user {user_id}, using default plan",
        )
        return PlanStore.fetch_default_plan(db)

    def _run(self, fetch, *args):
        db: Session = self.session_factory()
        try:
            return fetch(db, *args)
        finally:
            db.close()

    async def get_plan(self, plan_id) -> Optional[PlanModel]:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._run, self.fetch_plan, plan_id)

    async def get_user_plan(self, user_id) -> Optional[PlanModel]:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None, self._run, self.fetch_user_plan, user_id
        )
