import http
import uuid
from typing import List

from sqlalchemy.exc import SQLAlchemyError

from context_manager.context import context_user_data, get_db_session

from logger import logger

# models
from models import Courier, Plan, Plan_Courier_Pricing, Zone_Pricing, User

# schema
from schema.base import GenericResponseModel
from modules.rate_engine.rate_engine_schema import PlanModel
from .plan_schema import (
    CourierPricingInsertModel,
    PlanInsertModel,
    PlanUpdateModel,
)

# service
from .plan_store import PlanStore


class PlanService:
    """Admin side of plans: create, read, update, delete and user assignment"""

    @staticmethod
    def generate_plan_code() -> str:
        return f"PL-{uuid.uuid4().hex[:10].upper()}"

    @staticmethod
    def _clear_other_defaults(db, plan_id: int = None):
        query = db.query(Plan).filter(
            Plan.is_default.is_(True), Plan.is_deleted.is_(False)
        )
        if plan_id is not None:
            query = query.filter(Plan.id != plan_id)

        for plan in query.all():
            plan.is_default = False

    @staticmethod
    def _build_courier_pricings(
        db, courier_pricings: List[CourierPricingInsertModel]
    ) -> List[Plan_Courier_Pricing]:
        """
        Turn validated courier pricing input into ORM rows.
        Raises ValueError for an unknown courier or a courier listed twice.
        """
        courier_ids = [pricing.courier_id for pricing in courier_pricings]
        if len(courier_ids) != len(set(courier_ids)):
            raise ValueError("A courier can only be priced once per plan")

        known_ids = {
            courier_id
            for (courier_id,) in db.query(Courier.id).filter(
                Courier.id.in_(courier_ids), Courier.is_deleted.is_(False)
            )
        }
        missing = [cid for cid in courier_ids if cid not in known_ids]
        if missing:
            raise ValueError(f"Couriers not found: {missing}")

        rows = []
        for pricing in courier_pricings:
            row = Plan_Courier_Pricing(
                **pricing.model_dump(exclude={"zone_pricing"}),
            )
            row.zone_pricing = [
                Zone_Pricing(
                    **zone_pricing.model_dump(exclude={"zone"}),
                    zone=zone_pricing.zone.value,
                )
                for zone_pricing in pricing.zone_pricing
            ]
            rows.append(row)
        return rows

    @staticmethod
    def _plan_response(db, plan_id: int) -> dict:
        # re-read through the store so responses match what the engine sees
        db.expire_all()
        plan: PlanModel = PlanStore.fetch_plan(db, plan_id)
        return plan.model_dump(mode="json") if plan else None

    @staticmethod
    def get_all_plans() -> GenericResponseModel:
        try:
            db = get_db_session()

            plans = (
                db.query(Plan)
                .filter(Plan.is_deleted.is_(False))
                .order_by(Plan.id)
                .all()
            )

            data = [
                {
                    "id": plan.id,
                    "name": plan.name,
                    "code": plan.code,
                    "description": plan.description,
                    "is_default": plan.is_default,
                    "features": plan.features or [],
                    "courier_count": len(plan.courier_pricings),
                }
                for plan in plans
            ]

            return GenericResponseModel(
                status_code=http.HTTPStatus.OK,
                status=True,
                message="Plans fetched successfully",
                data=data,
            )

        except SQLAlchemyError as e:
            logger.error(
                extra=context_user_data.get(),
                msg=f"Error fetching plans: {str(e)}",
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="An error occurred while fetching the plans.",
            )

    @staticmethod
    def get_plan(plan_id: int) -> GenericResponseModel:
        try:
            db = get_db_session()

            plan = PlanStore.fetch_plan(db, plan_id)
            if plan is None:
                return GenericResponseModel(
                    status_code=http.HTTPStatus.NOT_FOUND,
                    message="Plan not found",
                )

            return GenericResponseModel(
                status_code=http.HTTPStatus.OK,
                status=True,
                message="Plan fetched successfully",
                data=plan.model_dump(mode="json"),
            )

        except SQLAlchemyError as e:
            logger.error(
                extra=context_user_data.get(),
                msg=f"Error fetching plan {plan_id}: {str(e)}",
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="An error occurred while fetching the plan.",
            )

    @staticmethod
    def create_plan(plan_data: PlanInsertModel) -> GenericResponseModel:
        try:
            db = get_db_session()

            existing_plan = (
                db.query(Plan)
                .filter(Plan.name == plan_data.name, Plan.is_deleted.is_(False))
                .first()
            )
            if existing_plan:
                return GenericResponseModel(
                    status_code=http.HTTPStatus.CONFLICT,
                    message="A plan with this name already exists",
                    data={"code": existing_plan.code},
                )

            try:
                courier_pricings = PlanService._build_courier_pricings(
                    db, plan_data.courier_pricings
                )
            except ValueError as e:
                return GenericResponseModel(
                    status_code=http.HTTPStatus.BAD_REQUEST,
                    message=str(e),
                )

            if plan_data.is_default:
                PlanService._clear_other_defaults(db)

            plan = Plan(
                name=plan_data.name,
                code=PlanService.generate_plan_code(),
                description=plan_data.description,
                is_default=plan_data.is_default,
                features=plan_data.features,
            )
            plan.courier_pricings = courier_pricings
            db.add(plan)
            db.flush()

            logger.info(
                extra=context_user_data.get(),
                msg=f"Plan {plan.code} created with {len(courier_pricings)} couriers",
            )

            return GenericResponseModel(
                status_code=http.HTTPStatus.CREATED,
                status=True,
                message="Plan created successfully",
                data=PlanService._plan_response(db, plan.id),
            )

        except SQLAlchemyError as e:
            logger.error(
                extra=context_user_data.get(),
                msg=f"Error creating plan: {str(e)}",
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="An error occurred while creating the plan.",
            )

    @staticmethod
    def update_plan(plan_id: int, update_data: PlanUpdateModel) -> GenericResponseModel:
        try:
            db = get_db_session()

            plan = Plan.get_by_id(db, plan_id)
            if plan is None:
                return GenericResponseModel(
                    status_code=http.HTTPStatus.NOT_FOUND,
                    message="Plan not found",
                )

            fields = update_data.model_dump(
                exclude_unset=True, exclude={"courier_pricings"}
            )

            if update_data.courier_pricings is not None:
                try:
                    courier_pricings = PlanService._build_courier_pricings(
                        db, update_data.courier_pricings
                    )
                except ValueError as e:
                    return GenericResponseModel(
                        status_code=http.HTTPStatus.BAD_REQUEST,
                        message=str(e),
                    )

                # wholesale replacement, flush the orphans before re-inserting
                plan.courier_pricings = []
                db.flush()
                plan.courier_pricings = courier_pricings

            if fields.get("is_default"):
                PlanService._clear_other_defaults(db, plan_id=plan.id)

            for key, value in fields.items():
                if value is not None:
                    setattr(plan, key, value)

            db.flush()

            logger.info(
                extra=context_user_data.get(),
                msg=f"Plan {plan.code} updated",
            )

            return GenericResponseModel(
                status_code=http.HTTPStatus.OK,
                status=True,
                message="Plan updated successfully",
                data=PlanService._plan_response(db, plan.id),
            )

        except SQLAlchemyError as e:
            logger.error(
                extra=context_user_data.get(),
                msg=f"Error updating plan {plan_id}: {str(e)}",
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="An error occurred while updating the plan.",
            )

    @staticmethod
    def delete_plan(plan_id: int) -> GenericResponseModel:
        """Soft delete a plan. Refused while users are still on it."""
        try:
            db = get_db_session()

            plan = Plan.get_by_id(db, plan_id)
            if plan is None:
                return GenericResponseModel(
                    status_code=http.HTTPStatus.NOT_FOUND,
                    message="Plan not found",
                )

            assigned_users = (
                db.query(User)
                .filter(User.plan_id == plan.id, User.is_deleted.is_(False))
                .count()
            )
            if assigned_users:
                return GenericResponseModel(
                    status_code=http.HTTPStatus.BAD_REQUEST,
                    message=f"Plan is assigned to {assigned_users} users and cannot be deleted",
                )

            plan.soft_delete()
            plan.is_default = False
            db.flush()

            logger.info(
                extra=context_user_data.get(),
                msg=f"Plan {plan.code} deleted",
            )

            return GenericResponseModel(
                status_code=http.HTTPStatus.OK,
                status=True,
                message="Plan deleted successfully",
            )

        except SQLAlchemyError as e:
            logger.error(
                extra=context_user_data.get(),
                msg=f"Error deleting plan {plan_id}: {str(e)}",
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="An error occurred while deleting the plan.",
            )

    @staticmethod
    def assign_plan_to_user(plan_id: int, user_id: int) -> GenericResponseModel:
        try:
            db = get_db_session()

            plan = Plan.get_by_id(db, plan_id)
            if plan is None:
                return GenericResponseModel(
                    status_code=http.HTTPStatus.NOT_FOUND,
                    message="Plan not found",
                )

            user = User.get_by_id(db, user_id)
            if user is None:
                return GenericResponseModel(
                    status_code=http.HTTPStatus.NOT_FOUND,
                    message="User not found",
                )

            user.plan_id = plan.id
            db.flush()

            return GenericResponseModel(
                status_code=http.HTTPStatus.OK,
                status=True,
                message="Plan assigned successfully",
                data={"user_id": user.id, "plan_id": plan.id, "plan_code": plan.code},
            )

        except SQLAlchemyError as e:
            logger.error(
                extra=context_user_data.get(),
                msg=f"Error assigning plan {plan_id} to user {user_id}: {str(e)}",
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="An error occurred while assigning the plan.",
            )
