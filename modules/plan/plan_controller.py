import http
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request

from context_manager.context import context_user_data, get_user_data
from context_manager.dependencies import get_rate_engine_service

from logger import logger
from limiter import limiter, RATE_CALCULATOR_LIMIT

# schema
from schema.base import GenericResponseModel
from modules.rate_engine.rate_engine_schema import (
    RateCalculationResult,
    RateOutcome,
    RateRequestModel,
)
from .plan_schema import PlanInsertModel, PlanUpdateModel

# utils
from utils.response_handler import build_api_response
from modules.rate_engine.rate_result_utils import rank_quotes

# service
from modules.rate_engine.rate_engine_service import RateEngineService
from .plan_service import PlanService


plan_router = APIRouter(tags=["plans"], prefix="/plans")


def build_rate_response(
    result: RateCalculationResult, sort_by: Optional[str] = None
) -> GenericResponseModel:
    if result.outcome == RateOutcome.SUCCESS:
        return GenericResponseModel(
            status_code=http.HTTPStatus.OK,
            status=True,
            message=result.message,
            data=rank_quotes(result.quotes, sort_by),
        )

    if result.outcome == RateOutcome.VALIDATION_ERROR:
        return GenericResponseModel(
            status_code=http.HTTPStatus.UNPROCESSABLE_ENTITY,
            message=result.message,
            data={"errors": result.errors},
        )

    # not serviceable, no plan, nothing to quote
    return GenericResponseModel(
        status_code=http.HTTPStatus.OK,
        status=False,
        message=result.message,
        data=[],
    )


@plan_router.post(
    "/calculate-rates",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
@limiter.limit(RATE_CALCULATOR_LIMIT)
async def calculate_rates(
    request: Request,
    rate_request: RateRequestModel,
    plan_id: Optional[int] = Query(default=None),
    sort_by: Optional[str] = Query(
        default=None, description="price, recommended or pickup"
    ),
    rate_engine_service: RateEngineService = Depends(get_rate_engine_service),
):
    try:
        user_data = get_user_data()
        result = await rate_engine_service.calculate_rates_for_user(
            rate_request,
            user_id=user_data.user_id if user_data else None,
            plan_id=plan_id,
        )
        return build_api_response(build_rate_response(result, sort_by))

    except Exception as e:
        logger.error(
            extra=context_user_data.get(),
            msg=f"Error calculating rates: {str(e)}",
        )
        return build_api_response(
            GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="An error occurred while calculating the rates.",
            )
        )


@plan_router.get(
    "",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
async def get_plans():
    try:
        response: GenericResponseModel = PlanService.get_all_plans()
        return build_api_response(response)

    except Exception as e:
        return build_api_response(
            GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                data=str(e),
                message="An error occurred while fetching the plans.",
            )
        )


@plan_router.post(
    "",
    status_code=http.HTTPStatus.CREATED,
    response_model=GenericResponseModel,
)
async def create_plan(plan_data: PlanInsertModel):
    try:
        response: GenericResponseModel = PlanService.create_plan(plan_data=plan_data)
        return build_api_response(response)

    except Exception as e:
        return build_api_response(
            GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                data=str(e),
                message="An error occurred while creating the plan.",
            )
        )


@plan_router.get(
    "/{plan_id}",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
async def get_plan(plan_id: int):
    try:
        response: GenericResponseModel = PlanService.get_plan(plan_id=plan_id)
        return build_api_response(response)

    except Exception as e:
        return build_api_response(
            GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                data=str(e),
                message="An error occurred while fetching the plan.",
            )
        )


@plan_router.put(
    "/{plan_id}",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
async def update_plan(plan_id: int, update_data: PlanUpdateModel):
    """Update a plan, courier pricings given here replace the existing ones"""
    try:
        response: GenericResponseModel = PlanService.update_plan(
            plan_id=plan_id, update_data=update_data
        )
        return build_api_response(response)

    except Exception as e:
        return build_api_response(
            GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                data=str(e),
                message="An error occurred while updating the plan.",
            )
        )


@plan_router.delete(
    "/{plan_id}",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
async def delete_plan(plan_id: int):
    """Delete a plan (soft delete). Fails while users are assigned to it."""
    try:
        response: GenericResponseModel = PlanService.delete_plan(plan_id=plan_id)
        return build_api_response(response)

    except Exception as e:
        return build_api_response(
            GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                data=str(e),
                message="An error occurred while deleting the plan.",
            )
        )


@plan_router.post(
    "/assign/{plan_id}/user/{user_id}",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
async def assign_plan_to_user(plan_id: int, user_id: int):
    try:
        response: GenericResponseModel = PlanService.assign_plan_to_user(
            plan_id=plan_id, user_id=user_id
        )
        return build_api_response(response)

    except Exception as e:
        return build_api_response(
            GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                data=str(e),
                message="An error occurred while assigning the plan.",
            )
        )
