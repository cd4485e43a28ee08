import http
from fastapi import APIRouter, Depends

# schema
from schema.base import GenericResponseModel

# utils
from utils.response_handler import build_api_response

# services
from .pincode_service import PincodeService
from context_manager.dependencies import get_pincode_service


pincode_router = APIRouter(tags=["pincode"])


@pincode_router.get(
    "/pincode/details",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
async def get_pincode_details(
    pincode: int, pincode_service: PincodeService = Depends(get_pincode_service)
):
    try:
        response: GenericResponseModel = await pincode_service.get_pincode_details(
            pincode=pincode
        )
        return build_api_response(response)

    except Exception as e:
        return build_api_response(
            GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                data=str(e),
                message="An error occurred while getting the pincode details.",
            )
        )
