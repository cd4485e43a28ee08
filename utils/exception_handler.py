from typing import List, Dict
from pydantic import ValidationError
from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse

from logger import logger


# format the validation errors into our desired output
# nested fields keep their path, e.g. "courier_pricings.0.zone_pricing"
def format_validation_errors(errors: List[dict]) -> Dict:
    formatted_errors = {}

    for error in errors:
        loc = [str(part) for part in error["loc"] if part not in ("body", "query")]
        field = ".".join(loc) if loc else "Unknown"
        message = error["msg"]

        formatted_errors.setdefault(field, []).append(message)

    return {
        "data": {"fields": formatted_errors},
        "message": "Validation error occurred.",
        "status": False,
    }


def handle_validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=422, content=format_validation_errors(exc.errors()))


# Custom internal server error handler
async def custom_http_exception_handler(
    request: Request, exc: HTTPException
) -> JSONResponse:
    if exc.status_code == 500:
        logger.error(msg=f"Internal server error: {exc.detail}")
        return JSONResponse(
            status_code=500,
            content={
                "detail": "An internal server error occurred. Please try again later."
            },
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
    )
