import uvicorn
import asyncio
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from slowapi.errors import RateLimitExceeded

from logger import logger
from limiter import limiter, rate_limit_handler
from utils.exception_handler import (
    format_validation_errors,
    handle_validation_error,
    custom_http_exception_handler,
)

from router import CommonRouter, DefaultRouter, StatusRouter

from database.db import init_models  # sync DB init

app = FastAPI(title="Rate Engine")

# slowapi reads the limiter from app state
app.state.limiter = limiter

# Routers
app.include_router(CommonRouter)
app.include_router(StatusRouter)
app.include_router(DefaultRouter)

# Exception handlers
app.add_exception_handler(ValidationError, handle_validation_error)
app.add_exception_handler(HTTPException, custom_http_exception_handler)
app.add_exception_handler(RateLimitExceeded, rate_limit_handler)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# -------------------------------
# Startup event
# -------------------------------
@app.on_event("startup")
async def startup_event():
    loop = asyncio.get_running_loop()
    # Initialize DB safely in executor
    await loop.run_in_executor(None, init_models)
    logger.info("Database tables ready")


# -------------------------------
# Validation error handler
# -------------------------------
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.error(msg=f"422 on {request.url}: {exc.errors()}")
    return JSONResponse(
        status_code=422,
        content=format_validation_errors(exc.errors()),
    )


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
