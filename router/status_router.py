import http
import asyncio
from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from database.db import db_engine
from logger import logger

StatusRouter = APIRouter(tags=["health_checks"])


def check_db_connection() -> bool:
    with db_engine.connect() as connection:
        result = connection.execute(text("SELECT 'true'")).fetchone()
        return result[0] == "true"


# normal status check
@StatusRouter.get("/status", status_code=http.HTTPStatus.OK)
async def status_check():
    return JSONResponse(status_code=http.HTTPStatus.OK, content={"status": "OK"})


# deep check with db connection, quoting is useless without pincodes and plans
@StatusRouter.get("/deepstatus", status_code=http.HTTPStatus.OK)
async def deep_status_check():
    loop = asyncio.get_running_loop()
    try:
        is_db_ok = await loop.run_in_executor(None, check_db_connection)
    except SQLAlchemyError as e:
        logger.error(msg=f"deepstatus: db check failed: {str(e)}")
        is_db_ok = False

    if not is_db_ok:
        return JSONResponse(
            status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
            content={"error": "db not connected"},
        )

    return JSONResponse(status_code=http.HTTPStatus.OK, content={"db": is_db_ok})
