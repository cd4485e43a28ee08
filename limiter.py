import os
from dotenv import load_dotenv

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi.responses import JSONResponse

load_dotenv()

# per client address, e.g. "100/1second"
RATE_CALCULATOR_LIMIT = os.environ.get("RATE_CALCULATOR_LIMIT", "100/1second")

limiter = Limiter(key_func=get_remote_address)


def rate_limit_handler(request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=429, content={"detail": "Too many requests. Slow down!"}
    )
