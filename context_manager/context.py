from contextvars import ContextVar
from fastapi import Depends, Header
from sqlalchemy.orm import Session
from logger import logger
from typing import Optional

from database.db import get_db
from schema.base import UserContextModel

# defining the context variables to store different types of required data

context_db_session: ContextVar[Session] = ContextVar("db_session", default=None)
context_user_data: ContextVar[UserContextModel] = ContextVar("user_data", default="")
context_set_db_session_rollback: ContextVar[bool] = ContextVar(
    "set_db_session_rollback", default=False
)


# whenever an api is hit, define the context variables for it
# the caller identity is resolved upstream, this only carries it through the request
async def build_request_context(
    db: Session = Depends(get_db),
    x_user_id: Optional[str] = Header(default=None),
):
    context_db_session.set(db)
    context_user_data.set(UserContextModel(user_id=x_user_id) if x_user_id else "")
    logger.info(extra=context_user_data.get(), msg="REQUEST_INITIATED")


# get the same session everywhere
# the db session is stored in context at the time of the building request context
def get_db_session() -> Session:
    session = context_db_session.get()

    return session


def get_user_data() -> Optional[UserContextModel]:
    """
    Safely get user data from context.
    Returns None if context is not set or user data is invalid.
    """
    user_data = context_user_data.get()
    if not user_data or not hasattr(user_data, "user_id"):
        return None
    return user_data
