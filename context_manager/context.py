from contextvars import ContextVar
from fastapi import Depends, Request
from sqlalchemy.orm import Session
from logger import logger

from database.db import get_db

# defining the context variables to store different types of required data

context_db_session: ContextVar[Session] = ContextVar("db_session", default=None)
# the operator label prefixed to every log line
context_user_data: ContextVar[str] = ContextVar("user_data", default="")
context_set_db_session_rollback: ContextVar[bool] = ContextVar(
    "set_db_session_rollback", default=False
)

# set by /api/kurasi/login
OPERATOR_COOKIE = "kurasi_label"
ANONYMOUS_OPERATOR = "counter"


# whenever an api is hit, define the context variables for it
async def build_request_context(request: Request, db: Session = Depends(get_db)):
    context_db_session.set(db)
    context_set_db_session_rollback.set(False)
    context_user_data.set(request.cookies.get(OPERATOR_COOKIE) or ANONYMOUS_OPERATOR)
    logger.info(
        extra=context_user_data.get(),
        msg=f"REQUEST_INITIATED {request.method} {request.url.path}",
    )


# get the same session everywhere
# the db session is stored in context at the time of the building request context
def get_db_session() -> Session:
    return context_db_session.get()
