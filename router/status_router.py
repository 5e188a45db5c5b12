import http
from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from database.db import db_engine
from logger import logger
from shipping_partner.kurasi import kurasi_config

SERVICE_NAME = "kurasyit"

StatusRouter = APIRouter(tags=["health_checks"])


# liveness only
@StatusRouter.get("/status", status_code=http.HTTPStatus.OK)
async def status_check():
    return JSONResponse(
        status_code=http.HTTPStatus.OK,
        content={"status": "OK", "service": SERVICE_NAME},
    )


@StatusRouter.get("/deepstatus", status_code=http.HTTPStatus.OK)
async def deep_status_check():
    """Database round trip, plus which Kurasi settings the proxy will fall back on."""
    try:
        with db_engine.connect() as connection:
            is_db_ok = connection.execute(text("SELECT 1")).scalar() == 1
    except SQLAlchemyError as e:
        logger.error(msg=f"deepstatus: database unreachable: {e}")
        is_db_ok = False

    return JSONResponse(
        status_code=(
            http.HTTPStatus.OK if is_db_ok else http.HTTPStatus.SERVICE_UNAVAILABLE
        ),
        content={
            "db": is_db_ok,
            "kurasi": {
                "base": kurasi_config.KURASI_BASE,
                "serverToken": bool(kurasi_config.KURASI_TOKEN),
                "clientCode": bool(kurasi_config.KURASI_CLIENT_CODE),
            },
        },
    )
