import asyncio
import http
from typing import Optional

from fastapi import APIRouter, Cookie, Depends
from fastapi.responses import Response

# schema
from schema.base import GenericResponseModel

# utils
from utils.country import CountryTable, get_country_table
from utils.response_handler import build_api_response, build_status_response

from . import kurasi_config as config
from .kurasi import Kurasi
from .kurasi_schema import (
    KurasiLoginRequest,
    KurasiQuoteRequest,
    OrderShipmentRequest,
    ProxyResponse,
    SyncBuyersRequest,
    TempShipmentsRequest,
)
from .kurasi_service import NOT_LOGGED_IN, KurasiService

# creating a kurasi router
kurasi_router = APIRouter(tags=["kurasi"], prefix="/kurasi")


def _respond(result: ProxyResponse) -> Response:
    if result.pdf is not None:
        return Response(
            content=result.pdf,
            media_type="application/pdf",
            headers={"Content-Disposition": f'attachment; filename="{result.filename}"'},
        )
    return build_status_response(
        result.status_code,
        result.status,
        error_message=result.error_message,
        **result.payload,
    )


def _not_logged_in() -> Response:
    return build_status_response(
        http.HTTPStatus.UNAUTHORIZED, "FAIL", error_message=NOT_LOGGED_IN
    )


def _set_token_cookie(response: Response, token: str):
    response.set_cookie(
        config.TOKEN_COOKIE,
        token,
        max_age=config.COOKIE_MAX_AGE,
        path="/",
        httponly=True,
        secure=config.COOKIE_SECURE,
        samesite="lax",
    )


# ============================================
# SESSION
# ============================================


@kurasi_router.post("/login")
async def login(body: KurasiLoginRequest):
    result = await asyncio.to_thread(KurasiService.login, body.username, body.password)
    if not result.ok:
        return build_status_response(
            result.http_status, result.status, error_message=result.message
        )

    response = build_status_response(http.HTTPStatus.OK, "SUCCESS")
    _set_token_cookie(response, result.data["token"])
    # display label for the UI, readable from the browser
    response.set_cookie(
        config.LABEL_COOKIE,
        body.username,
        max_age=config.COOKIE_MAX_AGE,
        path="/",
        httponly=False,
        secure=config.COOKIE_SECURE,
        samesite="lax",
    )
    return response


@kurasi_router.post("/logout")
async def logout():
    response = build_status_response(http.HTTPStatus.OK, "SUCCESS")
    response.delete_cookie(config.TOKEN_COOKIE, path="/")
    response.delete_cookie(config.LABEL_COOKIE, path="/")
    return response


@kurasi_router.get("/session")
async def session(
    verify: str = "",
    kurasi_token: Optional[str] = Cookie(None),
    kurasi_label: Optional[str] = Cookie(None),
):
    return _respond(
        await asyncio.to_thread(
            KurasiService.session_info, kurasi_token, kurasi_label, verify=verify == "1"
        )
    )


@kurasi_router.get("/me")
async def me(kurasi_token: Optional[str] = Cookie(None)):
    token = KurasiService.resolve_token(kurasi_token)
    if not token:
        return _not_logged_in()
    return _respond(KurasiService.passthrough(await asyncio.to_thread(Kurasi.me, token)))


@kurasi_router.get("/countries")
async def countries(kurasi_token: Optional[str] = Cookie(None)):
    token = KurasiService.resolve_token(kurasi_token)
    if not token:
        return _not_logged_in()

    result = KurasiService.passthrough(await asyncio.to_thread(Kurasi.countries, token))
    response = _respond(result)
    # sliding refresh of the session cookie
    if kurasi_token and result.status == "SUCCESS":
        _set_token_cookie(response, kurasi_token)
    return response


# ============================================
# QUOTE
# ============================================


@kurasi_router.post("/quote")
async def quote(body: KurasiQuoteRequest, kurasi_token: Optional[str] = Cookie(None)):
    return _respond(
        await asyncio.to_thread(
            KurasiService.quote, body, KurasiService.resolve_token(kurasi_token)
        )
    )


# ============================================
# SHIPMENTS
# ============================================


@kurasi_router.post("/shipment")
async def create_shipment(
    body: OrderShipmentRequest, kurasi_token: Optional[str] = Cookie(None)
):
    return _respond(
        await asyncio.to_thread(
            KurasiService.create_shipment, body, KurasiService.resolve_token(kurasi_token)
        )
    )


@kurasi_router.post("/update-shipment")
async def update_shipment(
    body: OrderShipmentRequest, kurasi_token: Optional[str] = Cookie(None)
):
    return _respond(
        await asyncio.to_thread(
            KurasiService.update_shipment, body, KurasiService.resolve_token(kurasi_token)
        )
    )


@kurasi_router.post("/delete-shipment")
async def delete_shipment(
    body: OrderShipmentRequest, kurasi_token: Optional[str] = Cookie(None)
):
    return _respond(
        await asyncio.to_thread(
            KurasiService.delete_shipment, body, KurasiService.resolve_token(kurasi_token)
        )
    )


@kurasi_router.post("/create-label")
async def create_label(
    body: OrderShipmentRequest, kurasi_token: Optional[str] = Cookie(None)
):
    return _respond(
        await asyncio.to_thread(
            KurasiService.create_label, body, KurasiService.resolve_token(kurasi_token)
        )
    )


@kurasi_router.post("/fetch-shipment-data")
async def fetch_shipment_data(
    body: OrderShipmentRequest, kurasi_token: Optional[str] = Cookie(None)
):
    return _respond(
        await asyncio.to_thread(
            KurasiService.fetch_shipment_data,
            body,
            KurasiService.resolve_token(kurasi_token),
        )
    )


@kurasi_router.get("/validate-hscode")
async def validate_hs_code(hsCode: str = "", kurasi_token: Optional[str] = Cookie(None)):
    return _respond(
        await asyncio.to_thread(
            KurasiService.validate_hs_code, hsCode, KurasiService.resolve_token(kurasi_token)
        )
    )


# ============================================
# BUYER SYNC
# ============================================


@kurasi_router.post("/sync-buyers")
async def sync_buyers(
    body: Optional[SyncBuyersRequest] = None,
    kurasi_token: Optional[str] = Cookie(None),
    country_table: CountryTable = Depends(get_country_table),
):
    return _respond(
        await asyncio.to_thread(
            KurasiService.sync_buyers,
            body or SyncBuyersRequest(),
            KurasiService.resolve_token(kurasi_token),
            country_table=country_table,
        )
    )


# ============================================
# SHIPMENT COPIES
# ============================================


@kurasi_router.get("/shipments-stats", response_model=GenericResponseModel)
async def shipment_stats():
    response: GenericResponseModel = KurasiService.shipment_stats()
    return build_api_response(response)


@kurasi_router.post("/shipments-temp")
async def temp_shipments(
    body: Optional[TempShipmentsRequest] = None,
    kurasi_token: Optional[str] = Cookie(None),
):
    return _respond(
        await asyncio.to_thread(
            KurasiService.temp_shipments,
            body or TempShipmentsRequest(),
            KurasiService.resolve_token(kurasi_token),
        )
    )
