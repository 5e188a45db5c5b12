import asyncio
import http
import json

from fastapi import APIRouter, Depends, Request

from context_manager.context import context_user_data

from logger import logger

# utils
from utils.country import CountryTable, get_country_table
from utils.response_handler import build_status_response

# fees
from modules.fees.fee_calculator import FeeSchedule, get_fee_schedule

# service
from .shipping_quote_errors import QuoteError
from .shipping_quote_schema import QuoteFailureResponse, ShippingQuoteResponse
from .shipping_quote_service import ShippingQuoteService

shipping_quote_router = APIRouter(tags=["shipping quote"], prefix="/shipping-quote")


@shipping_quote_router.post(
    "",
    status_code=http.HTTPStatus.OK,
    response_model=ShippingQuoteResponse,
    responses={400: {"model": QuoteFailureResponse}, 500: {"model": QuoteFailureResponse}},
)
async def get_shipping_quote(
    request: Request,
    country_table: CountryTable = Depends(get_country_table),
    fee_schedule: FeeSchedule = Depends(get_fee_schedule),
):
    """Carrier rates for a parcel with the local handling fee added, cheapest first."""
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        body = None

    try:
        # carrier call blocks, keep it off the event loop
        quote = await asyncio.to_thread(
            ShippingQuoteService.get_combined_quote,
            body,
            country_table=country_table,
            fee_schedule=fee_schedule,
        )
    except QuoteError as e:
        return build_status_response(e.http_status, e.status, error_message=e.message)
    except Exception as e:
        logger.error(
            extra=context_user_data.get(),
            msg=f"Unhandled error in shipping quote: {e}",
        )
        return build_status_response(
            http.HTTPStatus.INTERNAL_SERVER_ERROR,
            "ERROR",
            error_message=str(e) or "Internal server error",
        )

    return build_status_response(
        http.HTTPStatus.OK,
        quote.status,
        meta=quote.meta.model_dump(),
        services=[service.model_dump() for service in quote.services],
    )
