import http
from typing import Optional

from fastapi import APIRouter, Depends, Query

# schema
from schema.base import GenericResponseModel
from .buyer_schema import BuyerInsertModel, BuyerUpdateModel

# utils
from utils.country import CountryTable, get_country_table
from utils.response_handler import build_api_response

# service
from .buyer_service import BuyerService

# creating a buyer router
buyer_router = APIRouter(tags=["buyers"], prefix="/buyers")


@buyer_router.get(
    "",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
async def list_buyers(
    page: int = Query(1, ge=1),
    page_size: int = Query(25, ge=1, le=100),
    q: str = "",
):
    response: GenericResponseModel = BuyerService.list_buyers(
        page=page, page_size=page_size, q=q
    )
    return build_api_response(response)


@buyer_router.post(
    "",
    status_code=http.HTTPStatus.CREATED,
    response_model=GenericResponseModel,
)
async def create_buyer(
    buyer_data: BuyerInsertModel,
    country_table: CountryTable = Depends(get_country_table),
):
    response: GenericResponseModel = BuyerService.create_buyer(
        buyer_data=buyer_data, country_table=country_table
    )
    return build_api_response(response)


@buyer_router.get(
    "/{buyer_id}",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
async def get_buyer(buyer_id: int, with_orders: bool = False):
    response: GenericResponseModel = BuyerService.get_buyer(
        buyer_id=buyer_id, with_orders=with_orders
    )
    return build_api_response(response)


@buyer_router.put(
    "/{buyer_id}",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
async def update_buyer(
    buyer_id: int,
    buyer_data: BuyerUpdateModel,
    country_table: CountryTable = Depends(get_country_table),
):
    response: GenericResponseModel = BuyerService.update_buyer(
        buyer_id=buyer_id, buyer_data=buyer_data, country_table=country_table
    )
    return build_api_response(response)


@buyer_router.delete(
    "/{buyer_id}",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
async def delete_buyer(
    buyer_id: int, force: bool = False, merge_into: Optional[int] = None
):
    response: GenericResponseModel = BuyerService.delete_buyer(
        buyer_id=buyer_id, force=force, merge_into=merge_into
    )
    return build_api_response(response)
