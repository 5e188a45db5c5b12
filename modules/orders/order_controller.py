import http
from typing import Optional

from fastapi import APIRouter, Depends, Query

# schema
from schema.base import GenericResponseModel
from modules.orders.order_schema import (
    OrderFilters,
    OrderInsertModel,
    OrderUpdateModel,
)

# fees
from modules.fees.fee_calculator import FeeSchedule, get_fee_schedule

# utils
from utils.response_handler import build_api_response

# services
from .order_service import OrderService


# Creating the router for orders
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.get(
    "",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
async def list_orders(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    status: Optional[str] = None,
):
    response: GenericResponseModel = OrderService.list_orders(
        filters=OrderFilters(page=page, page_size=page_size, status=status)
    )
    return build_api_response(response)


# create a new order
@order_router.post(
    "",
    status_code=http.HTTPStatus.CREATED,
    response_model=GenericResponseModel,
)
async def create_order(
    order_data: OrderInsertModel,
    fee_schedule: FeeSchedule = Depends(get_fee_schedule),
):
    response: GenericResponseModel = OrderService.create_order(
        order_data=order_data, fee_schedule=fee_schedule
    )
    return build_api_response(response)


@order_router.get(
    "/{order_id}",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
async def get_order(order_id: int):
    response: GenericResponseModel = OrderService.get_order(order_id=order_id)
    return build_api_response(response)


# Edit order
@order_router.put(
    "/{order_id}",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
async def update_order(
    order_id: int,
    order_data: OrderUpdateModel,
    fee_schedule: FeeSchedule = Depends(get_fee_schedule),
):
    response: GenericResponseModel = OrderService.update_order(
        order_id=order_id, order_data=order_data, fee_schedule=fee_schedule
    )
    return build_api_response(response)


@order_router.delete(
    "/{order_id}",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
async def delete_order(order_id: int):
    response: GenericResponseModel = OrderService.delete_order(order_id=order_id)
    return build_api_response(response)
