import http
from fastapi import APIRouter

# schema
from schema.base import GenericResponseModel
from .customer_schema import CustomerInsertModel

# utils
from utils.response_handler import build_api_response

# service
from .customer_service import CustomerService

# creating a customer router
customer_router = APIRouter(tags=["customers"], prefix="/customers")


@customer_router.get(
    "",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
async def list_customers():
    response: GenericResponseModel = CustomerService.list_customers()
    return build_api_response(response)


@customer_router.post(
    "",
    status_code=http.HTTPStatus.CREATED,
    response_model=GenericResponseModel,
)
async def create_customer(customer_data: CustomerInsertModel):
    response: GenericResponseModel = CustomerService.create_customer(
        customer_data=customer_data
    )
    return build_api_response(response)


@customer_router.get(
    "/{customer_id}",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
async def get_customer(customer_id: int):
    response: GenericResponseModel = CustomerService.get_customer(
        customer_id=customer_id
    )
    return build_api_response(response)


@customer_router.put(
    "/{customer_id}",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
async def update_customer(customer_id: int, customer_data: CustomerInsertModel):
    response: GenericResponseModel = CustomerService.update_customer(
        customer_id=customer_id, customer_data=customer_data
    )
    return build_api_response(response)


@customer_router.delete(
    "/{customer_id}",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
async def delete_customer(customer_id: int):
    response: GenericResponseModel = CustomerService.delete_customer(
        customer_id=customer_id
    )
    return build_api_response(response)
