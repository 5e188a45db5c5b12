import http
from fastapi import APIRouter, Depends

# schema
from schema.base import GenericResponseModel

# utils
from utils.response_handler import build_api_response

# service
from .fee_calculator import FeeSchedule, get_fee_schedule
from .fee_service import FeeService

fee_router = APIRouter(tags=["fees"], prefix="/fees")


@fee_router.post(
    "/backfill",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
async def backfill_fees(fee_schedule: FeeSchedule = Depends(get_fee_schedule)):
    response: GenericResponseModel = FeeService.backfill_fees(
        fee_schedule=fee_schedule
    )
    return build_api_response(response)
