import http
from typing import Optional

from fastapi import APIRouter

# schema
from schema.base import GenericResponseModel

# utils
from utils.response_handler import build_api_response

# service
from .srn_service import SRNService

# /srns/check and /srn/{key} live side by side
srn_router = APIRouter(tags=["srn"])


@srn_router.get(
    "/srns/check",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
async def check_srn(srn: str = "", exclude_buyer_id: Optional[int] = None):
    response: GenericResponseModel = SRNService.check_srn(
        srn=srn, exclude_buyer_id=exclude_buyer_id
    )
    return build_api_response(response)


@srn_router.get(
    "/srn/{key}",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
async def lookup_srn(key: str):
    response: GenericResponseModel = SRNService.lookup(key=key)
    return build_api_response(response)
