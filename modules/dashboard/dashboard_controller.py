import http
from fastapi import APIRouter
from schema.base import GenericResponseModel


# utils
from utils.response_handler import build_api_response

# service
from .dashboard_service import DashboardService

# creating a dashboard router
dashboard_router = APIRouter(tags=["dashboard"], prefix="/dashboard")


@dashboard_router.get(
    "",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
async def get_dashboard():
    response: GenericResponseModel = DashboardService.get_overview()
    return build_api_response(response)
