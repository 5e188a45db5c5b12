from .api_router import ApiRouter
from .default_router import DefaultRouter
from .status_router import StatusRouter
