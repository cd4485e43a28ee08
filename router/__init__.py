from .api_router import CommonRouter
from .default_router import DefaultRouter
from .status_router import StatusRouter
