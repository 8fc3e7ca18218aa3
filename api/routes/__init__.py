"""
API route handlers.
"""

from api.routes.sequences import router as sequences_router
from api.routes.tov_configs import router as tov_configs_router
from api.routes.prospects import router as prospects_router

__all__ = ["sequences_router", "tov_configs_router", "prospects_router"]
