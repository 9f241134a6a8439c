"""API route modules."""

from stockledger.api.routes.forecasts import router as forecasts_router
from stockledger.api.routes.health import router as health_router
from stockledger.api.routes.inventory import router as inventory_router
from stockledger.api.routes.movements import router as movements_router
from stockledger.api.routes.suppliers import router as suppliers_router

__all__ = [
    "health_router",
    "inventory_router",
    "movements_router",
    "forecasts_router",
    "suppliers_router",
]
