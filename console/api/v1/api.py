"""API v1 router composition."""

from fastapi import APIRouter

from console.api.v1.endpoints import analytics, console, drivers, menu, orders

api_router: APIRouter = APIRouter()
api_router.include_router(orders.router, prefix="/orders", tags=["orders"])
api_router.include_router(drivers.router, prefix="/drivers", tags=["drivers"])
api_router.include_router(analytics.router, prefix="/analytics", tags=["analytics"])
api_router.include_router(console.router, prefix="/console", tags=["console"])
api_router.include_router(menu.router, prefix="/menu", tags=["menu"])
