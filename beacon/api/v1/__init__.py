from fastapi import APIRouter

from .devices import router as devices_router
from .notifications import router as notifications_router
from .system import router as system_router

v1_router = APIRouter()
v1_router.include_router(devices_router)
v1_router.include_router(notifications_router, prefix="/notifications")
v1_router.include_router(system_router)

__all__ = ["v1_router"]
