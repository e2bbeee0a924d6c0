from fastapi import APIRouter

from .booking_routes import router as booking_router
from .field_routes import router as field_router
from .schedule_block_routes import router as schedule_block_router

router = APIRouter()
router.include_router(booking_router)
router.include_router(field_router)
router.include_router(schedule_block_router)

__all__ = [
    "router",
    "booking_router",
    "field_router",
    "schedule_block_router",
]
