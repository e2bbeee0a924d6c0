"""API routes for manager-declared schedule blocks."""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from app.core.security import get_current_user
from app.dependencies import get_coordinator
from app.schemas.schedule_block import ScheduleBlockCreate, ScheduleBlockResponse
from app.services.booking_coordinator import BookingCoordinator

router = APIRouter(tags=["schedule-blocks"])


@router.get(
    "/fields/{field_id}/schedule-blocks",
    response_model=List[ScheduleBlockResponse],
)
def list_schedule_blocks(
    field_id: int,
    *,
    start_time: Optional[datetime] = Query(None, description="Range start"),
    end_time: Optional[datetime] = Query(None, description="Range end, exclusive"),
    coordinator: BookingCoordinator = Depends(get_coordinator),
) -> List[ScheduleBlockResponse]:
    """Retrieve the schedule blocks of a field."""

    return coordinator.list_schedule_blocks(field_id, start_time, end_time)


@router.post(
    "/fields/{field_id}/schedule-blocks",
    response_model=ScheduleBlockResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_schedule_block(
    field_id: int,
    payload: ScheduleBlockCreate,
    _: dict = Depends(get_current_user),
    coordinator: BookingCoordinator = Depends(get_coordinator),
) -> ScheduleBlockResponse:
    """Block a window of the field timeline."""

    return coordinator.add_schedule_block(
        field_id,
        payload.start_time,
        payload.end_time,
        payload.reason,
        payload.note,
    )


@router.delete("/schedule-blocks/{block_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_schedule_block(
    block_id: int,
    _: dict = Depends(get_current_user),
    coordinator: BookingCoordinator = Depends(get_coordinator),
) -> None:
    """Delete a schedule block, freeing its window."""

    coordinator.remove_schedule_block(block_id)
