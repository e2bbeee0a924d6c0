from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ScheduleBlockCreate(BaseModel):
    start_time: datetime
    end_time: datetime
    reason: str = Field(..., min_length=1, max_length=500)
    note: Optional[str] = Field(None, max_length=500)


class ScheduleBlockResponse(BaseModel):
    id_block: int
    id_field: int
    start_time: datetime
    end_time: datetime
    reason: str
    note: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
