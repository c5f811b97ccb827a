from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field

AssignmentType = Literal["Customer", "Site", "Player"]


class ScheduleCreateIn(BaseModel):
    name: str = Field(..., max_length=255)
    layout_id: int
    priority: int | None = None
    start_date: date | None = None
    end_date: date | None = None
    start_time: str | None = None
    end_time: str | None = None
    days_of_week: str | None = None


class ScheduleUpdateIn(BaseModel):
    """Partial update: only fields present in the request body are applied."""

    name: str | None = Field(None, max_length=255)
    layout_id: int | None = None
    priority: int | None = None
    start_date: date | None = None
    end_date: date | None = None
    start_time: str | None = None
    end_time: str | None = None
    days_of_week: str | None = None
    is_active: bool | None = None


class AssignmentCreateIn(BaseModel):
    assignment_type: AssignmentType
    target_customer_id: int | None = None
    target_site_id: int | None = None
    target_player_id: int | None = None


class AssignmentOut(BaseModel):
    id: int
    schedule_id: int
    assignment_type: str
    target_customer_id: int | None = None
    target_site_id: int | None = None
    target_player_id: int | None = None
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class ScheduleOut(BaseModel):
    id: int
    customer_id: int
    name: str
    layout_id: int
    priority: int
    start_date: date | None = None
    end_date: date | None = None
    start_time: str | None = None
    end_time: str | None = None
    days_of_week: str | None = None
    is_active: bool
    created_by: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


class ScheduleDetailOut(ScheduleOut):
    assignments: list[AssignmentOut] = []


class SchedulePageOut(BaseModel):
    data: list[ScheduleOut]
    total: int
    page: int
    limit: int
    total_pages: int
