from datetime import date, datetime

from pydantic import BaseModel


class PlayerIdentity(BaseModel):
    player_id: int
    site_id: int
    customer_id: int

    class Config:
        frozen = True


class AssignmentSnapshot(BaseModel):
    assignment_id: int
    schedule_id: int
    assignment_type: str
    target_customer_id: int | None = None
    target_site_id: int | None = None
    target_player_id: int | None = None

    class Config:
        frozen = True


class ScheduleSnapshot(BaseModel):
    """Read-only view of a schedule row and its assignments, as seen by the resolver.

    Time and day fields stay as stored text; the evaluator parses them and treats
    anything unparseable as a non-match.
    """

    schedule_id: int
    customer_id: int
    layout_id: int
    priority: int = 50
    start_date: date | None = None
    end_date: date | None = None
    start_time: str | None = None
    end_time: str | None = None
    days_of_week: str | None = None
    is_active: bool = True
    assignments: tuple[AssignmentSnapshot, ...] = ()

    class Config:
        frozen = True


class Resolution(BaseModel):
    schedule_id: int
    layout_id: int
    priority: int
    scope: str

    class Config:
        frozen = True


class CurrentLayoutOut(BaseModel):
    layout_id: int | None = None
    schedule_id: int | None = None
    time_zone: str
    resolved_at: datetime
