"""Pydantic request bodies for API endpoints."""

from pydantic import BaseModel, Field

from core.config import MAX_REPEAT_WEEKS


class DayTemplateModel(BaseModel):
    is_working: bool = False
    start_time: str = "09:00"
    end_time: str = "18:00"


class WeeklyScheduleRequest(BaseModel):
    """Week of working hours for one staff member, optionally repeated."""

    staff_id: int | str
    week_start: str = Field(description="First day of the week (YYYY-MM-DD)")
    template: dict[str, DayTemplateModel]
    repeat_weeks: int = Field(default=1, ge=1, le=MAX_REPEAT_WEEKS)
    notes: str | None = None


class CopyWeekRequest(BaseModel):
    staff_id: int | str
    week_start: str


class ScheduleCreateRequest(BaseModel):
    staff_id: int | str
    date: str
    start_time: str
    end_time: str
    notes: str | None = None


class ScheduleUpdateRequest(BaseModel):
    date: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    status: str | None = None
    notes: str | None = None


class ScheduleRequestSubmit(BaseModel):
    """Schedule proposed by a staff member."""

    staff_id: int | str
    staff_name: str | None = None
    date: str
    start_time: str
    end_time: str
    notes: str | None = None


class ApproveRequestBody(BaseModel):
    """Optional modifications applied when approving."""

    date: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    notes: str | None = None


class RejectRequestBody(BaseModel):
    reason: str | None = None
