"""Pydantic schemas for statistics values and API request/response validation.

Field names are snake_case in Python and camelCase on the wire.
Days serialize as YYYY-MM-DD.
"""

from datetime import date, datetime
from typing import Annotated

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    StringConstraints,
)
from pydantic.alias_generators import to_camel

from services.dates_service import format_day_id, parse_day_id


class CamelModel(BaseModel):
    """Base schema: camelCase aliases, construction by field name allowed."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FrozenCamelModel(CamelModel):
    model_config = ConfigDict(frozen=True)


def _parse_day(value: object) -> object:
    return parse_day_id(value) if isinstance(value, str) else value


# Calendar day; strict YYYY-MM-DD in and out
DayId = Annotated[
    date,
    BeforeValidator(_parse_day),
    PlainSerializer(format_day_id, return_type=str, when_used="json"),
]


# =============================================================================
# Statistics engine inputs
# =============================================================================


class HabitSnapshot(FrozenCamelModel):
    """What the statistics engine needs to know about a habit."""

    habit_id: int
    created_at: datetime
    is_active: bool = True


class CompletionEvent(FrozenCamelModel):
    """A habit was completed on a day."""

    habit_id: int
    day: DayId


# =============================================================================
# Statistics engine outputs
# =============================================================================


class DayBucket(FrozenCamelModel):
    """Distinct habits completed on one day of the dashboard window."""

    day: DayId
    completed: int
    total: int


class HabitDayFlag(FrozenCamelModel):
    """Whether one habit was completed on one day of its progress window."""

    day: DayId
    completed: bool


class DashboardStats(FrozenCamelModel):
    """Account-wide statistics across all active habits."""

    total_habits: int = 0
    completed_today: int = 0
    completion_percentage_today: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    total_completions: int = 0
    weekly_progress: tuple[DayBucket, ...] = ()

    @classmethod
    def empty(cls) -> "DashboardStats":
        return cls()


class HabitProgressData(FrozenCamelModel):
    """Statistics for a single habit."""

    total_completions: int
    current_streak: int
    days_since_creation: int
    completion_rate: int
    weekly_progress: tuple[HabitDayFlag, ...]
    all_completed_dates: tuple[DayId, ...]


# =============================================================================
# Habits
# =============================================================================

HabitTitle = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)
]
HabitDescription = Annotated[
    str, StringConstraints(strip_whitespace=True, max_length=500)
]


class HabitCreateRequest(CamelModel):
    """Request to create a habit."""

    title: HabitTitle
    description: HabitDescription = ""


class HabitUpdateRequest(CamelModel):
    """Request to change a habit's title and/or description."""

    title: HabitTitle
    description: HabitDescription = ""


class HabitData(CamelModel):
    """A habit as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str
    is_active: bool
    created_at: datetime
    updated_at: datetime
    completed_today: bool = False


class HabitSummaryData(CamelModel):
    """Habit header shown next to its progress."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str
    created_at: datetime


class HabitLogData(CamelModel):
    """A stored completion."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    habit_id: int
    completed_date: DayId
    created_at: datetime


class HabitProgressResult(CamelModel):
    habit: HabitSummaryData
    progress: HabitProgressData


# =============================================================================
# Response envelopes
# =============================================================================


class SuccessResponse(CamelModel):
    success: bool = True


class MessageResponse(SuccessResponse):
    message: str


class DashboardResponse(SuccessResponse):
    stats: DashboardStats


class HabitListResponse(SuccessResponse):
    count: int
    habits: list[HabitData] = Field(default_factory=list)


class HabitResponse(SuccessResponse):
    habit: HabitData


class HabitProgressResponse(SuccessResponse):
    habit: HabitSummaryData
    progress: HabitProgressData


class HabitLogListResponse(SuccessResponse):
    count: int
    logs: list[HabitLogData] = Field(default_factory=list)


class CompletionResponse(MessageResponse):
    log: HabitLogData


class FieldError(BaseModel):
    field: str
    message: str


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    errors: list[FieldError] | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    service: str
