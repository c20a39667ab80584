"""Tests for day fields on the statistics schemas."""

from datetime import date

import pytest
from pydantic import ValidationError

from schemas import CompletionEvent, HabitDayFlag, HabitLogData

pytestmark = pytest.mark.unit


class TestDayIdField:
    def test_accepts_strict_day_string(self):
        event = CompletionEvent.model_validate({"habitId": 1, "day": "2024-02-29"})
        assert event.day == date(2024, 2, 29)

    def test_accepts_date_objects(self):
        assert CompletionEvent(habit_id=1, day=date(2026, 1, 7)).day == date(
            2026, 1, 7
        )

    @pytest.mark.parametrize(
        "value", ["2026-1-7", "2026-02-30", "2026-01-17T00:00:00", " 2026-01-17"]
    )
    def test_rejects_malformed_day(self, value: str):
        with pytest.raises(ValidationError):
            CompletionEvent.model_validate({"habitId": 1, "day": value})

    def test_json_output_is_day_string(self):
        flag = HabitDayFlag(day=date(2026, 1, 7), completed=True)

        assert flag.model_dump(mode="json") == {"day": "2026-01-07", "completed": True}
        assert flag.model_dump()["day"] == date(2026, 1, 7)

    def test_log_completed_date_serializes_by_alias(self):
        log = HabitLogData(
            id=1,
            habit_id=2,
            completed_date=date(2026, 1, 17),
            created_at="2026-01-17T08:00:00Z",
        )

        payload = log.model_dump(mode="json", by_alias=True)

        assert payload["completedDate"] == "2026-01-17"
