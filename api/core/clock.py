"""Clock dependency for routes.

Tests override get_clock with a FixedClock to pin "today".
"""

from typing import Annotated

from fastapi import Depends

from services.dates_service import SYSTEM_CLOCK, Clock


def get_clock() -> Clock:
    return SYSTEM_CLOCK


RequestClock = Annotated[Clock, Depends(get_clock)]
