"""
Date and time tools: current time and age from a birth date.
"""

import logging
from datetime import date, datetime, timedelta
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .registry import NoParams, ToolName, ToolRegistry

logger = logging.getLogger(__name__)


class AgeParams(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    birth_date: str = Field(..., alias="birthDate", pattern=r"^\d{4}-\d{2}-\d{2}$")


def current_time(now: Optional[datetime] = None) -> dict:
    """Return local time and date in German notation."""
    now = now or datetime.now().astimezone()
    return {
        "success": True,
        "time": now.strftime("%H:%M:%S"),
        "date": now.strftime("%d.%m.%Y"),
        "iso": now.isoformat(timespec="seconds"),
    }


def calculate_age(birth_date: str, today: Optional[date] = None) -> dict:
    """
    Compute the age in years, months and days.

    Args:
        birth_date: ISO date string (YYYY-MM-DD)
        today: Reference date, defaults to the current date

    Returns:
        Dictionary with years/months/days or an error
    """
    today = today or date.today()
    try:
        birth = date.fromisoformat(birth_date)
    except ValueError:
        return {"success": False, "error": "Ungültiges Datum"}

    if birth > today:
        return {"success": False, "error": "Geburtsdatum liegt in der Zukunft"}

    years = today.year - birth.year
    months = today.month - birth.month
    days = today.day - birth.day

    if days < 0:
        months -= 1
        last_of_previous_month = today.replace(day=1) - timedelta(days=1)
        # Birth days past the end of last month clamp to it, keeping days >= 0
        days += max(last_of_previous_month.day, birth.day)

    if months < 0:
        years -= 1
        months += 12

    return {
        "success": True,
        "birthDate": birth_date,
        "years": years,
        "months": months,
        "days": days,
    }


async def _handle_current_time(params: NoParams) -> dict:
    return current_time()


async def _handle_age(params: AgeParams) -> dict:
    return calculate_age(params.birth_date)


def _register():
    ToolRegistry.register(
        name=ToolName.CURRENT_TIME,
        description="Gibt aktuelle Uhrzeit und Datum zurück.",
        params_model=NoParams,
        handler=_handle_current_time,
    )
    ToolRegistry.register(
        name=ToolName.AGE_CALCULATOR,
        description="Berechnet das Alter aus einem Geburtsdatum.",
        params_model=AgeParams,
        handler=_handle_age,
    )


_register()
