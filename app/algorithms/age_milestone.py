"""
Age Milestone Detection

Citizens must refresh their biometrics around their 15th and 50th
birthdays. A milestone is reported from 90 days before the birthday up to
and including the day itself.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Union

from app.constants.thresholds import MILESTONE_AGES, MILESTONE_WINDOW_DAYS

logger = logging.getLogger(__name__)

MILESTONE_TYPES = {15: "15th_birthday", 50: "50th_birthday"}


@dataclass
class MilestoneInfo:
    type: str
    age: int
    days_remaining: int
    birthday_date: date


def _birthday_in_year(dob: date, year: int) -> date:
    try:
        return dob.replace(year=year)
    except ValueError:
        # Feb 29 in a non-leap year: Feb 28, not a Mar 1 rollover
        return date(year, 2, 28)


def _coerce_date(value: Union[str, date, datetime]) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def check_age_milestone(
    dob: Optional[Union[str, date, datetime]],
    today: Optional[date] = None,
    window_days: int = MILESTONE_WINDOW_DAYS
) -> Optional[MilestoneInfo]:
    """
    Return the upcoming milestone for a date of birth, if any.

    Args:
        dob: Date of birth (date or ISO string)
        today: Reference day (defaults to today)
        window_days: How many days ahead a milestone is reported

    Returns:
        MilestoneInfo for the first milestone inside the window, else None
    """
    if not dob:
        return None

    try:
        birth = _coerce_date(dob)
    except ValueError:
        logger.warning(f"Unparseable date of birth: {dob!r}")
        return None

    today = today or date.today()

    for age in MILESTONE_AGES:
        birthday = _birthday_in_year(birth, birth.year + age)
        if birthday < today:
            continue

        days_remaining = (birthday - today).days
        if days_remaining <= window_days:
            return MilestoneInfo(
                type=MILESTONE_TYPES[age],
                age=age,
                days_remaining=days_remaining,
                birthday_date=birthday,
            )

    return None


def milestone_message(info: MilestoneInfo) -> str:
    """Human-readable countdown for a milestone."""
    if info.days_remaining == 0:
        return f"Today is your {info.age}th birthday! Please update your biometrics."
    return (
        f"{info.days_remaining} days until your {info.age}th birthday. "
        "Mandatory biometric update coming up."
    )
