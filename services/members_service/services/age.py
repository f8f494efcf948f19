"""Age helpers.

Only year and (optionally) month of birth are stored, never a full birth
date. With a month the age is month-accurate; without one it is the plain
difference in years.
"""

from datetime import date
from typing import Optional


def calculate_age(
    year_of_birth: Optional[int],
    month_of_birth: Optional[int] = None,
    today: Optional[date] = None,
) -> Optional[int]:
    """Whole years of age, or None if the year is missing or in the future."""
    if not year_of_birth:
        return None
    today = today or date.today()
    age = today.year - year_of_birth
    if month_of_birth and today.month < month_of_birth:
        age -= 1
    return age if age >= 0 else None
