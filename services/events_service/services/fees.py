"""Event fee calculation."""

from typing import Optional

from libs.common.currency import round_pounds

STUDENT_DISCOUNT_MULTIPLIER = 0.75


def is_student_discount(member_type: Optional[str]) -> bool:
    """True when the member type earns the student discount."""
    value = getattr(member_type, "value", member_type)
    return str(value or "").lower() == "student"


def calculate_fee(base_fee: Optional[float], member_type: Optional[str]) -> float:
    """Fee due in pounds: 25% off for students, rounded to the penny."""
    fee = float(base_fee or 0)
    if is_student_discount(member_type):
        fee *= STUDENT_DISCOUNT_MULTIPLIER
    return round_pounds(fee)
