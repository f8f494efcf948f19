"""Currency helpers for club fees.

Internal arithmetic unit: pence (int, 100 pence = £1).
API / display / storage unit: pounds (float rounded to 2 decimal places).

Fees are only tracked, never charged, so the only concern here is keeping
discounted amounts at currency precision.
"""

from __future__ import annotations

PENCE_PER_POUND: int = 100


def pounds_to_pence(pounds: float) -> int:
    """Convert pounds to pence, to the nearest penny. £1 = 100 pence."""
    return int(round(pounds * PENCE_PER_POUND))


def pence_to_pounds(pence: int) -> float:
    """Convert pence to pounds. 100 pence = £1."""
    return pence / PENCE_PER_POUND


def round_pounds(amount: float) -> float:
    """Round an amount in pounds to whole pence."""
    return pence_to_pounds(pounds_to_pence(amount))
