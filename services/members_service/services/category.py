"""Membership category derivation.

Members carry either a ``groups`` list (current registrations) or a legacy
single ``group`` string plus gender / payment-manager flags. ``MemberCategory``
is the one normalised shape business logic reads; build it with
``normalize_member`` at the read boundary.
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional

YOUTH_GROUPS = ("U-13", "U-15", "U-18")
LEGACY_GROUPS = {
    "men": "Men",
    "women": "Women",
    "u-13": "U-13",
    "u-15": "U-15",
    "u-18": "U-18",
}


def derive_category(
    gender: Optional[str],
    has_payment_manager: Optional[bool],
    legacy_group: Optional[str] = None,
    groups: Optional[Iterable[str]] = None,
) -> str:
    """Return the primary display category for a member.

    Priority:
      1. groups, most specific first: U-13, U-15, U-18, Women, Men
      2. payment-manager flag -> "juniors"
      3. gender -> "men" / "women"
      4. legacy group string
      5. "men"
    """
    groups = list(groups or [])
    for youth in YOUTH_GROUPS:
        if youth in groups:
            return youth
    if "Women" in groups:
        return "women"
    if "Men" in groups:
        return "men"

    if has_payment_manager is True:
        return "juniors"

    if gender == "Male":
        return "men"
    if gender == "Female":
        return "women"

    if legacy_group in ("women", "juniors", "U-13", "U-15", "U-18"):
        return legacy_group
    return "men"


def normalize_groups(
    groups: Optional[Iterable[str]], legacy_group: Optional[str] = None
) -> list[str]:
    """Cohort list for a member, falling back to the legacy single group."""
    normalized = [g for g in (groups or []) if g]
    if normalized:
        return normalized
    if legacy_group and legacy_group.lower() in LEGACY_GROUPS:
        return [LEGACY_GROUPS[legacy_group.lower()]]
    return []


@dataclass(frozen=True)
class MemberCategory:
    category: str
    groups: list[str] = field(default_factory=list)

    @property
    def is_youth(self) -> bool:
        return any(g in YOUTH_GROUPS for g in self.groups) or self.category == "juniors"


def normalize_member(member) -> MemberCategory:
    """Build the normalised category view of a Member or RegistrationRequest row."""
    return MemberCategory(
        category=derive_category(
            getattr(member, "gender", None),
            getattr(member, "has_payment_manager", None),
            getattr(member, "group", None),
            getattr(member, "groups", None),
        ),
        groups=normalize_groups(
            getattr(member, "groups", None), getattr(member, "group", None)
        ),
    )
