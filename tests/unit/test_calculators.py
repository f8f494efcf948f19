"""Unit tests for the pure helpers: category, age, fees and currency."""

from datetime import date

import pytest
from libs.common.currency import pence_to_pounds, pounds_to_pence, round_pounds
from services.events_service.services.fees import calculate_fee, is_student_discount
from services.members_service.models import MemberType
from services.members_service.services.age import calculate_age
from services.members_service.services.category import (
    derive_category,
    normalize_groups,
    normalize_member,
)
from tests.factories import MemberFactory

# ---------------------------------------------------------------------------
# Category
# ---------------------------------------------------------------------------


@pytest.mark.unit
@pytest.mark.parametrize(
    "groups, expected",
    [
        (["Men", "U-15"], "U-15"),
        (["U-18", "U-13"], "U-13"),
        (["Men", "Women"], "women"),
        (["Men"], "men"),
    ],
)
def test_groups_take_priority_most_specific_first(groups, expected):
    assert derive_category("Male", True, "women", groups) == expected


@pytest.mark.unit
def test_payment_manager_flag_means_juniors():
    assert derive_category("Male", True) == "juniors"


@pytest.mark.unit
def test_gender_used_when_no_groups():
    assert derive_category("Female", False) == "women"
    assert derive_category("Male", None) == "men"


@pytest.mark.unit
def test_legacy_group_and_default():
    assert derive_category(None, None, "juniors") == "juniors"
    assert derive_category(None, None, "U-13") == "U-13"
    assert derive_category(None, None, "something-else") == "men"
    assert derive_category(None, None) == "men"


@pytest.mark.unit
def test_normalize_groups_falls_back_to_legacy_group():
    assert normalize_groups(["Women"], "men") == ["Women"]
    assert normalize_groups([], "women") == ["Women"]
    assert normalize_groups(None, "U-15") == ["U-15"]
    assert normalize_groups(None, "juniors") == []


@pytest.mark.unit
def test_normalize_member_builds_view():
    member = MemberFactory.create(groups=[], group="u-18", gender="Female")
    view = normalize_member(member)
    assert view.category == "women"
    assert view.groups == ["U-18"]
    assert view.is_youth


# ---------------------------------------------------------------------------
# Age
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_age_is_month_accurate():
    assert calculate_age(2000, 6, today=date(2026, 5, 31)) == 25
    assert calculate_age(2000, 6, today=date(2026, 6, 1)) == 26


@pytest.mark.unit
def test_age_without_month_is_year_difference():
    assert calculate_age(2000, today=date(2026, 1, 1)) == 26


@pytest.mark.unit
def test_age_missing_or_future_year_is_none():
    assert calculate_age(None) is None
    assert calculate_age(2030, today=date(2026, 1, 1)) is None


# ---------------------------------------------------------------------------
# Fees
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_student_fee_is_discounted_exactly():
    assert calculate_fee(20, "student") == 15.0
    assert calculate_fee(20, MemberType.STUDENT) == 15.0


@pytest.mark.unit
def test_standard_fee_is_unchanged():
    assert calculate_fee(20, MemberType.STANDARD) == 20.0
    assert calculate_fee(20, None) == 20.0
    assert calculate_fee(None, "student") == 0.0


@pytest.mark.unit
def test_discounted_fee_is_kept_to_currency_precision():
    assert calculate_fee(10.99, "student") == 8.24


@pytest.mark.unit
def test_is_student_discount_is_case_insensitive():
    assert is_student_discount("Student")
    assert not is_student_discount("standard")
    assert not is_student_discount(None)


# ---------------------------------------------------------------------------
# Currency
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_pounds_and_pence_conversion():
    assert pounds_to_pence(15.0) == 1500
    assert pounds_to_pence(0.1 + 0.2) == 30
    assert pence_to_pounds(1999) == 19.99
    assert round_pounds(8.2425) == 8.24
