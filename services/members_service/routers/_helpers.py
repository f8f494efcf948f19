"""Shared helper functions for members service routers."""

from services.members_service.models import Member
from services.members_service.schemas import (
    MemberDetailResponse,
    MemberResponse,
    ProfileResponse,
)
from services.members_service.services.category import normalize_member
from services.members_service.services.delegation import Subject


def member_to_response(member: Member, detail: bool = False) -> MemberResponse:
    """Serialise a member with its derived category."""
    schema = MemberDetailResponse if detail else MemberResponse
    response = schema.model_validate(member)
    view = normalize_member(member)
    response.category = view.category
    response.groups = view.groups
    return response


def profile_to_response(subject: Subject) -> ProfileResponse:
    return ProfileResponse(
        id=subject.id,
        kind=subject.kind,
        name=subject.name,
        category=subject.category,
        groups=list(subject.groups),
    )
