# tests/test_permissions.py

import pytest

from database.models import Event, EventStatus, Profile, UserRole
from services.errors import PermissionDenied
from utils.permissions import (
    Capability,
    ROLE_CAPABILITIES,
    can_manage_event,
    can_view_event,
    dashboard_for,
    has_capability,
    require_capability,
)


def _profile(role, profile_id=1):
    return Profile(id=profile_id, email=f"{role.value}@campus.edu", full_name="Test", role=role, password_hash="x")


@pytest.mark.parametrize("role, capability, allowed", [
    (UserRole.STUDENT, Capability.REGISTER, True),
    (UserRole.STUDENT, Capability.CREATE_EVENT, False),
    (UserRole.ORGANIZER, Capability.CREATE_EVENT, True),
    (UserRole.ORGANIZER, Capability.REGISTER, False),
    (UserRole.ORGANIZER, Capability.REVIEW_EVENT, False),
    (UserRole.FACULTY, Capability.REVIEW_EVENT, True),
    (UserRole.FACULTY, Capability.DELETE_EVENT, False),
])
def test_role_capabilities(role, capability, allowed):
    assert has_capability(_profile(role), capability) is allowed


def test_anonymous_has_no_capabilities():
    for capability in Capability:
        assert not has_capability(None, capability)


def test_every_capability_is_granted_to_some_role():
    granted = set().union(*ROLE_CAPABILITIES.values())

    assert granted == set(Capability)


def test_require_capability_message():
    with pytest.raises(PermissionDenied) as exc_info:
        require_capability(_profile(UserRole.STUDENT), Capability.REVIEW_EVENT)

    assert exc_info.value.message == "Only faculty can approve or reject events."


@pytest.mark.parametrize("role, route", [
    ("student", "/dashboard/student"),
    (UserRole.ORGANIZER, "/dashboard/organizer"),
    ("faculty", "/dashboard/faculty"),
    ("admin", "/"),
    (None, "/"),
])
def test_dashboard_for(role, route):
    assert dashboard_for(role) == route


def test_event_management_and_visibility():
    owner = _profile(UserRole.ORGANIZER, profile_id=1)
    other = _profile(UserRole.ORGANIZER, profile_id=2)
    faculty = _profile(UserRole.FACULTY, profile_id=3)
    event = Event(id=10, organizer_id=1, status=EventStatus.PENDING)

    assert can_manage_event(owner, event)
    assert not can_manage_event(other, event)
    assert not can_manage_event(faculty, event)

    assert can_view_event(owner, event)
    assert can_view_event(faculty, event)
    assert not can_view_event(other, event)
    assert not can_view_event(None, event)

    event.status = EventStatus.APPROVED
    assert can_view_event(None, event)
