import enum
from typing import Dict, FrozenSet, Optional
from database.models import Profile, UserRole, Event, Registration, EventStatus
from services.errors import PermissionDenied


class Capability(str, enum.Enum):
    REGISTER = "register"
    CREATE_EVENT = "create_event"
    DELETE_EVENT = "delete_event"
    VIEW_REGISTRANTS = "view_registrants"
    UPLOAD_POSTER = "upload_poster"
    REVIEW_EVENT = "review_event"
    VIEW_ALL_EVENTS = "view_all_events"


ROLE_CAPABILITIES: Dict[UserRole, FrozenSet[Capability]] = {
    UserRole.STUDENT: frozenset({
        Capability.REGISTER,
    }),
    UserRole.ORGANIZER: frozenset({
        Capability.CREATE_EVENT,
        Capability.DELETE_EVENT,
        Capability.VIEW_REGISTRANTS,
        Capability.UPLOAD_POSTER,
    }),
    UserRole.FACULTY: frozenset({
        Capability.REVIEW_EVENT,
        Capability.VIEW_ALL_EVENTS,
    }),
}

DASHBOARD_ROUTES: Dict[UserRole, str] = {
    UserRole.STUDENT: "/dashboard/student",
    UserRole.ORGANIZER: "/dashboard/organizer",
    UserRole.FACULTY: "/dashboard/faculty",
}


def has_capability(user: Optional[Profile], capability: Capability) -> bool:
    """Whether the user's role grants the capability"""
    if user is None:
        return False
    return capability in ROLE_CAPABILITIES.get(user.role, frozenset())


def require_capability(user: Optional[Profile], capability: Capability):
    if not has_capability(user, capability):
        raise PermissionDenied(
            _DENIED_MESSAGES.get(capability, PermissionDenied.message),
            capability=capability.value,
        )


_DENIED_MESSAGES = {
    Capability.REGISTER: "Only students can register for events.",
    Capability.CREATE_EVENT: "Only organizers can create events.",
    Capability.DELETE_EVENT: "Only organizers can delete events.",
    Capability.VIEW_REGISTRANTS: "Only organizers can view registrations.",
    Capability.UPLOAD_POSTER: "Only organizers can upload posters.",
    Capability.REVIEW_EVENT: "Only faculty can approve or reject events.",
}


def dashboard_for(role) -> str:
    """Dashboard route for a role, home page for anything unknown"""
    try:
        return DASHBOARD_ROUTES[UserRole(role)]
    except (ValueError, KeyError):
        return "/"


def owns_event(user: Profile, event: Event) -> bool:
    return event.organizer_id == user.id


def can_manage_event(user: Profile, event: Event, capability: Capability = Capability.DELETE_EVENT) -> bool:
    """Delete / view registrants: organizer who owns the event"""
    return has_capability(user, capability) and owns_event(user, event)


def require_event_owner(user: Profile, event: Event, capability: Capability = Capability.DELETE_EVENT):
    if not can_manage_event(user, event, capability):
        raise PermissionDenied("You can only manage your own events.", event_id=event.id)


def can_view_event(user: Optional[Profile], event: Event) -> bool:
    """Approved events are public; otherwise owner or faculty"""
    if event.status == EventStatus.APPROVED:
        return True
    if user is None:
        return False
    return owns_event(user, event) or has_capability(user, Capability.VIEW_ALL_EVENTS)


def owns_registration(user: Profile, registration: Registration) -> bool:
    return registration.student_id == user.id
