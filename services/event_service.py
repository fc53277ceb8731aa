import logging
from datetime import date, time
from typing import List, Optional, Dict
from sqlalchemy import select, func, or_
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, joinedload
from config import settings
from database.models import Event, EventStatus, Profile
from services import storage
from services.errors import (
    EventNotFound,
    InvalidStatusTransition,
    ValidationFailed,
    StorageError,
    TransientFailure,
)
from utils.permissions import (
    Capability,
    require_capability,
    require_event_owner,
    can_view_event,
)
from utils.timezone import get_utc_now

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "General"


def create_event(
    db: Session,
    organizer: Profile,
    *,
    title: str,
    capacity: int,
    event_date: date,
    description: Optional[str] = None,
    venue: Optional[str] = None,
    category: Optional[str] = None,
    event_time: Optional[time] = None,
    poster_path: Optional[str] = None,
) -> Event:
    """Create an event owned by the organizer"""
    require_capability(organizer, Capability.CREATE_EVENT)

    title = (title or "").strip()
    if not title:
        raise ValidationFailed("Event title is required.")
    if capacity is None or capacity <= 0:
        raise ValidationFailed("Capacity must be a positive number.")
    if poster_path and not storage.file_exists(poster_path):
        raise ValidationFailed("Poster was not found. Please upload it again.")

    status = EventStatus.APPROVED if settings.EVENT_AUTO_APPROVE else EventStatus.PENDING
    event = Event(
        title=title,
        description=(description or "").strip() or None,
        venue=(venue or "").strip() or None,
        category=(category or "").strip() or DEFAULT_CATEGORY,
        capacity=capacity,
        registered_count=0,
        event_date=event_date,
        event_time=event_time,
        poster_path=poster_path,
        organizer_id=organizer.id,
        status=status,
    )
    db.add(event)
    db.commit()
    db.refresh(event)

    logger.info(f"Event {event.id} created by organizer {organizer.id} with status {status.value}")
    return event


def get_event(db: Session, event_id: int) -> Event:
    event = db.execute(
        select(Event).options(joinedload(Event.organizer)).where(Event.id == event_id)
    ).scalar_one_or_none()
    if event is None:
        raise EventNotFound(event_id=event_id)
    return event


def get_visible_event(db: Session, event_id: int, user: Optional[Profile]) -> Event:
    """Event detail; events the user may not see are reported as not found"""
    event = get_event(db, event_id)
    if not can_view_event(user, event):
        raise EventNotFound(event_id=event_id)
    return event


def _review(db: Session, faculty: Profile, event_id: int, new_status: EventStatus) -> Event:
    require_capability(faculty, Capability.REVIEW_EVENT)

    event = get_event(db, event_id)
    # Approved and rejected are terminal
    if event.status != EventStatus.PENDING:
        raise InvalidStatusTransition(
            f"Event is already {event.status.value}.",
            event_id=event_id,
            status=event.status.value,
        )

    event.status = new_status
    event.reviewed_by = faculty.id
    event.reviewed_at = get_utc_now()
    db.commit()
    db.refresh(event)

    logger.info(f"Event {event_id} {new_status.value} by faculty {faculty.id}")
    return event


def approve_event(db: Session, faculty: Profile, event_id: int) -> Event:
    return _review(db, faculty, event_id, EventStatus.APPROVED)


def reject_event(db: Session, faculty: Profile, event_id: int) -> Event:
    return _review(db, faculty, event_id, EventStatus.REJECTED)


def delete_event(db: Session, organizer: Profile, event_id: int):
    """
    Delete an event and its registrations in one transaction, then remove
    the poster. A poster that cannot be removed is left for the cleanup job.
    """
    event = get_event(db, event_id)
    require_event_owner(organizer, event)

    poster_path = event.poster_path
    registrations = len(event.registrations)
    try:
        db.delete(event)
        db.commit()
    except OperationalError as e:
        db.rollback()
        raise TransientFailure(event_id=event_id) from e

    logger.info(f"Event {event_id} deleted by organizer {organizer.id}, {registrations} registrations removed")

    if poster_path:
        try:
            storage.delete_file(poster_path)
        except StorageError as e:
            logger.error(f"Failed to delete poster {poster_path} of event {event_id}: {e}")


def list_approved_events(
    db: Session,
    search: Optional[str] = None,
    category: Optional[str] = None,
) -> List[Event]:
    """Approved events, soonest first, optionally searched and filtered"""
    query = (
        select(Event)
        .options(joinedload(Event.organizer))
        .where(Event.status == EventStatus.APPROVED)
    )

    if category:
        query = query.where(Event.category == category)

    search = (search or "").strip()
    if search:
        # % and _ in the search text match literally
        query = query.where(or_(
            Event.title.icontains(search, autoescape=True),
            Event.description.icontains(search, autoescape=True),
            Event.venue.icontains(search, autoescape=True),
        ))

    query = query.order_by(Event.event_date.asc(), Event.event_time.asc(), Event.id.asc())
    return list(db.execute(query).scalars().all())


def list_categories(db: Session) -> List[str]:
    return list(db.execute(
        select(Event.category)
        .where(Event.status == EventStatus.APPROVED)
        .distinct()
        .order_by(Event.category.asc())
    ).scalars().all())


def list_organizer_events(db: Session, organizer: Profile) -> List[Event]:
    """Organizer's own events, newest first"""
    require_capability(organizer, Capability.CREATE_EVENT)
    return list(db.execute(
        select(Event)
        .where(Event.organizer_id == organizer.id)
        .order_by(Event.created_at.desc(), Event.id.desc())
    ).scalars().all())


def organizer_stats(db: Session, organizer: Profile) -> Dict[str, int]:
    events = list_organizer_events(db, organizer)
    approved = sum(1 for e in events if e.status == EventStatus.APPROVED)
    return {"total": len(events), "approved": approved}


def list_events_by_status(db: Session, faculty: Profile, status: EventStatus = EventStatus.PENDING) -> List[Event]:
    """Events awaiting or past review, newest first"""
    require_capability(faculty, Capability.REVIEW_EVENT)
    return list(db.execute(
        select(Event)
        .options(joinedload(Event.organizer))
        .where(Event.status == status)
        .order_by(Event.created_at.desc(), Event.id.desc())
    ).scalars().all())


def faculty_stats(db: Session, faculty: Profile) -> Dict[str, int]:
    require_capability(faculty, Capability.REVIEW_EVENT)
    rows = db.execute(
        select(Event.status, func.count(Event.id)).group_by(Event.status)
    ).all()
    counts = {status.value: 0 for status in EventStatus}
    for status, count in rows:
        counts[EventStatus(status).value] = count
    return counts


def referenced_poster_paths(db: Session) -> set:
    return set(db.execute(
        select(Event.poster_path).where(Event.poster_path.is_not(None))
    ).scalars().all())
