"""
Capacity-safe registration.

A registration is created by one transaction that first bumps the event's
``registered_count`` with a guarded UPDATE (approved and below capacity) and
then inserts the row. The UPDATE takes the event's write lock, so callers on
the same event are serialized by the database; the unique constraint on
(event_id, student_id) rejects duplicates and rolls the bump back with them.
"""
import logging
from typing import List, Optional, Dict
from sqlalchemy import update, delete, select, func
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session, joinedload
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log,
)
from config import settings
from database.models import Event, EventStatus, Registration
from services.errors import (
    EventNotFound,
    EventNotApproved,
    EventFull,
    DuplicateRegistration,
    RegistrationNotFound,
    ProfileNotFound,
    TransientFailure,
    CampusEventsError,
)
from utils.timezone import get_local_today

logger = logging.getLogger(__name__)


def register_student(db: Session, event_id: int, student_id: int) -> Registration:
    """
    Register a student for an event.

    Raises EventNotFound, EventNotApproved, DuplicateRegistration or EventFull
    when the registration cannot be made, and TransientFailure when the
    database is temporarily unavailable.
    """
    try:
        result = db.execute(
            update(Event)
            .where(
                Event.id == event_id,
                Event.status == EventStatus.APPROVED,
                Event.registered_count < Event.capacity,
            )
            .values(registered_count=Event.registered_count + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            db.rollback()
            raise _rejection_reason(db, event_id, student_id)

        registration = Registration(event_id=event_id, student_id=student_id)
        db.add(registration)
        db.flush()
        db.commit()
    except IntegrityError as e:
        db.rollback()
        duplicate = get_registration_for_event(db, event_id, student_id) is not None
        db.rollback()
        if duplicate:
            logger.info(f"Duplicate registration: event={event_id}, student={student_id}")
            raise DuplicateRegistration(event_id=event_id, student_id=student_id) from e
        # Only the student foreign key is left to violate
        logger.warning(f"Registration rejected for unknown student {student_id}: {e.orig}")
        raise ProfileNotFound(student_id=student_id) from e
    except OperationalError as e:
        db.rollback()
        logger.warning(f"Transient database error registering student {student_id} for event {event_id}: {e}")
        raise TransientFailure(event_id=event_id, student_id=student_id) from e

    db.refresh(registration)
    logger.info(f"Registration {registration.id} created: event={event_id}, student={student_id}")
    return registration


def _rejection_reason(db: Session, event_id: int, student_id: int) -> CampusEventsError:
    """Why the guarded update matched no row"""
    try:
        event = db.get(Event, event_id)
        if event is None:
            return EventNotFound(event_id=event_id)
        if event.status != EventStatus.APPROVED:
            return EventNotApproved(event_id=event_id, status=event.status.value)
        # A replayed request must report the duplicate even when the event is full
        if get_registration_for_event(db, event_id, student_id) is not None:
            return DuplicateRegistration(event_id=event_id, student_id=student_id)
        return EventFull(event_id=event_id, capacity=event.capacity)
    finally:
        db.rollback()


@retry(
    stop=stop_after_attempt(settings.REGISTRATION_RETRY_ATTEMPTS),
    wait=wait_exponential(multiplier=0.1, min=0.1, max=2),
    retry=retry_if_exception_type(TransientFailure),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)
def register_student_with_retry(db: Session, event_id: int, student_id: int) -> Registration:
    """register_student, retried with backoff on TransientFailure only"""
    return register_student(db, event_id, student_id)


def cancel_registration(db: Session, registration_id: int, student_id: int) -> int:
    """
    Delete a student's own registration and release the seat.

    Registrations of other students are reported as not found.
    Returns the event id.
    """
    registration = db.get(Registration, registration_id)
    if registration is None or registration.student_id != student_id:
        raise RegistrationNotFound(registration_id=registration_id)

    event_id = registration.event_id
    try:
        deleted = db.execute(
            delete(Registration)
            .where(Registration.id == registration_id, Registration.student_id == student_id)
            .execution_options(synchronize_session=False)
        )
        if deleted.rowcount != 1:
            # Removed concurrently
            db.rollback()
            raise RegistrationNotFound(registration_id=registration_id)

        db.execute(
            update(Event)
            .where(Event.id == event_id, Event.registered_count > 0)
            .values(registered_count=Event.registered_count - 1)
            .execution_options(synchronize_session=False)
        )
        db.commit()
    except OperationalError as e:
        db.rollback()
        raise TransientFailure(registration_id=registration_id) from e

    logger.info(f"Registration {registration_id} cancelled: event={event_id}, student={student_id}")
    return event_id


def cancel_registration_for_event(db: Session, event_id: int, student_id: int) -> int:
    registration = get_registration_for_event(db, event_id, student_id)
    if registration is None:
        raise RegistrationNotFound(event_id=event_id, student_id=student_id)
    return cancel_registration(db, registration.id, student_id)


def get_registration(db: Session, registration_id: int) -> Registration:
    registration = db.get(Registration, registration_id)
    if registration is None:
        raise RegistrationNotFound(registration_id=registration_id)
    return registration


def get_registration_for_event(db: Session, event_id: int, student_id: int) -> Optional[Registration]:
    return db.execute(
        select(Registration).where(
            Registration.event_id == event_id,
            Registration.student_id == student_id,
        )
    ).scalar_one_or_none()


def is_registered(db: Session, event_id: int, student_id: int) -> bool:
    return get_registration_for_event(db, event_id, student_id) is not None


def count_registrations(db: Session, event_id: int) -> int:
    return db.execute(
        select(func.count(Registration.id)).where(Registration.event_id == event_id)
    ).scalar() or 0


def list_student_registrations(db: Session, student_id: int) -> List[Registration]:
    """A student's registrations with their events, newest first"""
    return list(db.execute(
        select(Registration)
        .options(joinedload(Registration.event).joinedload(Event.organizer))
        .where(Registration.student_id == student_id)
        .order_by(Registration.registered_at.desc(), Registration.id.desc())
    ).scalars().all())


def list_event_registrations(db: Session, event_id: int) -> List[Registration]:
    """Registrants of an event, newest first"""
    return list(db.execute(
        select(Registration)
        .options(joinedload(Registration.student))
        .where(Registration.event_id == event_id)
        .order_by(Registration.registered_at.desc(), Registration.id.desc())
    ).scalars().all())


def student_stats(db: Session, student_id: int) -> Dict[str, int]:
    registrations = list_student_registrations(db, student_id)
    today = get_local_today()
    upcoming = sum(1 for reg in registrations if reg.event.event_date >= today)
    return {"total": len(registrations), "upcoming": upcoming}
