# tests/test_concurrency.py
"""
Simultaneous registrations against one event.

Every attempt runs in its own thread with its own session, released together
by a barrier, so the database is the only thing serializing them.
"""

import threading
from collections import Counter

import pytest

from conftest import make_event, make_profile
from database.models import Event, UserRole
from services import registration_service
from services.errors import CampusEventsError


def _register_concurrently(session_factory, event_id, student_ids):
    barrier = threading.Barrier(len(student_ids))
    outcomes = {}
    lock = threading.Lock()

    def attempt(index, student_id):
        session = session_factory()
        try:
            barrier.wait()
            registration = registration_service.register_student_with_retry(session, event_id, student_id)
            outcome = ("ok", registration.id)
        except CampusEventsError as e:
            outcome = (e.code, None)
        finally:
            session.close()
        with lock:
            outcomes[index] = outcome

    threads = [
        threading.Thread(target=attempt, args=(index, student_id))
        for index, student_id in enumerate(student_ids)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=60)

    assert len(outcomes) == len(student_ids)
    return [outcomes[i] for i in range(len(student_ids))]


def _stored_counts(session_factory, event_id):
    session = session_factory()
    try:
        event = session.get(Event, event_id)
        return event.registered_count, registration_service.count_registrations(session, event_id)
    finally:
        session.close()


@pytest.mark.parametrize("capacity", [1, 5])
def test_overbooking_is_impossible(db, session_factory, organizer, capacity):
    event = make_event(db, organizer, capacity=capacity)
    students = [make_profile(db, UserRole.STUDENT).id for _ in range(capacity + 5)]

    outcomes = _register_concurrently(session_factory, event.id, students)

    codes = Counter(code for code, _ in outcomes)
    assert codes == Counter({"ok": capacity, "event_full": 5})
    assert _stored_counts(session_factory, event.id) == (capacity, capacity)


def test_two_registrants_one_seat(db, session_factory, organizer):
    event = make_event(db, organizer, capacity=1)
    a = make_profile(db, UserRole.STUDENT).id
    b = make_profile(db, UserRole.STUDENT).id

    outcomes = _register_concurrently(session_factory, event.id, [a, b])

    assert sorted(code for code, _ in outcomes) == ["event_full", "ok"]
    assert _stored_counts(session_factory, event.id) == (1, 1)


def test_same_registrant_concurrently(db, session_factory, organizer):
    event = make_event(db, organizer, capacity=5)
    student_id = make_profile(db, UserRole.STUDENT).id

    outcomes = _register_concurrently(session_factory, event.id, [student_id, student_id])

    assert sorted(code for code, _ in outcomes) == ["duplicate_registration", "ok"]
    assert _stored_counts(session_factory, event.id) == (1, 1)


def test_registrations_and_cancellations_keep_count_in_sync(db, session_factory, organizer):
    event = make_event(db, organizer, capacity=4)
    holders = [make_profile(db, UserRole.STUDENT).id for _ in range(4)]
    registration_ids = [
        registration_service.register_student(db, event.id, student_id).id for student_id in holders
    ]
    newcomers = [make_profile(db, UserRole.STUDENT).id for _ in range(4)]

    barrier = threading.Barrier(8)
    errors = []

    def cancel(registration_id, student_id):
        session = session_factory()
        try:
            barrier.wait()
            registration_service.cancel_registration(session, registration_id, student_id)
        except CampusEventsError as e:
            errors.append(e.code)
        finally:
            session.close()

    def register(student_id):
        session = session_factory()
        try:
            barrier.wait()
            registration_service.register_student_with_retry(session, event.id, student_id)
        except CampusEventsError as e:
            errors.append(e.code)
        finally:
            session.close()

    threads = [threading.Thread(target=cancel, args=pair) for pair in zip(registration_ids, holders)]
    threads += [threading.Thread(target=register, args=(student_id,)) for student_id in newcomers]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=60)

    assert set(errors) <= {"event_full"}
    registered_count, rows = _stored_counts(session_factory, event.id)
    assert registered_count == rows
    # All holders cancelled; every newcomer that did not hit a full event holds a seat
    assert rows == 4 - len(errors)
