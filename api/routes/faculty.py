from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from database.database import get_db
from database.models import Profile, EventStatus
from api.auth import get_current_faculty
from api.models.event import EventResponse, EventListResponse, FacultyStats
from services import event_service

router = APIRouter(prefix="/api/faculty", tags=["faculty"])


@router.get("/events", response_model=EventListResponse)
async def events_for_review(
    status: EventStatus = Query(EventStatus.PENDING),
    user: Profile = Depends(get_current_faculty),
    db: Session = Depends(get_db),
):
    """Events with the given status, newest first"""
    events = event_service.list_events_by_status(db, user, status)
    return EventListResponse(events=[EventResponse.from_event(event) for event in events])


@router.get("/stats", response_model=FacultyStats)
async def review_stats(
    user: Profile = Depends(get_current_faculty),
    db: Session = Depends(get_db),
):
    return FacultyStats(**event_service.faculty_stats(db, user))


@router.post("/events/{event_id}/approve", response_model=EventResponse)
async def approve_event(
    event_id: int,
    user: Profile = Depends(get_current_faculty),
    db: Session = Depends(get_db),
):
    event = event_service.approve_event(db, user, event_id)
    return EventResponse.from_event(event)


@router.post("/events/{event_id}/reject", response_model=EventResponse)
async def reject_event(
    event_id: int,
    user: Profile = Depends(get_current_faculty),
    db: Session = Depends(get_db),
):
    event = event_service.reject_event(db, user, event_id)
    return EventResponse.from_event(event)
