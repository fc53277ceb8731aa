import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session
from database.database import get_db
from database.models import Profile, EventStatus
from api.auth import get_optional_user
from api.models.event import EventResponse, EventListResponse, EventDetailResponse
from services import event_service, registration_service, storage
from services.errors import NotFound
from utils.permissions import has_capability, Capability

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/events", tags=["events"])


@router.get("/", response_model=EventListResponse)
async def list_events(
    search: Optional[str] = Query(None, max_length=100),
    category: Optional[str] = Query(None, max_length=100),
    db: Session = Depends(get_db),
):
    """Approved events, soonest first"""
    events = event_service.list_approved_events(db, search=search, category=category)
    logger.debug(f"Catalog query search={search!r} category={category!r}: {len(events)} events")
    return EventListResponse(events=[EventResponse.from_event(event) for event in events])


@router.get("/categories", response_model=List[str])
async def list_categories(db: Session = Depends(get_db)):
    return event_service.list_categories(db)


@router.get("/{event_id}/poster")
async def get_event_poster(
    event_id: int,
    user: Optional[Profile] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    """Redirect to the poster file"""
    event = event_service.get_visible_event(db, event_id, user)
    if not event.poster_path:
        raise NotFound("Poster not found.", event_id=event_id)
    return RedirectResponse(url=storage.get_public_url(event.poster_path))


@router.get("/{event_id}", response_model=EventDetailResponse)
async def get_event(
    event_id: int,
    user: Optional[Profile] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    """Event details; for students also whether they are registered"""
    event = event_service.get_visible_event(db, event_id, user)

    is_registered = False
    can_register = False
    if has_capability(user, Capability.REGISTER):
        is_registered = registration_service.is_registered(db, event.id, user.id)
        can_register = (
            not is_registered
            and event.status == EventStatus.APPROVED
            and event.seats_left > 0
        )

    return EventDetailResponse(
        **EventResponse.from_event(event).model_dump(),
        is_registered=is_registered,
        can_register=can_register,
    )
