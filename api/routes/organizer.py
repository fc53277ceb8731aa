from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session
from database.database import get_db
from database.models import Profile
from api.auth import get_current_organizer
from api.models.auth import MessageResponse
from api.models.event import EventCreate, EventResponse, EventListResponse, OrganizerStats
from api.models.registration import EventRegistrantsResponse, RegistrantResponse
from services import event_service, registration_service
from utils.export import export_registrations_to_csv, export_registrations_to_excel, export_filename
from utils.permissions import Capability, require_event_owner

router = APIRouter(prefix="/api/organizer", tags=["organizer"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.get("/events", response_model=EventListResponse)
async def my_events(
    user: Profile = Depends(get_current_organizer),
    db: Session = Depends(get_db),
):
    """My events, newest first"""
    events = event_service.list_organizer_events(db, user)
    return EventListResponse(events=[EventResponse.from_event(event) for event in events])


@router.get("/stats", response_model=OrganizerStats)
async def my_stats(
    user: Profile = Depends(get_current_organizer),
    db: Session = Depends(get_db),
):
    return OrganizerStats(**event_service.organizer_stats(db, user))


@router.post("/events", response_model=EventResponse, status_code=201)
async def create_event(
    payload: EventCreate,
    user: Profile = Depends(get_current_organizer),
    db: Session = Depends(get_db),
):
    event = event_service.create_event(db, user, **payload.model_dump())
    return EventResponse.from_event(event)


@router.delete("/events/{event_id}", response_model=MessageResponse)
async def delete_event(
    event_id: int,
    user: Profile = Depends(get_current_organizer),
    db: Session = Depends(get_db),
):
    """Delete an event together with its registrations"""
    event_service.delete_event(db, user, event_id)
    return MessageResponse(detail="Event deleted successfully")


@router.get("/events/{event_id}/registrations", response_model=EventRegistrantsResponse)
async def event_registrations(
    event_id: int,
    user: Profile = Depends(get_current_organizer),
    db: Session = Depends(get_db),
):
    event = event_service.get_event(db, event_id)
    require_event_owner(user, event, Capability.VIEW_REGISTRANTS)

    registrations = registration_service.list_event_registrations(db, event_id)
    return EventRegistrantsResponse(
        event_id=event.id,
        event_title=event.title,
        registrations=[
            RegistrantResponse(
                id=reg.id,
                event_id=reg.event_id,
                student_id=reg.student_id,
                registered_at=reg.registered_at,
                student_name=reg.student.full_name if reg.student else None,
                student_email=reg.student.email if reg.student else None,
            )
            for reg in registrations
        ],
    )


@router.get("/events/{event_id}/export")
async def export_registrations(
    event_id: int,
    format: str = Query("csv", pattern="^(csv|xlsx)$"),
    user: Profile = Depends(get_current_organizer),
    db: Session = Depends(get_db),
):
    """Download registrants as CSV or Excel"""
    event = event_service.get_event(db, event_id)
    require_event_owner(user, event, Capability.VIEW_REGISTRANTS)

    if format == "xlsx":
        content = export_registrations_to_excel(db, event_id)
        media_type = XLSX_MEDIA_TYPE
    else:
        content = export_registrations_to_csv(db, event_id)
        media_type = "text/csv; charset=utf-8"

    filename = export_filename(event, format)
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
