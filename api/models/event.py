from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date, time, datetime
from database.models import Event, EventStatus
from services.storage import get_public_url


class EventCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    venue: Optional[str] = Field(default=None, max_length=255)
    category: Optional[str] = Field(default=None, max_length=100)
    capacity: int = Field(gt=0)
    event_date: date
    event_time: Optional[time] = None
    poster_path: Optional[str] = None


class EventResponse(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    venue: Optional[str] = None
    category: str
    capacity: int
    registered_count: int
    seats_left: int
    event_date: date
    event_time: Optional[time] = None
    status: EventStatus
    poster_path: Optional[str] = None
    poster_url: Optional[str] = None
    organizer_id: int
    organizer_name: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_event(cls, event: Event) -> "EventResponse":
        return cls(
            id=event.id,
            title=event.title,
            description=event.description,
            venue=event.venue,
            category=event.category,
            capacity=event.capacity,
            registered_count=event.registered_count,
            seats_left=event.seats_left,
            event_date=event.event_date,
            event_time=event.event_time,
            status=event.status,
            poster_path=event.poster_path,
            poster_url=get_public_url(event.poster_path),
            organizer_id=event.organizer_id,
            organizer_name=event.organizer.full_name if event.organizer else None,
            created_at=event.created_at,
        )


class EventDetailResponse(EventResponse):
    is_registered: bool = False
    can_register: bool = False


class EventListResponse(BaseModel):
    events: List[EventResponse]


class OrganizerStats(BaseModel):
    total: int
    approved: int


class FacultyStats(BaseModel):
    pending: int
    approved: int
    rejected: int
