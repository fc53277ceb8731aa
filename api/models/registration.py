from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
from api.models.event import EventResponse


class RegistrationCreate(BaseModel):
    event_id: int


class RegistrationResponse(BaseModel):
    id: int
    event_id: int
    student_id: int
    registered_at: datetime

    class Config:
        from_attributes = True


class StudentRegistrationResponse(RegistrationResponse):
    event: EventResponse


class RegistrantResponse(RegistrationResponse):
    student_name: Optional[str] = None
    student_email: Optional[str] = None


class EventRegistrantsResponse(BaseModel):
    event_id: int
    event_title: str
    registrations: List[RegistrantResponse]


class StudentStats(BaseModel):
    total: int
    upcoming: int
