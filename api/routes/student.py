from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from database.database import get_db
from database.models import Profile
from api.auth import get_current_student
from api.models.event import EventResponse
from api.models.registration import StudentRegistrationResponse, StudentStats
from services import registration_service

router = APIRouter(prefix="/api/student", tags=["student"])


@router.get("/registrations", response_model=List[StudentRegistrationResponse])
async def my_registrations(
    user: Profile = Depends(get_current_student),
    db: Session = Depends(get_db),
):
    """My registrations, newest first"""
    registrations = registration_service.list_student_registrations(db, user.id)
    return [
        StudentRegistrationResponse(
            id=reg.id,
            event_id=reg.event_id,
            student_id=reg.student_id,
            registered_at=reg.registered_at,
            event=EventResponse.from_event(reg.event),
        )
        for reg in registrations
    ]


@router.get("/stats", response_model=StudentStats)
async def my_stats(
    user: Profile = Depends(get_current_student),
    db: Session = Depends(get_db),
):
    return StudentStats(**registration_service.student_stats(db, user.id))
