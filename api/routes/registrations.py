from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from database.database import get_db
from database.models import Profile
from api.auth import get_current_student
from api.models.auth import MessageResponse
from api.models.registration import RegistrationCreate, RegistrationResponse
from services import registration_service
from services.errors import RegistrationNotFound
from utils.permissions import owns_registration

router = APIRouter(prefix="/api/registrations", tags=["registrations"])


@router.post("/", response_model=RegistrationResponse, status_code=201)
def create_registration(
    registration: RegistrationCreate,
    user: Profile = Depends(get_current_student),
    db: Session = Depends(get_db),
):
    """Register the current student for an event"""
    new_registration = registration_service.register_student_with_retry(db, registration.event_id, user.id)
    return RegistrationResponse.model_validate(new_registration)


@router.get("/{registration_id}", response_model=RegistrationResponse)
async def get_registration(
    registration_id: int,
    user: Profile = Depends(get_current_student),
    db: Session = Depends(get_db),
):
    registration = registration_service.get_registration(db, registration_id)
    if not owns_registration(user, registration):
        raise RegistrationNotFound(registration_id=registration_id)
    return RegistrationResponse.model_validate(registration)


@router.delete("/{registration_id}", response_model=MessageResponse)
async def cancel_registration(
    registration_id: int,
    user: Profile = Depends(get_current_student),
    db: Session = Depends(get_db),
):
    registration_service.cancel_registration(db, registration_id, user.id)
    return MessageResponse(detail="Registration cancelled successfully")


@router.delete("/event/{event_id}", response_model=MessageResponse)
async def cancel_registration_for_event(
    event_id: int,
    user: Profile = Depends(get_current_student),
    db: Session = Depends(get_db),
):
    """Cancel the current student's registration for an event"""
    registration_service.cancel_registration_for_event(db, event_id, user.id)
    return MessageResponse(detail="Registration cancelled successfully")
