from fastapi import APIRouter, Depends, UploadFile, File
from database.models import Profile
from api.auth import get_current_user
from api.models.storage import UploadResponse
from services import storage
from utils.permissions import Capability, require_capability

router = APIRouter(prefix="/api/storage", tags=["storage"])


@router.post("/posters", response_model=UploadResponse, status_code=201)
async def upload_poster(
    file: UploadFile = File(...),
    user: Profile = Depends(get_current_user),
):
    """Upload a poster; the returned path goes into the new event's poster_path"""
    require_capability(user, Capability.UPLOAD_POSTER)
    content = await file.read()
    path = storage.upload_file(content, file.filename or "")
    return UploadResponse(path=path, url=storage.get_public_url(path))
