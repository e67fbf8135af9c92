"""
Profile API endpoints
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from uuid import UUID

from app.api.deps import get_current_user_id
from app.database import get_db
from app.schemas.profile import ProfileUpsert, ProfileResponse
from app.services.profile_service import profile_service

router = APIRouter(prefix="/api/profiles", tags=["profiles"])


@router.post("", response_model=ProfileResponse)
async def upsert_profile(
    request: ProfileUpsert,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Create or update the caller's profile"""
    return ProfileResponse.model_validate(profile_service.upsert_profile(db, user_id, request))


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return ProfileResponse.model_validate(profile_service.get_profile(db, user_id))
