"""User profile and directory endpoints"""

from fastapi import APIRouter, Depends, File, Query, UploadFile

from referralhub.core.config import settings
from referralhub.core.database import get_store
from referralhub.core.security import get_current_profile, get_object_store
from referralhub.models.user import UserProfile, UserRole
from referralhub.services.document_store import DocumentStore
from referralhub.services.storage import ObjectStore
from referralhub.services.user_service import ProfileService
from .schemas import (
    DirectoryEntry,
    DirectoryResponse,
    PhotoUploadResponse,
    ProfileUpdate,
    UserProfileResponse,
)

router = APIRouter()

@router.get("/me", response_model=UserProfileResponse)
async def get_my_profile(current_user: UserProfile = Depends(get_current_profile)):
    """Get current user's profile"""
    return UserProfileResponse.from_profile(current_user)

@router.patch("/me", response_model=UserProfileResponse)
async def update_my_profile(
    profile_update: ProfileUpdate,
    current_user: UserProfile = Depends(get_current_profile),
    store: DocumentStore = Depends(get_store)
):
    """Update current user's profile"""
    service = ProfileService(store)
    profile = await service.update_profile(
        current_user.uid,
        profile_update.model_dump(exclude_unset=True)
    )
    return UserProfileResponse.from_profile(profile)

@router.post("/me/photo", response_model=PhotoUploadResponse)
async def upload_profile_photo(
    file: UploadFile = File(...),
    current_user: UserProfile = Depends(get_current_profile),
    store: DocumentStore = Depends(get_store),
    object_store: ObjectStore = Depends(get_object_store)
):
    """Upload a new profile image"""
    service = ProfileService(store, object_store=object_store)
    data = await file.read()
    url = await service.upload_profile_image(
        current_user.uid,
        data,
        file.filename or "",
        file.content_type
    )
    return PhotoUploadResponse(photo_url=url)

@router.get("/professionals", response_model=DirectoryResponse)
async def list_professionals(
    limit: int = Query(settings.DIRECTORY_LIMIT, ge=1, le=100),
    current_user: UserProfile = Depends(get_current_profile),
    store: DocumentStore = Depends(get_store)
):
    """Professionals ordered by successful referrals"""
    service = ProfileService(store)
    profiles = await service.list_by_role(UserRole.PROFESSIONAL, limit)
    items = [DirectoryEntry.from_profile(p) for p in profiles]
    return DirectoryResponse(items=items, total=len(items))

@router.get("/students", response_model=DirectoryResponse)
async def list_students(
    limit: int = Query(settings.DIRECTORY_LIMIT, ge=1, le=100),
    current_user: UserProfile = Depends(get_current_profile),
    store: DocumentStore = Depends(get_store)
):
    service = ProfileService(store)
    profiles = await service.list_by_role(UserRole.STUDENT, limit)
    items = [DirectoryEntry.from_profile(p) for p in profiles]
    return DirectoryResponse(items=items, total=len(items))

@router.get("/{uid}", response_model=DirectoryEntry)
async def get_user(
    uid: str,
    current_user: UserProfile = Depends(get_current_profile),
    store: DocumentStore = Depends(get_store)
):
    """Public profile card"""
    service = ProfileService(store)
    return DirectoryEntry.from_profile(await service.get_profile(uid))
