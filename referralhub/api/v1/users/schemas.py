"""
User profile schemas
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Union
from datetime import datetime

from referralhub.models.user import UserProfile, UserRole

class ProfileUpdate(BaseModel):
    """
    Editable profile fields

    Unknown keys are passed through so the service can reject them with a
    proper error instead of silently dropping them.
    """
    display_name: Optional[str] = Field(None, max_length=100)
    photo_url: Optional[str] = None

    institution: Optional[str] = None
    major: Optional[str] = None
    graduation_year: Optional[Union[str, int]] = None
    student_id: Optional[str] = None
    current_semester: Optional[str] = None

    company: Optional[str] = None
    job_title: Optional[str] = None
    experience: Optional[str] = None
    industry: Optional[str] = None
    skills: Optional[List[str]] = None

    user_type: Optional[UserRole] = None

    model_config = ConfigDict(extra="allow")

class UserProfileResponse(BaseModel):
    uid: str
    email: str
    user_type: UserRole
    display_name: str
    photo_url: str
    referral_code: str

    referrals_generated: int
    active_referrals: int
    successful_referrals: int
    total_rewards: float
    sent_requests: int

    institution: Optional[str] = None
    major: Optional[str] = None
    graduation_year: Optional[Union[str, int]] = None
    student_id: Optional[str] = None
    current_semester: Optional[str] = None

    company: Optional[str] = None
    job_title: Optional[str] = None
    experience: Optional[str] = None
    industry: Optional[str] = None
    skills: Optional[List[str]] = None

    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_profile(cls, profile: UserProfile) -> "UserProfileResponse":
        return cls.model_validate(profile.model_dump())

class DirectoryEntry(BaseModel):
    """Public card shown in the professional and student directories"""
    uid: str
    name: str
    user_type: UserRole
    photo_url: str = ""
    successful_referrals: int = 0

    institution: Optional[str] = None
    major: Optional[str] = None
    graduation_year: Optional[Union[str, int]] = None

    company: Optional[str] = None
    job_title: Optional[str] = None
    industry: Optional[str] = None
    skills: Optional[List[str]] = None

    @classmethod
    def from_profile(cls, profile: UserProfile) -> "DirectoryEntry":
        data = profile.model_dump(include=set(cls.model_fields) - {"name"})
        return cls(name=profile.name, **data)

class DirectoryResponse(BaseModel):
    items: List[DirectoryEntry]
    total: int

class PhotoUploadResponse(BaseModel):
    photo_url: str
