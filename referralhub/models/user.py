"""User profile model"""

from pydantic import Field
from typing import List, Optional, Union
import enum

from .base import TimestampedDocument

class UserRole(str, enum.Enum):
    STUDENT = "student"
    PROFESSIONAL = "professional"

# Profile fields that only the service layer may write
COUNTER_FIELDS = (
    "referrals_generated",
    "active_referrals",
    "successful_referrals",
    "total_rewards",
    "sent_requests",
)

STUDENT_FIELDS = ("institution", "major", "graduation_year", "student_id", "current_semester")
PROFESSIONAL_FIELDS = ("company", "job_title", "experience", "industry", "skills")

class UserProfile(TimestampedDocument):
    """Profile record stored in the users collection, keyed by auth uid"""

    uid: str
    email: str
    user_type: UserRole
    display_name: str = ""
    photo_url: str = Field("", alias="photoURL")
    referral_code: str = ""

    # Counters
    referrals_generated: int = 0
    active_referrals: int = 0
    successful_referrals: int = 0
    total_rewards: float = 0
    sent_requests: int = 0

    # Student fields
    institution: Optional[str] = None
    major: Optional[str] = None
    graduation_year: Optional[Union[str, int]] = None
    student_id: Optional[str] = None
    current_semester: Optional[str] = None

    # Professional fields
    company: Optional[str] = None
    job_title: Optional[str] = None
    experience: Optional[str] = None
    industry: Optional[str] = None
    skills: Optional[List[str]] = None

    @property
    def is_student(self) -> bool:
        return self.user_type == UserRole.STUDENT

    @property
    def is_professional(self) -> bool:
        return self.user_type == UserRole.PROFESSIONAL

    @property
    def name(self) -> str:
        return self.display_name or self.email
