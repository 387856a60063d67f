"""
Authentication schemas for request/response validation
"""

from pydantic import BaseModel, Field
from typing import Any, Dict, Optional

from referralhub.api.v1.users.schemas import UserProfileResponse

class SignUpRequest(BaseModel):
    """Request to create an account and its profile"""
    email: str = Field(..., max_length=254, examples=["jane@college.edu"])
    password: str = Field(..., min_length=1)
    user_type: str = Field(..., description="student or professional", examples=["student"])
    display_name: Optional[str] = Field(None, max_length=100)
    profile: Dict[str, Any] = Field(
        default_factory=dict,
        description="Role-specific fields such as institution or company"
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "email": "jane@college.edu",
                "password": "secret123",
                "user_type": "student",
                "display_name": "Jane",
                "profile": {"institution": "IIT Delhi", "major": "CS"}
            }
        }
    }

class SignInRequest(BaseModel):
    email: str = Field(..., max_length=254)
    password: str = Field(..., min_length=1)

class ResetPasswordRequest(BaseModel):
    email: str = Field(..., max_length=254)

class AuthResponse(BaseModel):
    """Tokens plus the signed-in user's profile"""
    uid: str
    email: str
    id_token: Optional[str] = None
    refresh_token: Optional[str] = None
    profile: Optional[UserProfileResponse] = None
