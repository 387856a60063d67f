"""
Authentication API routes
"""

from fastapi import APIRouter, Depends, status

from referralhub.core.security import get_current_user
from referralhub.services.auth_provider import AuthIdentity
from referralhub.services.session import AuthSession
from referralhub.api.v1.users.schemas import UserProfileResponse
from .dependencies import get_auth_session
from .schemas import (
    AuthResponse,
    ResetPasswordRequest,
    SignInRequest,
    SignUpRequest,
)

router = APIRouter()

def _auth_response(session: AuthSession) -> AuthResponse:
    identity = session.current_user
    profile = session.current_profile
    return AuthResponse(
        uid=identity.uid,
        email=identity.email,
        id_token=identity.id_token,
        refresh_token=identity.refresh_token,
        profile=UserProfileResponse.from_profile(profile) if profile else None
    )

@router.post(
    "/signup",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Sign up",
    description="Create an account and its student or professional profile"
)
async def sign_up(
    request: SignUpRequest,
    session: AuthSession = Depends(get_auth_session)
):
    additional_data = dict(request.profile)
    if request.display_name:
        additional_data["display_name"] = request.display_name

    await session.sign_up(request.email, request.password, request.user_type, additional_data)
    return _auth_response(session)

@router.post(
    "/signin",
    response_model=AuthResponse,
    summary="Sign in",
    description="Sign in with email and password"
)
async def sign_in(
    request: SignInRequest,
    session: AuthSession = Depends(get_auth_session)
):
    await session.sign_in(request.email, request.password)
    return _auth_response(session)

@router.post("/signout", summary="Sign out")
async def sign_out(
    identity: AuthIdentity = Depends(get_current_user),
    session: AuthSession = Depends(get_auth_session)
):
    """Revoke the caller's tokens"""
    session.current_user = identity
    await session.sign_out()
    return {"message": "Signed out successfully"}

@router.post("/reset-password", summary="Send password reset email")
async def reset_password(
    request: ResetPasswordRequest,
    session: AuthSession = Depends(get_auth_session)
):
    await session.reset_password(request.email)
    return {"message": "Password reset email sent"}
