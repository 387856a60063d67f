"""
Custom exception classes and error handlers
Provides consistent error responses across the application
"""

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from typing import Any, Dict, Optional

class ReferralHubException(HTTPException):
    """Base exception class for ReferralHub application"""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code

    def __str__(self) -> str:
        return self.detail

class ValidationError(ReferralHubException):
    """422 Malformed or missing required input"""

    def __init__(self, detail: str, error_code: str = "VALIDATION_ERROR"):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=detail,
            error_code=error_code
        )

class InvalidTransitionError(ReferralHubException):
    """409 Action attempted from a status that does not permit it"""

    def __init__(self, current_status: str, action: str):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Cannot {action} when status is '{current_status}'",
            error_code="INVALID_TRANSITION"
        )
        self.current_status = current_status
        self.action = action

class AuthorizationError(ReferralHubException):
    """403 Actor is not the permitted party"""

    def __init__(self, detail: str = "Not permitted", error_code: str = "FORBIDDEN"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            error_code=error_code
        )

class UnauthorizedException(ReferralHubException):
    """401 Unauthorized"""

    def __init__(self, detail: str = "Unauthorized", error_code: str = "UNAUTHORIZED"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            error_code=error_code,
            headers={"WWW-Authenticate": "Bearer"}
        )

class NotFoundError(ReferralHubException):
    """404 Not Found"""

    def __init__(self, detail: str = "Not found", error_code: str = "NOT_FOUND"):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            error_code=error_code
        )

class RemoteError(ReferralHubException):
    """502 External store/auth/storage call failed"""

    def __init__(
        self,
        detail: str = "Remote service call failed",
        error_code: str = "REMOTE_ERROR"
    ):
        super().__init__(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=detail,
            error_code=error_code
        )

# Business logic exceptions
class BlankFieldError(ValidationError):
    """Required text field is blank"""

    def __init__(self, field: str):
        super().__init__(
            detail=f"{field} is required",
            error_code="BLANK_FIELD"
        )
        self.field = field

class InvalidPaymentAmountError(ValidationError):
    """Payment amount must be positive"""

    def __init__(self, detail: str = "Payment amount must be greater than zero"):
        super().__init__(
            detail=detail,
            error_code="INVALID_PAYMENT_AMOUNT"
        )

class RoleChangeNotAllowedError(ValidationError):
    """Role is fixed at sign-up"""

    def __init__(self):
        super().__init__(
            detail="User type cannot be changed after sign-up",
            error_code="ROLE_IMMUTABLE"
        )

class PaymentInProgressError(InvalidTransitionError):
    """Another payment for the same request is being processed"""

    def __init__(self, current_status: str = "payment_accepted"):
        super().__init__(current_status, "complete_payment")
        self.detail = "A payment for this request is already in progress"
        self.error_code = "PAYMENT_IN_PROGRESS"

class DuplicateDocumentError(ReferralHubException):
    """409 Could not allocate a free document id"""

    def __init__(self, detail: str = "Document already exists", error_code: str = "DUPLICATE"):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            error_code=error_code
        )

async def referralhub_exception_handler(
    request: Request,
    exc: ReferralHubException
) -> JSONResponse:
    """Render application exceptions with a stable error envelope"""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": {
                "code": exc.error_code,
                "message": exc.detail
            }
        },
        headers=exc.headers
    )
