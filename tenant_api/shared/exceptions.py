# tenant_api/shared/exceptions.py
from fastapi import HTTPException, status

AUTHENTICATE_HEADERS = {"WWW-Authenticate": "Cookie"}


# Authentication Exceptions
class UnauthenticatedError(HTTPException):
    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=message,
            headers=AUTHENTICATE_HEADERS,
        )


class SessionExpiredError(HTTPException):
    def __init__(self) -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session expired",
            headers=AUTHENTICATE_HEADERS,
        )


# Organization Context Exceptions
class NoOrganizationContextError(HTTPException):
    def __init__(self) -> None:
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=(
                "Organization context is required. "
                "Create or join an organization to continue."
            ),
        )


class NotAMemberError(HTTPException):
    def __init__(self, organization_id: str | None = None) -> None:
        self.organization_id = organization_id
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=(
                "You are not a member of this organization. "
                "Please switch to an organization you belong to."
            ),
        )


# Authorization Exceptions
class PermissionDeniedError(HTTPException):
    def __init__(self, reason: str = "Insufficient permissions") -> None:
        self.reason = reason
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=reason)


# Store Exceptions
class StoreUnavailableError(HTTPException):
    def __init__(self, message: str = "Membership store unavailable") -> None:
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=message
        )


# Resource Not Found Exceptions
class OrganizationNotFoundError(HTTPException):
    def __init__(self) -> None:
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND, detail="Organization not found"
        )


class MemberNotFoundError(HTTPException):
    def __init__(self, message: str = "Member not found") -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=message)


class OutlineNotFoundError(HTTPException):
    def __init__(self, outline_id: str) -> None:
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f'Outline with ID "{outline_id}" not found in your organization',
        )


# Validation / Request Exceptions
class InvalidDataError(HTTPException):
    def __init__(self, message: str = "Invalid request data") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


class ConflictError(HTTPException):
    def __init__(self, message: str) -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=message)
