"""
Custom exceptions and error handling for Trip Crew.

Defines application-specific exceptions with error codes for consistent
error handling across Lambda functions and client communication. Every
exception carries the HTTP status it maps to, so handlers never guess.

Usage:
    from core.errors import ConflictError, ErrorCode

    raise ConflictError("bob@x.com already invited", code=ErrorCode.ALREADY_INVITED)
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Error codes for client-facing error messages."""

    # Authentication errors
    UNAUTHENTICATED = "UNAUTHENTICATED"
    INVALID_TOKEN = "INVALID_TOKEN"

    # Permission errors
    FORBIDDEN = "FORBIDDEN"
    TRIP_ACCESS_DENIED = "TRIP_ACCESS_DENIED"
    OWNER_ONLY = "OWNER_ONLY"
    OWNER_PROTECTED = "OWNER_PROTECTED"
    OWNER_CANNOT_LEAVE = "OWNER_CANNOT_LEAVE"
    NOT_RESOURCE_OWNER = "NOT_RESOURCE_OWNER"
    EMAIL_MISMATCH = "EMAIL_MISMATCH"

    # Lookup errors
    NOT_FOUND = "NOT_FOUND"
    INVITE_NOT_FOUND = "INVITE_NOT_FOUND"
    INVITE_ALREADY_CONSUMED = "INVITE_ALREADY_CONSUMED"
    EXPENSE_NOT_FOUND = "EXPENSE_NOT_FOUND"
    PARTICIPANT_NOT_FOUND = "PARTICIPANT_NOT_FOUND"

    # Conflict errors
    ALREADY_MEMBER = "ALREADY_MEMBER"
    ALREADY_INVITED = "ALREADY_INVITED"

    # Invitation lifecycle
    INVITE_EXPIRED = "INVITE_EXPIRED"
    EMAIL_DELIVERY_FAILED = "EMAIL_DELIVERY_FAILED"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_REQUEST = "INVALID_REQUEST"

    # System errors
    PERSISTENCE_ERROR = "PERSISTENCE_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


USER_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.UNAUTHENTICATED: "You need to sign in to continue.",
    ErrorCode.INVALID_TOKEN: "Your session has expired. Please sign in again.",
    ErrorCode.FORBIDDEN: "You don't have permission to do that.",
    ErrorCode.TRIP_ACCESS_DENIED: "You don't have access to this trip.",
    ErrorCode.OWNER_ONLY: "Only the trip owner can do that.",
    ErrorCode.OWNER_PROTECTED: "The trip owner can't be removed from the trip.",
    ErrorCode.OWNER_CANNOT_LEAVE: "The trip owner can't leave the trip. Transfer ownership first.",
    ErrorCode.NOT_RESOURCE_OWNER: "You can only change items you created.",
    ErrorCode.EMAIL_MISMATCH: "This invitation was sent to a different email address.",
    ErrorCode.NOT_FOUND: "The requested item was not found.",
    ErrorCode.INVITE_NOT_FOUND: "Invitation not found.",
    ErrorCode.INVITE_ALREADY_CONSUMED: "This invitation has already been used.",
    ErrorCode.EXPENSE_NOT_FOUND: "Expense not found.",
    ErrorCode.PARTICIPANT_NOT_FOUND: "This person is no longer part of the trip.",
    ErrorCode.ALREADY_MEMBER: "This user is already a member of the trip.",
    ErrorCode.ALREADY_INVITED: "This user already has a pending invitation.",
    ErrorCode.INVITE_EXPIRED: "This invitation has expired. Ask for a new one.",
    ErrorCode.EMAIL_DELIVERY_FAILED: "The invitation was created but the email could not be sent. Share the link instead.",
    ErrorCode.VALIDATION_ERROR: "Your request contains invalid information. Please check and try again.",
    ErrorCode.INVALID_REQUEST: "Invalid request format. Please try again.",
    ErrorCode.PERSISTENCE_ERROR: "The service is temporarily unavailable. Please try again.",
    ErrorCode.INTERNAL_ERROR: "An unexpected error occurred. Please try again.",
}


class TripCrewError(Exception):
    """Base exception for all Trip Crew errors."""

    status_code: int = 500

    def __init__(self, message: str, code: ErrorCode = ErrorCode.INTERNAL_ERROR):
        self.message = message
        self.code = code
        super().__init__(message)

    @property
    def user_message(self) -> str:
        return USER_MESSAGES.get(self.code, USER_MESSAGES[ErrorCode.INTERNAL_ERROR])


class AuthenticationError(TripCrewError):
    """No valid authenticated principal."""

    status_code = 401

    def __init__(self, message: str, code: ErrorCode = ErrorCode.UNAUTHENTICATED):
        super().__init__(message, code)


class ForbiddenError(TripCrewError):
    """Authenticated but not permitted: not a member, not owner, not the author."""

    status_code = 403

    def __init__(self, message: str, code: ErrorCode = ErrorCode.FORBIDDEN):
        super().__init__(message, code)


class EmailMismatchError(ForbiddenError):
    """Invitation accepted by a principal whose verified email differs."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.EMAIL_MISMATCH):
        super().__init__(message, code)


class NotFoundError(TripCrewError):
    """Resource or token absent, or token already consumed."""

    status_code = 404

    def __init__(self, message: str, code: ErrorCode = ErrorCode.NOT_FOUND):
        super().__init__(message, code)


class ConflictError(TripCrewError):
    """Duplicate invite or already-member."""

    status_code = 409

    def __init__(self, message: str, code: ErrorCode = ErrorCode.ALREADY_INVITED):
        super().__init__(message, code)


class ExpiredError(TripCrewError):
    """Invitation token past its expiry."""

    status_code = 410

    def __init__(self, message: str, code: ErrorCode = ErrorCode.INVITE_EXPIRED):
        super().__init__(message, code)


class ValidationError(TripCrewError):
    """Malformed input: non-positive amount, empty title, bad email."""

    status_code = 400

    def __init__(self, message: str, code: ErrorCode = ErrorCode.VALIDATION_ERROR):
        super().__init__(message, code)


class PersistenceError(TripCrewError):
    """Database unavailable or a transaction could not be committed."""

    status_code = 503

    def __init__(self, message: str, code: ErrorCode = ErrorCode.PERSISTENCE_ERROR):
        super().__init__(message, code)


class InviteEmailError(TripCrewError):
    """The invitation was committed but the email could not be delivered.

    Carries the created invitation so the caller can offer the link manually.
    """

    status_code = 502

    def __init__(self, message: str, result: Any, code: ErrorCode = ErrorCode.EMAIL_DELIVERY_FAILED):
        self.result = result
        super().__init__(message, code)
