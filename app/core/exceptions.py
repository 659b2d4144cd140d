"""
Domain exceptions for the waitlist.

Each exception carries the HTTP status it maps to; the handlers registered in
main.py turn them into ``{"success": false, ...}`` responses.
"""
from typing import List, Optional


class WaitlistError(Exception):
    """Base waitlist exception"""
    status_code = 500

    def __init__(self, message: str, details: Optional[str] = None):
        self.message = message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"success": False, "message": self.message}


class ValidationError(WaitlistError):
    """Raised when signup input is malformed. Carries every field violation."""
    status_code = 400

    def __init__(self, errors: List[dict], message: str = "Validation failed"):
        super().__init__(message)
        self.errors = errors

    def to_dict(self) -> dict:
        return {"success": False, "message": self.message, "errors": self.errors}


class DuplicateEmailError(WaitlistError):
    """Raised when the email is already on the waitlist"""
    status_code = 400

    def __init__(self, message: str = "You are already on our waitlist!"):
        super().__init__(message)


class InvalidReferralCodeError(WaitlistError):
    """Raised when a signup names a referral code nobody owns"""
    status_code = 400

    def __init__(self, code: str):
        super().__init__("Invalid referral code", details=code)
        self.code = code


class NotFoundError(WaitlistError):
    """Raised when a resource is not found"""
    status_code = 404


class UnauthorizedError(WaitlistError):
    """Raised when the admin credential is missing or wrong"""
    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class RateLimitedError(WaitlistError):
    """Raised when a client exceeds the request window"""
    status_code = 429

    def __init__(self, message: str = "Too many requests. Please try again later."):
        super().__init__(message)


class ReferralCodeExhaustedError(WaitlistError):
    """Raised when no unused referral code could be generated"""
    status_code = 500

    def __init__(self, attempts: int):
        super().__init__("Could not generate a unique referral code. Please try again.")
        self.attempts = attempts


class StorageError(WaitlistError):
    """Raised when database operations fail"""
    status_code = 500
