"""
Custom Exceptions for Practitioner Passport
===========================================

Use these instead of generic Exception to:
1. Make errors more specific and debuggable
2. Enable proper error handling at API layer
3. Provide meaningful error messages to users

Usage:
    from practitioner_passport.core.exceptions import VerificationNotFoundError

    if not updated:
        raise VerificationNotFoundError("qualification", item_id)
"""

from typing import Optional, Any, Dict, Iterable


class PassportError(Exception):
    """Base exception for all Practitioner Passport errors"""

    status_code = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }


# ============================================
# Authorization Errors
# ============================================

class AuthorizationError(PassportError):
    """User not authorized for this action"""

    status_code = 403

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message, code="NOT_AUTHORIZED")


# ============================================
# Resource Errors (404-type)
# ============================================

class ResourceNotFoundError(PassportError):
    """Base class for not found errors"""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} with ID '{resource_id}' not found",
            code=f"{resource_type.upper()}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id}
        )


class VerificationNotFoundError(ResourceNotFoundError):
    """No verifiable item matches the id/type combination"""

    def __init__(self, verification_type: str, item_id: str):
        super().__init__("Verification", item_id)
        self.message = f"No {verification_type} verification with ID '{item_id}'"
        self.args = (self.message,)
        self.details["verification_type"] = verification_type


class UserNotFoundError(ResourceNotFoundError):
    """User not found"""

    def __init__(self, user_id: str):
        super().__init__("User", user_id)


# ============================================
# Validation Errors (400-type)
# ============================================

class ValidationError(PassportError):
    """Input validation failed"""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class InvalidVerificationTypeError(ValidationError):
    """Type discriminator does not name a known verification source"""

    def __init__(self, verification_type: str, allowed_types: Iterable[str]):
        allowed = list(allowed_types)
        super().__init__(
            f"Unknown verification type '{verification_type}'. Allowed: {', '.join(allowed)}",
            field="type"
        )
        self.code = "INVALID_VERIFICATION_TYPE"
        self.details["allowed_types"] = allowed


class InvalidVerificationStatusError(ValidationError):
    """Requested status is not a permitted transition target"""

    def __init__(self, status: str, allowed_statuses: Iterable[str]):
        allowed = list(allowed_statuses)
        super().__init__(
            f"Invalid status '{status}'. Allowed: {', '.join(allowed)}",
            field="status"
        )
        self.code = "INVALID_VERIFICATION_STATUS"
        self.details["allowed_statuses"] = allowed


# ============================================
# Storage Errors
# ============================================

class StorageError(PassportError):
    """Storage operation failed"""

    status_code = 503

    def __init__(self, message: str, operation: Optional[str] = None):
        super().__init__(message, code="STORAGE_ERROR")
        if operation:
            self.details["operation"] = operation


# ============================================
# Helper function for API responses
# ============================================

def error_response(error: PassportError) -> Dict[str, Any]:
    """Convert exception to API error response format"""
    return {
        "success": False,
        "error": error.to_dict()
    }
