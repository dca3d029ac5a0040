"""
Unit Tests for the exception taxonomy
"""
import pytest

from practitioner_passport.core.exceptions import (
    AuthorizationError,
    InvalidVerificationStatusError,
    InvalidVerificationTypeError,
    PassportError,
    ResourceNotFoundError,
    StorageError,
    UserNotFoundError,
    ValidationError,
    VerificationNotFoundError,
    error_response,
)


class TestStatusCodes:
    """Each error kind maps to one HTTP status"""

    @pytest.mark.parametrize("error,status_code", [
        (ValidationError("bad"), 400),
        (InvalidVerificationTypeError("x", ["qualification"]), 400),
        (InvalidVerificationStatusError("x", ["verified"]), 400),
        (AuthorizationError(), 403),
        (VerificationNotFoundError("activity", "1"), 404),
        (UserNotFoundError("1"), 404),
        (StorageError("down"), 503),
        (PassportError("boom"), 500),
    ])
    def test_status_code(self, error, status_code):
        assert error.status_code == status_code


class TestErrorDetails:
    """Test codes, messages and details"""

    def test_verification_not_found(self):
        error = VerificationNotFoundError("qualification", "abc")

        assert isinstance(error, ResourceNotFoundError)
        assert error.code == "VERIFICATION_NOT_FOUND"
        assert str(error) == "No qualification verification with ID 'abc'"
        assert error.details == {
            "resource_type": "Verification",
            "resource_id": "abc",
            "verification_type": "qualification",
        }

    def test_validation_error_field(self):
        assert ValidationError("Missing id", field="id").details == {"field": "id"}
        assert ValidationError("Missing id").details == {}

    def test_invalid_type_lists_allowed(self):
        error = InvalidVerificationTypeError("competency", ["qualification", "session"])

        assert error.code == "INVALID_VERIFICATION_TYPE"
        assert error.details["field"] == "type"
        assert error.details["allowed_types"] == ["qualification", "session"]
        assert "competency" in error.message

    def test_storage_error_operation(self):
        assert StorageError("down", operation="connect").details == {"operation": "connect"}
        assert StorageError("down").details == {}

    def test_error_response(self):
        body = error_response(UserNotFoundError("u1"))

        assert body == {
            "success": False,
            "error": {
                "code": "USER_NOT_FOUND",
                "message": "User with ID 'u1' not found",
                "details": {"resource_type": "User", "resource_id": "u1"},
            },
        }
