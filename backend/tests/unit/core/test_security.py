"""
Unit Tests for Security Module
Tests for: JWT access tokens
"""
import pytest
from datetime import datetime, timedelta
from jose import jwt
from fastapi import HTTPException

from practitioner_passport.core.config import settings
from practitioner_passport.core.security import create_access_token, decode_token


class TestAccessToken:
    """Test JWT token creation and decoding"""

    def test_round_trip_claims(self):
        token = create_access_token({"sub": "user-1", "role": "mentor"})

        payload = decode_token(token)

        assert payload["sub"] == "user-1"
        assert payload["role"] == "mentor"
        assert payload["type"] == "access"

    def test_custom_expiry(self):
        token = create_access_token({"sub": "user-1"}, expires_delta=timedelta(minutes=5))

        payload = jwt.get_unverified_claims(token)
        expires = datetime.utcfromtimestamp(payload["exp"])

        assert timedelta(minutes=4) < expires - datetime.utcnow() <= timedelta(minutes=5)

    def test_expired_token_rejected(self):
        token = create_access_token({"sub": "user-1"}, expires_delta=timedelta(seconds=-1))

        with pytest.raises(HTTPException) as exc_info:
            decode_token(token)

        assert exc_info.value.status_code == 401

    def test_foreign_signature_rejected(self):
        token = jwt.encode({"sub": "user-1", "type": "access"}, "another-secret", algorithm=settings.JWT_ALGORITHM)

        with pytest.raises(HTTPException) as exc_info:
            decode_token(token)

        assert exc_info.value.status_code == 401

    def test_garbage_rejected(self):
        with pytest.raises(HTTPException):
            decode_token("not-a-jwt")
