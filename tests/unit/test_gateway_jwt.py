"""Unit tests for seller access-token verification."""

from datetime import timedelta
from unittest.mock import patch

import pytest
from jose import jwt

from config.settings import settings
from src.kb_common.errors import InvalidTokenError
from src.kb_gateway.auth.jwt_handler import create_access_token, decode_access_token


def test_access_token_contains_correct_claims() -> None:
    token = create_access_token("seller-123")
    payload = jwt.get_unverified_claims(token)
    assert payload["sub"] == "seller-123"
    assert payload["type"] == "access"


def test_decode_valid_access_token() -> None:
    payload = decode_access_token(create_access_token("seller-abc"))
    assert payload["sub"] == "seller-abc"


def test_expired_token_raises() -> None:
    with patch(
        "src.kb_gateway.auth.jwt_handler._ACCESS_EXPIRE",
        timedelta(seconds=-1),
    ):
        token = create_access_token("seller-abc")
    with pytest.raises(InvalidTokenError):
        decode_access_token(token)


def test_tampered_token_raises() -> None:
    token = create_access_token("seller-abc")
    with pytest.raises(InvalidTokenError):
        decode_access_token(token[:-4] + "xxxx")


def test_wrong_token_type_raises() -> None:
    token = jwt.encode(
        {"sub": "seller-abc", "type": "refresh"},
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )
    with pytest.raises(InvalidTokenError):
        decode_access_token(token)


def test_missing_subject_raises() -> None:
    token = jwt.encode({"type": "access"}, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    with pytest.raises(InvalidTokenError):
        decode_access_token(token)
