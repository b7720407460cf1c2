# tests/test_auth.py
from datetime import timedelta

import pytest

from app.services.auth import JWTError, create_access_token, decode_access_token


def test_token_round_trip():
    token = create_access_token("js-1")
    assert decode_access_token(token).sub == "js-1"


def test_expired_token_is_rejected():
    token = create_access_token("js-1", expires_delta=timedelta(minutes=-5))
    with pytest.raises(JWTError):
        decode_access_token(token)


def test_garbage_token_is_rejected():
    with pytest.raises(JWTError):
        decode_access_token("not-a-jwt")
