from datetime import datetime, timedelta

import jwt
import pytest

from config import TestConfig
from security import tokens
from security.errors import Unauthorized


def test_issue_then_decode_round_trips_identity(app):
    token = tokens.issue(5, "al", "a@b.com")
    claims = tokens.decode(token)

    assert claims["sub"] == "5"
    assert claims["name"] == "al"
    assert claims["email"] == "a@b.com"


def test_default_expiry_is_a_real_window(app):
    token = tokens.issue(5, "al", "a@b.com")
    claims = tokens.decode(token)

    lifetime = claims["exp"] - claims["iat"]
    assert lifetime >= 24 * 60 * 60 - 5


def test_expired_token_is_invalid(app):
    token = tokens.issue(5, "al", "a@b.com", expires_at=datetime.utcnow() - timedelta(seconds=5))

    assert tokens.validate(token) is False
    with pytest.raises(Unauthorized):
        tokens.decode(token)


def test_token_signed_with_other_key_is_invalid(app):
    forged = jwt.encode(
        {"sub": "5", "name": "al", "email": "a@b.com", "exp": datetime.utcnow() + timedelta(hours=1)},
        "not-the-server-secret-but-long-enough-anyway",
        algorithm="HS256",
    )

    assert tokens.validate(forged) is False


def test_fresh_claims_require_identity_payload(app):
    thin = jwt.encode(
        {"sub": "5", "exp": datetime.utcnow() + timedelta(hours=1)},
        TestConfig.JWT_SECRET_KEY,
        algorithm="HS256",
    )

    assert tokens.validate(thin, require_fresh_claims=False) is True
    assert tokens.validate(thin, require_fresh_claims=True) is False


def test_garbage_is_invalid(app):
    assert tokens.validate("") is False
    assert tokens.validate("not.a.jwt") is False
