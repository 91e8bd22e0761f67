from datetime import datetime, timedelta

import pytest

from security.cookies import (
    SignupClaim,
    clear_signup_cookies,
    decode_signup_cookies,
    read_cookies,
    set_protocol_cookie,
)
from security.errors import ErrorKind, StateCorrupted

NONCE = "ab" * 32


def _cookies(**overrides):
    values = {"Username": "al", "AttemptEmail": "a@b.com", "ConfirmNonce": NONCE}
    values.update(overrides)
    return {k: v for k, v in values.items() if v is not None}


def test_read_cookies_returns_none_when_any_name_missing():
    assert read_cookies({"a": "1"}, ["a", "b"]) is None
    assert read_cookies(None, ["a"]) is None
    assert read_cookies({"a": "1", "b": "2"}, ["a", "b"]) == {"a": "1", "b": "2"}


def test_decode_signup_cookies_builds_typed_claim():
    assert decode_signup_cookies(_cookies()) == SignupClaim(name="al", email="a@b.com", public_nonce=NONCE)


@pytest.mark.parametrize("missing", ["Username", "AttemptEmail", "ConfirmNonce"])
def test_missing_cookie_is_state_corrupted(missing):
    with pytest.raises(StateCorrupted) as exc_info:
        decode_signup_cookies(_cookies(**{missing: None}))
    assert exc_info.value.kind is ErrorKind.STATE_CORRUPTED


@pytest.mark.parametrize("name,value", [
    ("Username", "al ice"),
    ("Username", ""),
    ("AttemptEmail", "a@b"),
    ("ConfirmNonce", NONCE[:-1] + "Z"),
    ("ConfirmNonce", NONCE + "00"),
])
def test_unsterile_cookie_is_state_corrupted(name, value):
    with pytest.raises(StateCorrupted):
        decode_signup_cookies(_cookies(**{name: value}))


def test_protocol_cookie_attributes(app):
    resp = app.response_class()
    set_protocol_cookie(resp, "Username", "al", datetime.utcnow() + timedelta(days=1))

    header = resp.headers.getlist("Set-Cookie")[0]
    assert header.startswith("Username=al;")
    assert "Path=/" in header
    assert "Secure" in header
    assert "HttpOnly" in header
    assert "Expires=" in header


def test_clear_signup_cookies_zeroes_all_three(app):
    resp = app.response_class()
    clear_signup_cookies(resp)

    headers = resp.headers.getlist("Set-Cookie")
    assert len(headers) == 3
    for header in headers:
        assert "Max-Age=0" in header
        assert "Secure" in header and "HttpOnly" in header
