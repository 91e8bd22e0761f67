"""
Cookie transport for protocol state.

Signup state lives entirely client-side in three cookies. Nothing read back
from a cookie is trusted: ``decode_signup_cookies`` re-sterilizes every value
and turns the raw map into a typed ``SignupClaim`` before business logic
sees it.
"""
from dataclasses import dataclass
from datetime import datetime

from flask import current_app

from security.errors import StateCorrupted
from security.sterilizer import is_sterile, sterilize_basic_string, sterilize_email, sterilize_nonce

USERNAME_COOKIE = "Username"
ATTEMPT_EMAIL_COOKIE = "AttemptEmail"
CONFIRM_NONCE_COOKIE = "ConfirmNonce"
ACCESS_TOKEN_COOKIE = "AccessToken"

SIGNUP_COOKIES = (CONFIRM_NONCE_COOKIE, USERNAME_COOKIE, ATTEMPT_EMAIL_COOKIE)


@dataclass(frozen=True)
class SignupClaim:
    name: str
    email: str
    public_nonce: str


def read_cookies(cookie_map, names):
    """Values for ``names``, or None if any of them is absent."""
    if not cookie_map:
        return None
    values = {}
    for name in names:
        value = cookie_map.get(name)
        if value is None:
            return None
        values[name] = value
    return values


def decode_signup_cookies(cookie_map) -> SignupClaim:
    values = read_cookies(cookie_map, SIGNUP_COOKIES)
    if values is None:
        raise StateCorrupted("signup cookies missing")

    name = values[USERNAME_COOKIE]
    if not is_sterile(name, sterilize_basic_string):
        raise StateCorrupted("Username cookie failed sterilization")

    email = values[ATTEMPT_EMAIL_COOKIE]
    if not is_sterile(email, sterilize_email):
        raise StateCorrupted("AttemptEmail cookie failed sterilization")

    public_nonce = values[CONFIRM_NONCE_COOKIE]
    if not is_sterile(public_nonce, sterilize_nonce):
        raise StateCorrupted("ConfirmNonce cookie failed sterilization")

    return SignupClaim(name=name, email=email, public_nonce=public_nonce)


def set_protocol_cookie(resp, name: str, value: str, expires: datetime):
    max_age = max(int((expires - datetime.utcnow()).total_seconds()), 0)
    resp.set_cookie(
        name,
        value,
        expires=expires,
        max_age=max_age,
        path="/",
        secure=current_app.config.get("COOKIE_SECURE", True),
        httponly=True,
    )
    return resp


def clear_cookie(resp, name: str):
    resp.set_cookie(
        name,
        "",
        expires=0,
        max_age=0,
        path="/",
        secure=current_app.config.get("COOKIE_SECURE", True),
        httponly=True,
    )
    return resp


def clear_signup_cookies(resp):
    for name in SIGNUP_COOKIES:
        clear_cookie(resp, name)
    return resp
