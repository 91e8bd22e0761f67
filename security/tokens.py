"""Session tokens: signed JWTs carried in the AccessToken cookie."""
import logging
from datetime import datetime, timedelta

import jwt
from flask import current_app

from security.errors import Unauthorized

logger = logging.getLogger(__name__)

_REQUIRED_CLAIMS = ("sub", "name", "email")


def token_expiry() -> datetime:
    lifetime = current_app.config.get("ACCESS_TOKEN_LIFETIME_SECONDS", 24 * 60 * 60)
    return datetime.utcnow() + timedelta(seconds=lifetime)


def issue(login_id: int, name: str, email: str, expires_at: datetime = None) -> str:
    expires_at = expires_at or token_expiry()
    # PyJWT expects "sub" to be a string
    payload = {
        "sub": str(login_id),
        "name": name,
        "email": email,
        "iat": datetime.utcnow(),
        "exp": expires_at,
    }
    raw = jwt.encode(
        payload,
        current_app.config["JWT_SECRET_KEY"],
        algorithm=current_app.config.get("JWT_ALGORITHM", "HS256"),
    )
    return raw if isinstance(raw, str) else raw.decode("utf-8")


def decode(token: str) -> dict:
    if not token or not isinstance(token, str):
        raise Unauthorized("empty token")
    try:
        return jwt.decode(
            token.strip(),
            current_app.config["JWT_SECRET_KEY"],
            algorithms=[current_app.config.get("JWT_ALGORITHM", "HS256")],
            options={"require": ["exp", "sub"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise Unauthorized(f"token expired: {exc}") from exc
    except jwt.PyJWTError as exc:
        raise Unauthorized(f"token rejected: {exc}") from exc


def validate(token: str, require_fresh_claims: bool = False) -> bool:
    """
    Signature and expiry are always checked. ``require_fresh_claims`` also
    demands a complete identity payload; comment posting asks for it.
    """
    try:
        claims = decode(token)
    except Unauthorized as exc:
        logger.info("Session token invalid: %s", exc)
        return False

    if require_fresh_claims:
        return all(isinstance(claims.get(k), str) and claims.get(k) for k in _REQUIRED_CLAIMS)
    return True
