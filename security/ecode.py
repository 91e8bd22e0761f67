"""One-time confirmation codes mailed to a pending login."""
import logging
from dataclasses import dataclass
from datetime import datetime

from flask import current_app
from sqlalchemy.exc import IntegrityError

from models import db
from models.ecode import ECode
from models.login import Login
from models.nonce import Nonce
from security.codes import random_numeric_string
from security.errors import GenerationExhausted

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedECode:
    login_id: int
    login_name: str
    login_email: str
    ecode_id: int
    nonce_code: str
    nonce_exp: datetime


def generate_ecode(login_id: int) -> ECode:
    """
    Draws a numeric code and binds it to ``login_id``.
    Collisions (seen up front or raised by the unique index) are retried up to
    CODE_GENERATION_ATTEMPTS times; the caller owns the commit.
    """
    length = current_app.config.get("ECODE_LENGTH", 8)
    max_attempts = current_app.config.get("CODE_GENERATION_ATTEMPTS", 4)

    for attempt in range(1, max_attempts + 1):
        code = random_numeric_string(length)
        if ECode.query.filter_by(code=code).first():
            logger.info("ECode collision on attempt %d for login_id=%s", attempt, login_id)
            continue

        row = ECode(login_id=login_id, code=code)
        try:
            with db.session.begin_nested():
                db.session.add(row)
        except IntegrityError:
            logger.info("ECode insert race on attempt %d for login_id=%s", attempt, login_id)
            continue

        logger.debug("ECode generated for login_id=%s after %d attempt(s)", login_id, attempt)
        return row

    raise GenerationExhausted(f"no free ecode after {max_attempts} attempts for login_id={login_id}")


def resolve_ecode(code: str, name: str, email: str):
    """
    Joins the code to its nonce and its pending login. The (name, email) pair
    comes from the client's own cookies, so a code only resolves for the
    signup it was issued to.
    """
    row = (
        db.session.query(ECode, Nonce, Login)
        .join(Nonce, Nonce.ecode_id == ECode.id)
        .join(Login, Login.id == ECode.login_id)
        .filter(
            ECode.code == code,
            Login.name == name,
            Login.email == email,
            Login.confirmed.is_(False),
        )
        .first()
    )
    if not row:
        return None

    ecode, nonce, login = row
    return ResolvedECode(
        login_id=login.id,
        login_name=login.name,
        login_email=login.email,
        ecode_id=ecode.id,
        nonce_code=nonce.secret_code,
        nonce_exp=nonce.expires_at,
    )


def find_pending_ecode(name: str, email: str):
    """Live (ECode, Nonce) pair for an unconfirmed login, or None."""
    return (
        db.session.query(ECode, Nonce)
        .join(Nonce, Nonce.ecode_id == ECode.id)
        .join(Login, Login.id == ECode.login_id)
        .filter(Login.name == name, Login.email == email, Login.confirmed.is_(False))
        .first()
    )


def delete_ecode(ecode_id: int) -> bool:
    row = ECode.query.filter_by(id=ecode_id).first()
    if not row:
        return False
    db.session.delete(row)
    db.session.flush()
    return True
