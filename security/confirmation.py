"""
Account confirmation state machine.

A Login moves PendingSignup -> PendingConfirmation -> Confirmed. Signup
creates the Login together with one live (ECode, Nonce) pair; confirmation
proves the mailed code and the client-held public nonce, then marks the Login
confirmed and removes the pair in a single transaction. A Confirmed login
never holds a pair again, so a replayed confirmation cannot resolve.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models import db
from models.ecode import ECode
from models.login import Login
from models.nonce import Nonce
from security import nonce as nonce_service
from security.cookies import SignupClaim, decode_signup_cookies
from security.ecode import generate_ecode, resolve_ecode, delete_ecode, find_pending_ecode
from security.errors import (
    AccountError,
    ExpiredNonce,
    InvalidCode,
    PersistenceError,
    StateCorrupted,
    Unauthorized,
    ValidationError,
)
from security.nonce import NonceCheck
from security.password import hash_password, verify_password, burn_password_check
from security.sterilizer import is_sterile, sterilize_basic_string, sterilize_email, sterilize_ecode
from security import tokens

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PendingSignup:
    login_id: int
    name: str
    email: str
    code: str
    public_nonce: str
    nonce_expires_at: datetime

    @property
    def username_expires_at(self) -> datetime:
        days = current_app.config.get("USERNAME_COOKIE_DAYS", 5)
        return min(datetime.utcnow() + timedelta(days=days), self.nonce_expires_at)


@dataclass(frozen=True)
class ConfirmedLogin:
    login_id: int
    name: str
    email: str
    access_token: str
    token_expires_at: datetime


def _issue_pair(login: Login) -> PendingSignup:
    ecode = generate_ecode(login.id)
    nonce = nonce_service.generate_nonce(ecode.id)
    return PendingSignup(
        login_id=login.id,
        name=login.name,
        email=login.email,
        code=ecode.code,
        public_nonce=nonce_service.publicize(nonce.secret_code, nonce.expires_at),
        nonce_expires_at=nonce.expires_at,
    )


def signup(name, email, password) -> PendingSignup:
    if not (
        is_sterile(name, sterilize_basic_string)
        and is_sterile(email, sterilize_email)
        and is_sterile(password, sterilize_basic_string)
    ):
        raise ValidationError("signup fields did not pass sterilization")

    existing = Login.query.filter_by(name=name).first()
    if existing:
        # repeating an unconfirmed signup with the same credentials sends a fresh code
        if (
            not existing.confirmed
            and existing.email == email
            and verify_password(password, existing.password_hash)
        ):
            return reissue_confirmation(existing.id)
        raise ValidationError(f"name already registered: {name}")

    try:
        login = Login(name=name, email=email, password_hash=hash_password(password))
        db.session.add(login)
        db.session.flush()
        if login.id is None:
            raise PersistenceError("login insert returned no id")

        pending = _issue_pair(login)
        db.session.commit()
    except AccountError:
        db.session.rollback()
        raise
    except IntegrityError as exc:
        db.session.rollback()
        raise ValidationError(f"login insert conflicted: {exc}") from exc
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise PersistenceError(f"signup failed: {exc}") from exc

    logger.info("Signup pending confirmation for login_id=%s", pending.login_id)
    return pending


def confirm_email(cookie_map, submitted_code) -> ConfirmedLogin:
    claim = decode_signup_cookies(cookie_map)

    code_length = current_app.config.get("ECODE_LENGTH", 8)
    if not is_sterile(submitted_code, sterilize_ecode, code_length):
        raise InvalidCode("submitted ecode is malformed")

    resolved = resolve_ecode(submitted_code, claim.name, claim.email)
    if resolved is None:
        raise StateCorrupted("ecode does not resolve for the claimed signup")

    check = nonce_service.verify(claim.public_nonce, resolved.nonce_code, resolved.nonce_exp)
    if check is NonceCheck.EXPIRED:
        raise ExpiredNonce(resolved.login_id)
    if check is NonceCheck.MISMATCH:
        raise StateCorrupted("public nonce mismatch")

    # confirm -> delete nonce -> delete ecode, all or nothing
    try:
        updated = (
            Login.query
            .filter_by(id=resolved.login_id, confirmed=False)
            .update({"confirmed": True}, synchronize_session="fetch")
        )
        if updated != 1:
            raise StateCorrupted("login already confirmed")
        db.session.flush()

        if not nonce_service.delete_nonce(resolved.ecode_id):
            raise StateCorrupted("nonce vanished mid-confirmation")
        if not delete_ecode(resolved.ecode_id):
            raise StateCorrupted("ecode vanished mid-confirmation")

        db.session.commit()
    except AccountError:
        db.session.rollback()
        raise
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise PersistenceError(f"confirmation transaction failed: {exc}") from exc

    expires_at = tokens.token_expiry()
    token = tokens.issue(resolved.login_id, resolved.login_name, resolved.login_email, expires_at)
    logger.info("Login confirmed login_id=%s", resolved.login_id)
    return ConfirmedLogin(
        login_id=resolved.login_id,
        name=resolved.login_name,
        email=resolved.login_email,
        access_token=token,
        token_expires_at=expires_at,
    )


def reissue_confirmation(login_id: int) -> PendingSignup:
    """Replaces the expired pair of a pending login with a fresh one."""
    login = Login.query.filter_by(id=login_id, confirmed=False).first()
    if not login:
        raise StateCorrupted(f"no pending login {login_id} to reissue")

    try:
        for ecode in ECode.query.filter_by(login_id=login.id).all():
            nonce_service.delete_nonce(ecode.id)
            delete_ecode(ecode.id)

        pending = _issue_pair(login)
        db.session.commit()
    except AccountError:
        db.session.rollback()
        raise
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise PersistenceError(f"reissue failed: {exc}") from exc

    logger.info("Confirmation reissued for login_id=%s", login.id)
    return pending


def pending_signup_status(cookie_map) -> SignupClaim:
    claim = decode_signup_cookies(cookie_map)
    pair = find_pending_ecode(claim.name, claim.email)
    if pair is None:
        raise StateCorrupted("no pending signup for cookies")

    _, nonce = pair
    if nonce_service.verify(claim.public_nonce, nonce.secret_code, nonce.expires_at) is not NonceCheck.VALID:
        raise StateCorrupted("pending signup cookies do not verify")
    return claim


def login(name, password) -> ConfirmedLogin:
    if not (is_sterile(name, sterilize_basic_string) and is_sterile(password, sterilize_basic_string)):
        raise Unauthorized("credentials did not pass sterilization")

    account = Login.query.filter_by(name=name, confirmed=True).first()
    if account is None:
        burn_password_check(password)
        raise Unauthorized("no confirmed login for name")
    if not verify_password(password, account.password_hash):
        raise Unauthorized("password mismatch")

    expires_at = tokens.token_expiry()
    token = tokens.issue(account.id, account.name, account.email, expires_at)
    logger.info("Login succeeded login_id=%s", account.id)
    return ConfirmedLogin(
        login_id=account.id,
        name=account.name,
        email=account.email,
        access_token=token,
        token_expires_at=expires_at,
    )


def purge_unconfirmed(retention_days: int, now: datetime = None) -> int:
    """Deletes unconfirmed logins whose nonce expired more than ``retention_days`` ago."""
    now = now or datetime.utcnow()
    cutoff = now - timedelta(days=retention_days)

    stale = (
        db.session.query(Login, ECode, Nonce)
        .join(ECode, ECode.login_id == Login.id)
        .join(Nonce, Nonce.ecode_id == ECode.id)
        .filter(Login.confirmed.is_(False), Nonce.expires_at < cutoff)
        .all()
    )

    try:
        login_ids = set()
        for account, ecode, nonce in stale:
            db.session.delete(nonce)
            db.session.flush()
            db.session.delete(ecode)
            db.session.flush()
            login_ids.add(account.id)

        for login_id in login_ids:
            Login.query.filter_by(id=login_id).delete()
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise PersistenceError(f"purge failed: {exc}") from exc

    logger.info("Purged %d unconfirmed login(s)", len(login_ids))
    return len(login_ids)
