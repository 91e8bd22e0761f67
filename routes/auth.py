import logging

from flask import Blueprint, request, jsonify, g, make_response, current_app

from security import confirmation
from security.cookies import (
    ACCESS_TOKEN_COOKIE,
    ATTEMPT_EMAIL_COOKIE,
    CONFIRM_NONCE_COOKIE,
    USERNAME_COOKIE,
    clear_cookie,
    set_protocol_cookie,
)
from security.errors import AccountError, ErrorKind, ExpiredNonce
from security.rate_limit import rate_limited
from utils.audit import log_event
from utils.auth_context import login_required
from utils.emailer import dispatch_confirmation_email

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__)


def _field(data, key: str):
    if not isinstance(data, dict):
        return None
    value = data.get(key)
    return value if isinstance(value, str) else None


def _code_field(data):
    # clients may post the code as a JSON number, which drops leading zeros
    value = data.get("ecode") if isinstance(data, dict) else None
    if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
        return str(value).zfill(current_app.config.get("ECODE_LENGTH", 8))
    return _field(data, "ecode")


def _set_pending_cookies(resp, pending, include_username: bool = True):
    set_protocol_cookie(resp, CONFIRM_NONCE_COOKIE, pending.public_nonce, pending.nonce_expires_at)
    set_protocol_cookie(resp, ATTEMPT_EMAIL_COOKIE, pending.email, pending.nonce_expires_at)
    if include_username:
        set_protocol_cookie(resp, USERNAME_COOKIE, pending.name, pending.username_expires_at)
    return resp


def _send_confirmation(pending):
    dispatch_confirmation_email(
        pending.email,
        pending.name,
        pending.code,
        pending.nonce_expires_at.isoformat(),
    )


@auth_bp.post("/login")
@rate_limited("login")
def login():
    data = request.get_json(silent=True) or {}

    session = confirmation.login(_field(data, "name"), _field(data, "pwd"))

    resp = make_response("", 200)
    set_protocol_cookie(resp, ACCESS_TOKEN_COOKIE, session.access_token, session.token_expires_at)
    log_event("LOGIN_SUCCESS", login_id=session.login_id)
    return resp


@auth_bp.post("/signup")
@rate_limited("signup")
def signup():
    data = request.get_json(silent=True) or {}

    pending = confirmation.signup(_field(data, "name"), _field(data, "email"), _field(data, "pwd"))
    logger.debug("ECode for login_id=%s is %s", pending.login_id, pending.code)

    resp = jsonify(message="Confirmation code sent")
    _set_pending_cookies(resp, pending)
    # read by the signup page to show where the code went
    resp.headers["email-attempt"] = pending.email
    log_event("SIGNUP_SUCCESS", login_id=pending.login_id, entity="login", entity_id=pending.login_id)

    _send_confirmation(pending)
    return resp, 200


@auth_bp.post("/confirm+email")
@rate_limited("confirm")
def confirm_email():
    data = request.get_json(silent=True) or {}

    try:
        confirmed = confirmation.confirm_email(request.cookies, _code_field(data))
    except AccountError as exc:
        if exc.kind is ErrorKind.EXPIRED_NONCE:
            return _reissue_expired(exc)
        raise

    resp = make_response("", 201)
    set_protocol_cookie(resp, ACCESS_TOKEN_COOKIE, confirmed.access_token, confirmed.token_expires_at)
    clear_cookie(resp, CONFIRM_NONCE_COOKIE)
    log_event("CONFIRM_EMAIL_SUCCESS", login_id=confirmed.login_id, entity="login", entity_id=confirmed.login_id)
    return resp


def _reissue_expired(exc: ExpiredNonce):
    pending = confirmation.reissue_confirmation(exc.login_id)

    resp = jsonify(error=exc.public_message)
    _set_pending_cookies(resp, pending, include_username=False)
    resp.headers["email-attempt"] = pending.email
    log_event("CONFIRM_EMAIL_REISSUE", login_id=pending.login_id, entity="login", entity_id=pending.login_id)

    _send_confirmation(pending)
    return resp, exc.status


@auth_bp.get("/confirm+email")
def confirm_email_status():
    try:
        claim = confirmation.pending_signup_status(request.cookies)
    except AccountError as exc:
        if exc.kind is ErrorKind.STATE_CORRUPTED:
            logger.info("Pending signup check failed: %s", exc)
            return jsonify(error="Please follow the sign-up procedure."), 403
        raise
    return jsonify(pending=True, email=claim.email), 200


@auth_bp.get("/session")
@login_required(require_fresh_claims=False)
def current_session():
    return jsonify(id=int(g.claims["sub"]), name=g.claims.get("name"), email=g.claims.get("email")), 200
