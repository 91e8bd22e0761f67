"""Secret nonces bound to an ECode, and the public hash handed to the client."""
import enum
import logging
from datetime import datetime, timedelta

from flask import current_app

from models import db
from models.nonce import Nonce
from security.codes import random_char_string, hash_nonce, check_hash

logger = logging.getLogger(__name__)


class NonceCheck(enum.Enum):
    VALID = "valid"
    EXPIRED = "expired"
    MISMATCH = "mismatch"


def _expiry_iso(expires_at: datetime) -> str:
    return expires_at.isoformat()


def generate_nonce(ecode_id: int) -> Nonce:
    """Create the secret for ``ecode_id``. The caller owns the commit."""
    length = current_app.config.get("NONCE_LENGTH", 16)
    ttl = current_app.config.get("NONCE_TTL_SECONDS", 6 * 60 * 60)

    # whole seconds so the ISO form survives a round trip through the DB
    expires_at = (datetime.utcnow() + timedelta(seconds=ttl)).replace(microsecond=0)

    row = Nonce(ecode_id=ecode_id, secret_code=random_char_string(length), expires_at=expires_at)
    db.session.add(row)
    db.session.flush()
    logger.debug("Nonce generated for ecode_id=%s expiring %s", ecode_id, expires_at.isoformat())
    return row


def publicize(secret: str, expires_at) -> str:
    if isinstance(expires_at, datetime):
        expires_at = _expiry_iso(expires_at)
    return hash_nonce(secret, expires_at)


def verify(candidate: str, stored_secret: str, stored_expires_at: datetime, now: datetime = None) -> NonceCheck:
    now = now or datetime.utcnow()
    if now >= stored_expires_at:
        return NonceCheck.EXPIRED
    if check_hash(candidate, stored_secret, _expiry_iso(stored_expires_at)):
        return NonceCheck.VALID
    return NonceCheck.MISMATCH


def delete_nonce(ecode_id: int) -> bool:
    row = Nonce.query.filter_by(ecode_id=ecode_id).first()
    if not row:
        return False
    db.session.delete(row)
    db.session.flush()
    return True
