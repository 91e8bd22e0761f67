import hashlib
import hmac
import secrets
import string

_DIGITS = string.digits
_CHARS = string.ascii_letters + string.digits


def random_numeric_string(length: int) -> str:
    return "".join(secrets.choice(_DIGITS) for _ in range(length))


def random_char_string(length: int) -> str:
    return "".join(secrets.choice(_CHARS) for _ in range(length))


def hash_nonce(secret: str, expires_at_iso: str) -> str:
    # expiry is part of the hash input so a replayed public nonce can't claim a later window
    material = f"{secret}:{expires_at_iso}"
    return hashlib.sha256(material.encode("utf-8")).hexdigest()


def check_hash(candidate: str, secret: str, expires_at_iso: str) -> bool:
    if not candidate or not secret:
        return False
    expected = hash_nonce(secret, expires_at_iso)
    return hmac.compare_digest(candidate.encode("utf-8"), expected.encode("utf-8"))
