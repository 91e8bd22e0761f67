"""Input sterilization.

Every function strips what a field may not contain. Callers accept a value
only when ``is_sterile`` holds: the sterilized form equals the raw form and
is non-empty.
"""
import re

_BASIC_DISALLOWED = re.compile(r"[^A-Za-z0-9_.!@#$%^&*?\-]")
_EMAIL_DISALLOWED = re.compile(r"[^A-Za-z0-9@._+\-]")
_EMAIL_SHAPE = re.compile(r"^[A-Za-z0-9._+\-]+@[A-Za-z0-9\-]+(\.[A-Za-z0-9\-]+)+$")
_NON_DIGIT = re.compile(r"[^0-9]")
_NON_HEX = re.compile(r"[^0-9a-f]")

BASIC_MAX_LEN = 64
EMAIL_MAX_LEN = 254
NONCE_MAX_LEN = 64
DEFAULT_ECODE_LEN = 8


def sterilize_basic_string(value) -> str:
    if not isinstance(value, str):
        return ""
    return _BASIC_DISALLOWED.sub("", value)[:BASIC_MAX_LEN]


def sterilize_email(value) -> str:
    if not isinstance(value, str):
        return ""
    cleaned = _EMAIL_DISALLOWED.sub("", value)[:EMAIL_MAX_LEN]
    if not _EMAIL_SHAPE.match(cleaned):
        return ""
    return cleaned


def sterilize_ecode(value, length: int = DEFAULT_ECODE_LEN) -> str:
    if not isinstance(value, str):
        return ""
    cleaned = _NON_DIGIT.sub("", value)[:length]
    # a short code can never match a generated one
    if len(cleaned) != length:
        return ""
    return cleaned


def sterilize_nonce(value) -> str:
    if not isinstance(value, str):
        return ""
    return _NON_HEX.sub("", value)[:NONCE_MAX_LEN]


def is_sterile(raw, sterilize, *args) -> bool:
    """True when ``raw`` passes through ``sterilize`` unchanged and non-empty."""
    if not isinstance(raw, str) or raw == "":
        return False
    return sterilize(raw, *args) == raw
