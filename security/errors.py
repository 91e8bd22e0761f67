"""Account protocol failures.

Each failure class carries a ``kind`` tag, the HTTP status the route boundary
answers with, and a generic client-facing message. Callers dispatch on
``kind``; the exception message is internal detail for logs only.
"""
import enum


class ErrorKind(enum.Enum):
    VALIDATION = "validation"
    UNAUTHORIZED = "unauthorized"
    STATE_CORRUPTED = "state_corrupted"
    INVALID_CODE = "invalid_code"
    EXPIRED_NONCE = "expired_nonce"
    GENERATION_EXHAUSTED = "generation_exhausted"
    PERSISTENCE = "persistence"


class AccountError(Exception):
    kind: ErrorKind = ErrorKind.PERSISTENCE
    status = 500
    public_message = "Backend Error"


class ValidationError(AccountError):
    kind = ErrorKind.VALIDATION
    status = 400
    public_message = "Name, Email, Password cannot be accepted."


class Unauthorized(AccountError):
    kind = ErrorKind.UNAUTHORIZED
    status = 401
    public_message = ""


class StateCorrupted(AccountError):
    kind = ErrorKind.STATE_CORRUPTED
    status = 404
    public_message = "Please retry sign-up process again."


class InvalidCode(AccountError):
    kind = ErrorKind.INVALID_CODE
    status = 400
    public_message = "Confirmation code is not valid."


class ExpiredNonce(AccountError):
    kind = ErrorKind.EXPIRED_NONCE
    status = 410
    public_message = "Confirmation code expired. A new code has been sent."

    def __init__(self, login_id: int, detail: str = "nonce expired"):
        super().__init__(detail)
        self.login_id = login_id


class GenerationExhausted(AccountError):
    kind = ErrorKind.GENERATION_EXHAUSTED


class PersistenceError(AccountError):
    kind = ErrorKind.PERSISTENCE
