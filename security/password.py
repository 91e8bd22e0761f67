import bcrypt

# bcrypt only looks at the first 72 bytes
_MAX_PASSWORD_BYTES = 72

# checked against when no login matches, so an unknown name costs the same as a wrong password
_DUMMY_HASH = bcrypt.hashpw(b"comment-stack-dummy", bcrypt.gensalt(rounds=12)).decode("utf-8")


def _pwd_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:_MAX_PASSWORD_BYTES]


def hash_password(plain_password: str) -> str:
    if not isinstance(plain_password, str) or len(plain_password) == 0:
        raise ValueError("Password must be a non-empty string")

    salt = bcrypt.gensalt(rounds=12)
    hashed = bcrypt.hashpw(_pwd_bytes(plain_password), salt)
    return hashed.decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    if not plain_password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(
            _pwd_bytes(plain_password),
            password_hash.encode("utf-8")
        )
    except ValueError:
        return False


def burn_password_check(plain_password: str) -> None:
    verify_password(plain_password or "x", _DUMMY_HASH)
