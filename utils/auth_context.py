from functools import wraps
from flask import g, request
from security import tokens
from security.cookies import ACCESS_TOKEN_COOKIE
from security.errors import Unauthorized

def load_current_claims():
    g.claims = None
    raw_token = request.cookies.get(ACCESS_TOKEN_COOKIE)
    if not raw_token:
        return
    try:
        g.claims = tokens.decode(raw_token)
    except Unauthorized:
        g.claims = None

def login_required(require_fresh_claims: bool = False):
    """
    Usage: @login_required(require_fresh_claims=True)
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            raw_token = request.cookies.get(ACCESS_TOKEN_COOKIE)
            if not raw_token or not tokens.validate(raw_token, require_fresh_claims):
                raise Unauthorized("session token missing or invalid")
            if getattr(g, "claims", None) is None:
                g.claims = tokens.decode(raw_token)
            return fn(*args, **kwargs)
        return wrapper
    return decorator
