from .db import db
from .login import Login
from .ecode import ECode
from .nonce import Nonce
from .comment import Comment
from .audit_log import AuditLog
from .ip_rate_limit import IpRateLimit
