from .health import health_bp
from .auth import auth_bp
from .comments import comments_bp
