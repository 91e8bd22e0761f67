import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))

class Config:
    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-only-change-me")

    # SQLite database file stored next to app.py as commentstack.db
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(BASE_DIR, "commentstack.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Session token (signed JWT carried in the AccessToken cookie)
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "jwt-dev-only-change-me")
    JWT_ALGORITHM = "HS256"
    ACCESS_TOKEN_LIFETIME_SECONDS = int(os.getenv("ACCESS_TOKEN_LIFETIME_SECONDS", str(24 * 60 * 60)))

    # Email confirmation window
    NONCE_TTL_SECONDS = int(os.getenv("NONCE_TTL_SECONDS", str(6 * 60 * 60)))
    USERNAME_COOKIE_DAYS = 5
    ECODE_LENGTH = 8
    NONCE_LENGTH = 16
    CODE_GENERATION_ATTEMPTS = 4

    # Cookies are always Path=/; HttpOnly. Secure can only be dropped for local http debugging.
    COOKIE_SECURE = os.getenv("COOKIE_SECURE", "true").lower() == "true"

    # Max request body for /add+comment
    COMMENT_MAX_BYTES = 891

    # Email (SMTP)
    SMTP_HOST = os.getenv("SMTP_HOST")
    SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USERNAME = os.getenv("SMTP_USERNAME")
    SMTP_PASSWORD = os.getenv("SMTP_PASSWORD")
    SMTP_FROM_EMAIL = os.getenv("SMTP_FROM_EMAIL")
    SMTP_USE_TLS = os.getenv("SMTP_USE_TLS", "true").lower() == "true"
    MAIL_ASYNC = True
    MAIL_SUBJECT = "Email Confirmation for Comment-Stack"

    # Simple per-IP rate limit for the account endpoints
    RATE_LIMIT_ENABLED = True
    RATE_LIMIT_WINDOW_SECONDS = 60      # window size
    RATE_LIMIT_MAX_REQUESTS = 15        # max requests per IP per scope per window

    # purge-unconfirmed CLI: keep expired signups this many days before deleting
    UNCONFIRMED_RETENTION_DAYS = 7

    DEBUG = False


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    JWT_SECRET_KEY = "test-secret-key-that-is-at-least-32-characters-long"
    MAIL_ASYNC = False
    RATE_LIMIT_ENABLED = False
    LOG_LEVEL = "DEBUG"
