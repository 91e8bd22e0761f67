import logging

from flask import Flask, jsonify, make_response, request
from config import Config
from routes import health_bp, auth_bp, comments_bp

from models import db
from flask_migrate import Migrate
from security.cookies import clear_signup_cookies
from security.errors import AccountError, ErrorKind
from utils.audit import log_event
from utils.auth_context import load_current_claims

logger = logging.getLogger(__name__)


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Register routes
    app.register_blueprint(health_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(comments_bp)

    # Database init
    db.init_app(app)

    # Migrations
    Migrate(app, db)

    @app.before_request
    def _load_claims():
        load_current_claims()

    @app.errorhandler(AccountError)
    def _account_error(err: AccountError):
        # detail goes to the log and audit trail only; the client gets the generic message
        logger.info("%s %s failed (%s): %s", request.method, request.path, err.kind.value, err)
        log_event(
            "ACCOUNT_" + err.kind.name,
            entity="route",
            entity_id=request.path,
            metadata={"detail": str(err)},
        )

        if err.kind is ErrorKind.UNAUTHORIZED:
            return make_response("", err.status)

        resp = jsonify(error=err.public_message)
        if err.kind is ErrorKind.STATE_CORRUPTED:
            clear_signup_cookies(resp)
        return resp, err.status

    @app.after_request
    def add_security_headers(resp):
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Referrer-Policy"] = "no-referrer"
        resp.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"
        resp.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none';"
        return resp


    register_cli(app)


    return app

#-------------------------
import click
from security.confirmation import purge_unconfirmed

def register_cli(app):
    @app.cli.command("purge-unconfirmed")
    @click.option("--days", type=int, default=None, help="Days past nonce expiry to keep a pending signup.")
    def purge_unconfirmed_command(days):
        """Delete unconfirmed logins whose confirmation window lapsed long ago."""
        if days is None:
            days = app.config.get("UNCONFIRMED_RETENTION_DAYS", 7)
        count = purge_unconfirmed(days)
        click.echo(f"Purged {count} unconfirmed login(s)")

    @app.cli.command("init-db")
    def init_db_command():
        """Create all tables without running migrations (local development)."""
        db.create_all()
        click.echo("Database tables created")

#-------------------------




if __name__ == "__main__":
    app = create_app()
    # Run locally
    app.run(host="127.0.0.1", port=5002)
