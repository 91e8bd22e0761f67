import logging
import smtplib
import threading
from email.message import EmailMessage

from flask import current_app

logger = logging.getLogger(__name__)

CONFIRMATION_BODY = """Welcome to Comment-Stack, {name}.

Your email confirmation code is:

    {code}

Enter it on the confirmation page before {expires} UTC.
If you did not sign up, ignore this message.
"""


def send_email(to_email: str, subject: str, body: str):
    host = current_app.config.get("SMTP_HOST")
    port = current_app.config.get("SMTP_PORT", 587)
    username = current_app.config.get("SMTP_USERNAME")
    password = current_app.config.get("SMTP_PASSWORD")
    from_email = current_app.config.get("SMTP_FROM_EMAIL") or username
    use_tls = current_app.config.get("SMTP_USE_TLS", True)

    if not host or not from_email:
        return False, "Email not configured"

    msg = EmailMessage()
    msg["From"] = from_email
    msg["To"] = to_email
    msg["Subject"] = subject
    msg.set_content(body)

    try:
        with smtplib.SMTP(host, port, timeout=10) as server:
            if use_tls:
                server.starttls()
            if username and password:
                server.login(username, password)
            server.send_message(msg)
        return True, None
    except (smtplib.SMTPException, OSError) as exc:
        return False, str(exc)


def _deliver_confirmation(to_email: str, name: str, code: str, expires_iso: str):
    body = CONFIRMATION_BODY.format(name=name, code=code, expires=expires_iso)
    subject = current_app.config.get("MAIL_SUBJECT", "Email Confirmation")
    sent, error = send_email(to_email, subject, body)
    if sent:
        logger.info("Confirmation email sent to %s", to_email)
    else:
        # signup rows stay committed; repeating the signup with the same credentials resends a code
        logger.warning("Confirmation email to %s failed: %s", to_email, error)
    return sent, error


def dispatch_confirmation_email(to_email: str, name: str, code: str, expires_iso: str):
    """
    Mails the raw ecode. With MAIL_ASYNC the send happens on a background
    thread inside its own app context and the request never waits on SMTP.
    """
    if not current_app.config.get("MAIL_ASYNC", True):
        return _deliver_confirmation(to_email, name, code, expires_iso)

    app = current_app._get_current_object()

    def _run():
        with app.app_context():
            _deliver_confirmation(to_email, name, code, expires_iso)

    threading.Thread(target=_run, name="confirmation-mail", daemon=True).start()
    return None
