from datetime import datetime, timedelta

from models import Nonce
from security import nonce as nonce_service
from security.codes import check_hash, hash_nonce, random_char_string, random_numeric_string
from security.nonce import NonceCheck


def test_random_strings_have_requested_shape():
    code = random_numeric_string(8)
    assert len(code) == 8 and code.isdigit()

    secret = random_char_string(16)
    assert len(secret) == 16 and secret.isalnum()


def test_publicize_is_deterministic_and_binds_expiry():
    exp = datetime(2026, 10, 18, 12, 0, 0)
    first = nonce_service.publicize("secret", exp)
    assert first == nonce_service.publicize("secret", exp.isoformat())
    assert first != nonce_service.publicize("secret", exp + timedelta(seconds=1))
    assert first != nonce_service.publicize("secreT", exp)
    assert len(first) == 64


def test_check_hash_rejects_empty_inputs():
    assert not check_hash("", "secret", "2026-01-01T00:00:00")
    assert not check_hash(hash_nonce("secret", "x"), "", "x")


def test_verify_valid_before_expiry():
    exp = datetime(2026, 10, 18, 12, 0, 0)
    public = nonce_service.publicize("secret", exp)
    now = exp - timedelta(minutes=1)

    assert nonce_service.verify(public, "secret", exp, now=now) is NonceCheck.VALID


def test_verify_mismatch_on_wrong_candidate():
    exp = datetime(2026, 10, 18, 12, 0, 0)
    public = nonce_service.publicize("other", exp)

    assert nonce_service.verify(public, "secret", exp, now=exp - timedelta(hours=1)) is NonceCheck.MISMATCH


def test_verify_expired_even_when_hash_matches():
    exp = datetime(2026, 10, 18, 12, 0, 0)
    public = nonce_service.publicize("secret", exp)

    assert nonce_service.verify(public, "secret", exp, now=exp) is NonceCheck.EXPIRED
    assert nonce_service.verify(public, "secret", exp, now=exp + timedelta(days=1)) is NonceCheck.EXPIRED


def test_generate_nonce_uses_configured_window(app, db_session):
    app.config["NONCE_TTL_SECONDS"] = 3600
    before = datetime.utcnow()

    row = nonce_service.generate_nonce(ecode_id=42)

    assert len(row.secret_code) == 16
    assert row.expires_at.microsecond == 0
    assert before + timedelta(minutes=59) <= row.expires_at <= before + timedelta(minutes=61)
    assert db_session.query(Nonce).filter_by(ecode_id=42).count() == 1


def test_delete_nonce_reports_missing_rows(app, db_session):
    nonce_service.generate_nonce(ecode_id=7)
    db_session.commit()

    assert nonce_service.delete_nonce(7) is True
    assert nonce_service.delete_nonce(7) is False
