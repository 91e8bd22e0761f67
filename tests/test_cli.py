from datetime import datetime, timedelta

from models import Login, Nonce
from security import confirmation


def test_purge_unconfirmed_command(app, db_session):
    confirmation.signup("al", "a@b.com", "p1")
    db_session.query(Nonce).update({"expires_at": datetime.utcnow() - timedelta(days=3)})
    db_session.commit()

    runner = app.test_cli_runner()
    result = runner.invoke(args=["purge-unconfirmed", "--days", "1"])

    assert result.exit_code == 0
    assert "Purged 1 unconfirmed login(s)" in result.output
    db_session.expire_all()
    assert db_session.query(Login).count() == 0


def test_purge_keeps_recent_signups_by_default(app, db_session):
    confirmation.signup("al", "a@b.com", "p1")

    result = app.test_cli_runner().invoke(args=["purge-unconfirmed"])

    assert result.exit_code == 0
    assert "Purged 0" in result.output
    db_session.expire_all()
    assert db_session.query(Login).count() == 1
