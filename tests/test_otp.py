import threading
from datetime import timedelta

import pytest

import lostfound
from lostfound.config import TestingConfig
from lostfound.errors import DependencyFailure, Forbidden, InvalidOrExpired
from lostfound.extensions import db as _db
from lostfound.models.otp_code import OtpCode
from lostfound.models.user import User
from lostfound.modules.auth import otp
from lostfound.timeutil import utcnow


@pytest.fixture
def outbox(monkeypatch):
    sent = []

    def fake_send(to_address, subject, body_html, **kwargs):
        sent.append({"to": to_address, "subject": subject, "html": body_html})
        return True

    monkeypatch.setattr(otp, "send_email", fake_send)
    return sent


def _latest_code(user):
    return OtpCode.query.filter_by(user_id=user.id).order_by(OtpCode.id.desc()).first()


def test_code_is_six_digits():
    for _ in range(50):
        code = otp.new_code()
        assert len(code) == 6 and code.isdigit()


def test_generate_emails_code_with_ttl(app, make_user, outbox):
    user = make_user()
    row = otp.generate_otp(user.id, user.email)

    assert len(outbox) == 1
    assert outbox[0]["to"] == user.email
    assert row.code in outbox[0]["html"]
    assert row.verified is False
    ttl = app.config["OTP_TTL_MINUTES"]
    delta = row.expires_at.replace(tzinfo=None) - utcnow().replace(tzinfo=None)
    assert timedelta(minutes=ttl - 1) < delta <= timedelta(minutes=ttl)


def test_non_institutional_email_is_refused(make_user, outbox):
    user = make_user(email="someone@gmail.com")
    with pytest.raises(Forbidden):
        otp.generate_otp(user.id, user.email)
    assert outbox == []
    assert OtpCode.query.count() == 0


def test_failed_email_leaves_no_code_behind(make_user, monkeypatch):
    user = make_user()
    user_id, email = user.id, user.email
    monkeypatch.setattr(otp, "send_email", lambda *a, **kw: False)
    with pytest.raises(DependencyFailure):
        otp.generate_otp(user_id, email)
    assert OtpCode.query.count() == 0


def test_code_redeems_exactly_once(make_user, outbox):
    user = make_user()
    row = otp.generate_otp(user.id, user.email)
    code = row.code

    otp.redeem_otp(user.id, code)
    with pytest.raises(InvalidOrExpired):
        otp.redeem_otp(user.id, code)


def test_conditional_update_claims_a_code_once(make_user, outbox):
    user = make_user()
    row = otp.generate_otp(user.id, user.email)
    now = utcnow()

    results = [otp._claim_row(row.id, now), otp._claim_row(row.id, now)]
    assert results == [True, False]


def test_wrong_code_is_rejected_and_code_stays_usable(make_user, outbox):
    user = make_user()
    row = otp.generate_otp(user.id, user.email)
    wrong = "000000" if row.code != "000000" else "111111"

    with pytest.raises(InvalidOrExpired):
        otp.redeem_otp(user.id, wrong)
    otp.redeem_otp(user.id, row.code)


def test_expired_code_is_rejected(make_user, outbox, monkeypatch):
    user = make_user()
    row = otp.generate_otp(user.id, user.email)
    code = row.code

    later = utcnow() + timedelta(minutes=11)
    monkeypatch.setattr(otp, "_now", lambda: later)
    with pytest.raises(InvalidOrExpired):
        otp.redeem_otp(user.id, code)


def test_only_newest_code_is_redeemable(make_user, outbox):
    user = make_user()
    first = otp.generate_otp(user.id, user.email).code
    second = otp.generate_otp(user.id, user.email).code

    if first != second:
        with pytest.raises(InvalidOrExpired):
            otp.redeem_otp(user.id, first)
    otp.redeem_otp(user.id, second)


def test_codes_are_scoped_to_their_user(make_user, outbox):
    alice = make_user()
    bob = make_user()
    code = otp.generate_otp(alice.id, alice.email).code

    with pytest.raises(InvalidOrExpired):
        otp.redeem_otp(bob.id, code)


def test_purge_removes_used_and_expired_codes(make_user, outbox):
    user = make_user()
    used = otp.generate_otp(user.id, user.email)
    otp.redeem_otp(user.id, used.code)
    live = otp.generate_otp(user.id, user.email)
    live_id = live.id

    assert otp.purge_expired_otps() == 1
    assert [r.id for r in OtpCode.query.all()] == [live_id]

    assert otp.purge_expired_otps(now=utcnow() + timedelta(minutes=30)) == 1
    assert OtpCode.query.count() == 0


def test_login_with_two_factor_requires_code(client, make_user, outbox):
    user = make_user(two_factor=True, password="correct horse")

    resp = client.post("/api/v1/auth/login", json={"email": user.email, "password": "correct horse"})
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["otpRequired"] is True
    assert "token" not in body
    assert len(outbox) == 1

    code = _latest_code(user).code
    bad = client.post("/api/v1/auth/otp/verify", json={"pendingToken": body["pendingToken"], "code": "abc"})
    assert bad.status_code == 400

    ok = client.post("/api/v1/auth/otp/verify", json={"pendingToken": body["pendingToken"], "code": code})
    assert ok.status_code == 200
    token = ok.get_json()["token"]

    me = client.get("/api/v1/users/me", headers={"Authorization": f"Bearer {token}"})
    assert me.get_json()["user"]["id"] == user.id

    again = client.post("/api/v1/auth/otp/verify", json={"pendingToken": body["pendingToken"], "code": code})
    assert again.status_code == 400


def test_resend_issues_a_new_code(client, make_user, outbox):
    user = make_user(two_factor=True)
    body = client.post("/api/v1/auth/login", json={"email": user.email, "password": "password123"}).get_json()

    resp = client.post("/api/v1/auth/otp/resend", json={"pendingToken": body["pendingToken"]})
    assert resp.status_code == 200
    assert len(outbox) == 2
    assert OtpCode.query.filter_by(user_id=user.id).count() == 2


def test_login_fails_cleanly_when_code_email_fails(client, make_user, monkeypatch):
    monkeypatch.delenv("RESEND_API_KEY", raising=False)
    user = make_user(two_factor=True)
    resp = client.post("/api/v1/auth/login", json={"email": user.email, "password": "password123"})
    assert resp.status_code == 502
    assert "error" in resp.get_json()
    assert OtpCode.query.count() == 0


def test_forged_pending_token_is_rejected(client):
    resp = client.post("/api/v1/auth/otp/verify", json={"pendingToken": "not-a-token", "code": "123456"})
    assert resp.status_code == 400


@pytest.fixture
def file_app(tmp_path, monkeypatch):
    """App on a file-backed SQLite database so separate threads share one store."""
    uri = f"sqlite:///{tmp_path / 'otp.db'}"
    monkeypatch.setattr(lostfound, "get_config", lambda name=None: TestingConfig(SQLALCHEMY_DATABASE_URI=uri))
    app = lostfound.create_app("testing")
    with app.app_context():
        _db.create_all()
    yield app
    with app.app_context():
        _db.session.remove()
        _db.drop_all()
        _db.engine.dispose()


def test_parallel_redemptions_have_a_single_winner(file_app, monkeypatch):
    monkeypatch.setattr(otp, "send_email", lambda *a, **kw: True)
    with file_app.app_context():
        user = User(email="racer@chitkara.edu.in", full_name="Racer", password_hash="x")
        _db.session.add(user)
        _db.session.commit()
        user_id, email = user.id, user.email
        code = otp.generate_otp(user_id, email).code
        _db.session.remove()

    attempts = 4
    barrier = threading.Barrier(attempts)
    outcomes = []
    lock = threading.Lock()

    def redeem():
        with file_app.app_context():
            barrier.wait()
            try:
                otp.redeem_otp(user_id, code)
                result = "accepted"
            except InvalidOrExpired:
                result = "rejected"
            except Exception as exc:
                result = repr(exc)
            finally:
                _db.session.remove()
        with lock:
            outcomes.append(result)

    threads = [threading.Thread(target=redeem) for _ in range(attempts)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)

    assert sorted(outcomes) == ["accepted"] + ["rejected"] * (attempts - 1)
    with file_app.app_context():
        assert OtpCode.query.filter_by(user_id=user_id, verified=True).count() == 1
