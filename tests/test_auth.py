from datetime import timedelta

from jose import jwt

import mailer
from models import User, utcnow
from security import verify_password


def register_payload(**overrides):
    payload = {
        "name": "Lucia",
        "lastname": "Gomez",
        "email": "lucia@example.com",
        "password": "secret123",
        "master": ["fansly"],
        "telegram": "@lucia",
        "age": 27,
    }
    payload.update(overrides)
    return payload


def test_register_then_login_returns_token_for_created_user(client, db):
    res = client.post("/auth/register", json=register_payload())
    assert res.status_code == 200
    register_token = res.json()["token"]

    user = db.query(User).filter_by(email="lucia@example.com").one()
    assert user.role.value == "STUDENT"
    assert user.programs == ["fansly"]
    assert user.password_hash != "secret123"

    res = client.post("/auth/login", json={"email": "lucia@example.com", "password": "secret123"})
    assert res.status_code == 200
    claims = jwt.get_unverified_claims(res.json()["token"])
    assert claims["sub"] == user.id
    assert claims["role"] == "STUDENT"
    assert claims["email"] == "lucia@example.com"
    assert "exp" in claims
    assert jwt.get_unverified_claims(register_token)["sub"] == user.id


def test_register_duplicate_email_conflicts(client, db):
    assert client.post("/auth/register", json=register_payload()).status_code == 200
    res = client.post("/auth/register", json=register_payload(name="Other"))
    assert res.status_code == 409
    assert "message" in res.json()
    assert db.query(User).filter_by(email="lucia@example.com").count() == 1


def test_register_validates_fields(client, db):
    res = client.post("/auth/register", json=register_payload(password="123", name="A"))
    assert res.status_code == 400
    body = res.json()
    assert body["message"] == "Invalid data"
    fields = {e["field"] for e in body["errors"]}
    assert "password" in fields
    assert "name" in fields
    assert db.query(User).count() == 0


def test_login_errors_are_generic(client, make_user):
    make_user(email="ana@example.com", password="right-pass")
    wrong_password = client.post("/auth/login", json={"email": "ana@example.com", "password": "wrong-pass"})
    unknown_user = client.post("/auth/login", json={"email": "nobody@example.com", "password": "wrong-pass"})
    assert wrong_password.status_code == unknown_user.status_code == 401
    assert wrong_password.json() == unknown_user.json() == {"message": "Invalid credentials"}


def test_me_requires_token(client):
    assert client.get("/auth/me").status_code == 401
    res = client.get("/auth/me", headers={"Authorization": "Bearer not-a-token"})
    assert res.status_code == 401
    assert res.json() == {"message": "Unauthorized"}


def test_me_returns_public_profile(client, make_user, auth_headers):
    user = make_user()
    res = client.get("/auth/me", headers=auth_headers(user))
    assert res.status_code == 200
    assert res.json() == {"id": user.id, "email": user.email, "name": "Ana", "role": "STUDENT"}


def test_forgot_password_same_answer_for_unknown_email(client, make_user, monkeypatch):
    sent = []
    monkeypatch.setattr("auth.send_password_reset", lambda *args: sent.append(args))
    make_user(email="ana@example.com")

    known = client.post("/auth/forgot-password", json={"email": "ana@example.com"})
    unknown = client.post("/auth/forgot-password", json={"email": "ghost@example.com"})
    assert known.status_code == unknown.status_code == 200
    assert known.json() == unknown.json()
    assert len(sent) == 1
    assert sent[0][0] == "ana@example.com"


def test_forgot_password_stores_token_with_expiry(client, db, make_user, monkeypatch):
    monkeypatch.setattr("auth.send_password_reset", lambda *args: None)
    user = make_user(email="ana@example.com")
    client.post("/auth/forgot-password", json={"email": "ana@example.com"})

    db.expire_all()
    user = db.get(User, user.id)
    assert len(user.reset_token) == 64
    remaining = user.reset_token_expiry - utcnow()
    assert timedelta(minutes=59) < remaining <= timedelta(minutes=60)


def test_forgot_password_survives_mail_failure(client, make_user, monkeypatch):
    def boom(*args):
        raise OSError("smtp down")

    monkeypatch.setattr("auth.send_password_reset", boom)
    make_user(email="ana@example.com")
    res = client.post("/auth/forgot-password", json={"email": "ana@example.com"})
    assert res.status_code == 200


def test_reset_password_changes_hash_and_clears_token(client, db, make_user):
    user = make_user(email="ana@example.com", password="old-pass")
    user.reset_token = "a" * 64
    user.reset_token_expiry = utcnow() + timedelta(minutes=30)
    db.commit()

    res = client.post("/auth/reset-password", json={"token": "a" * 64, "newPassword": "new-pass"})
    assert res.status_code == 200

    db.expire_all()
    user = db.get(User, user.id)
    assert verify_password("new-pass", user.password_hash)
    assert user.reset_token is None
    assert user.reset_token_expiry is None
    assert client.post("/auth/login", json={"email": "ana@example.com", "password": "new-pass"}).status_code == 200

    # the token is single-use
    again = client.post("/auth/reset-password", json={"token": "a" * 64, "newPassword": "other-pass"})
    assert again.status_code == 400


def test_reset_password_rejects_expired_token(client, db, make_user):
    user = make_user(email="ana@example.com", password="old-pass")
    user.reset_token = "b" * 64
    user.reset_token_expiry = utcnow() - timedelta(seconds=1)
    db.commit()

    res = client.post("/auth/reset-password", json={"token": "b" * 64, "newPassword": "new-pass"})
    assert res.status_code == 400
    assert res.json() == {"message": "The link is invalid or has expired"}

    db.expire_all()
    assert verify_password("old-pass", db.get(User, user.id).password_hash)


def test_reset_email_renders_link():
    html = mailer.render_reset_email("Ana", "https://front.test/reset-password?token=abc", 60)
    assert "Ana" in html
    assert "https://front.test/reset-password?token=abc" in html
    assert "60 minutes" in html


def test_oversized_password_is_a_validation_error(client, db):
    res = client.post("/auth/register", json=register_payload(password="x" * 5000))
    assert res.status_code == 400
    assert "password" in {e["field"] for e in res.json()["errors"]}
    assert db.query(User).count() == 0


def test_oversized_password_on_reset_is_a_validation_error(client, db, make_user):
    user = make_user(email="ana@example.com", password="old-pass")
    user.reset_token = "c" * 64
    user.reset_token_expiry = utcnow() + timedelta(minutes=30)
    db.commit()

    res = client.post("/auth/reset-password", json={"token": "c" * 64, "newPassword": "x" * 5000})
    assert res.status_code == 400
    assert "newPassword" in {e["field"] for e in res.json()["errors"]}


def test_oversized_login_password_gets_generic_401(client, make_user):
    make_user(email="ana@example.com", password="right-pass")
    res = client.post("/auth/login", json={"email": "ana@example.com", "password": "x" * 5000})
    assert res.status_code == 401
    assert res.json() == {"message": "Invalid credentials"}
    assert not verify_password("x" * 5000, make_user(email="eva@example.com").password_hash)
