"""Tests for tokens, login and the OTP reset flow."""
import datetime as dt
from unittest.mock import MagicMock, patch

import jwt
import pytest

import catalog_admin.extensions as ext
from catalog_admin.errors import AuthError, ConflictError, NotFoundError, ValidationError
from catalog_admin.extensions import MemoryExpiringStore, RedisExpiringStore
from catalog_admin.services import auth_service


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_register_and_login(db):
    user, token = auth_service.register("Ada", "Ada@Example.com", "secret123")

    assert user.email == "ada@example.com"
    assert auth_service.verify_token(token).id == user.id

    logged_in, _ = auth_service.login("ADA@example.com", "secret123")
    assert logged_in.id == user.id


def test_register_duplicate_email(admin):
    with pytest.raises(ConflictError):
        auth_service.register("Other", "ADMIN@example.com", "secret123")


def test_register_validation(db):
    with pytest.raises(ValidationError):
        auth_service.register("Ada", "not-an-email", "secret123")
    with pytest.raises(ValidationError):
        auth_service.register("Ada", "ada@example.com", "123")


def test_login_wrong_password(admin):
    with pytest.raises(AuthError, match="Invalid credentials"):
        auth_service.login("admin@example.com", "wrong-password")
    with pytest.raises(AuthError, match="Invalid credentials"):
        auth_service.login("nobody@example.com", "secret123")


def test_expired_token_rejected(app, admin):
    past = dt.datetime.now(dt.timezone.utc) - dt.timedelta(seconds=1)
    token = jwt.encode(
        {"sub": str(admin.id), "exp": past}, app.config["JWT_SECRET"], algorithm="HS256"
    )
    with pytest.raises(AuthError, match="expired"):
        auth_service.verify_token(token)


def test_token_signed_with_other_secret_rejected(admin):
    token = jwt.encode({"sub": str(admin.id)}, "other-secret", algorithm="HS256")
    with pytest.raises(AuthError):
        auth_service.verify_token(token)


def test_token_for_deleted_user_rejected(app, db):
    token = jwt.encode({"sub": "4242"}, app.config["JWT_SECRET"], algorithm="HS256")
    with pytest.raises(AuthError):
        auth_service.verify_token(token)


def test_otp_reset_flow(admin):
    store = MemoryExpiringStore()
    with patch.object(ext, "task_queue") as queue:
        otp = auth_service.send_otp("admin@example.com", store)

    assert len(otp) == 6 and otp.isdigit()
    args = queue.enqueue.call_args[0]
    assert args[0] == "catalog_admin.workers.mail.send_otp_mail"
    assert args[1] == "admin@example.com"
    assert args[3] == otp

    with pytest.raises(ValidationError, match="verification required"):
        auth_service.reset_password("admin@example.com", "newpass123", store)

    with pytest.raises(ValidationError, match="Invalid OTP"):
        wrong = "000000" if otp != "000000" else "111111"
        auth_service.verify_otp("admin@example.com", wrong, store)

    assert auth_service.verify_otp("admin@example.com", otp, store) is True
    with pytest.raises(ValidationError, match="expired or not requested"):
        auth_service.verify_otp("admin@example.com", otp, store)

    auth_service.reset_password("admin@example.com", "newpass123", store)
    auth_service.login("admin@example.com", "newpass123")

    with pytest.raises(ValidationError):
        auth_service.reset_password("admin@example.com", "again12345", store)


def test_otp_expires(app, admin):
    clock = FakeClock()
    store = MemoryExpiringStore(clock=clock)
    with patch.object(ext, "task_queue"):
        otp = auth_service.send_otp("admin@example.com", store)

    clock.now += app.config["OTP_TTL_SECONDS"] + 1

    with pytest.raises(ValidationError, match="expired"):
        auth_service.verify_otp("admin@example.com", otp, store)


def test_otp_for_unknown_user(db):
    with pytest.raises(NotFoundError):
        auth_service.send_otp("ghost@example.com", MemoryExpiringStore())


def test_ensure_admin_is_idempotent(db):
    user, created = auth_service.ensure_admin("Admin", "root@example.com", "secret123")
    again, created_again = auth_service.ensure_admin("Admin", "root@example.com", "secret123")

    assert created is True
    assert created_again is False
    assert again.id == user.id


def test_redis_store_uses_prefix_and_ttl():
    client = MagicMock()
    client.get.return_value = b"123456"
    store = RedisExpiringStore(client)

    store.set("otp:a@b.c", "123456", 300)
    client.setex.assert_called_once_with("catalog:otp:a@b.c", 300, "123456")
    assert store.get("otp:a@b.c") == "123456"
    store.delete("otp:a@b.c")
    client.delete.assert_called_once_with("catalog:otp:a@b.c")


def test_otp_burned_after_too_many_wrong_guesses(app, admin):
    store = MemoryExpiringStore()
    with patch.object(ext, "task_queue"):
        otp = auth_service.send_otp("admin@example.com", store)
    wrong = "000000" if otp != "000000" else "111111"

    for _ in range(app.config["OTP_MAX_ATTEMPTS"] - 1):
        with pytest.raises(ValidationError, match="Invalid OTP"):
            auth_service.verify_otp("admin@example.com", wrong, store)
    with pytest.raises(ValidationError, match="Too many invalid attempts"):
        auth_service.verify_otp("admin@example.com", wrong, store)

    with pytest.raises(ValidationError, match="expired or not requested"):
        auth_service.verify_otp("admin@example.com", otp, store)


def test_new_otp_resets_failed_attempts(app, admin):
    store = MemoryExpiringStore()
    wrong = "abcdef"
    with patch.object(ext, "task_queue"):
        auth_service.send_otp("admin@example.com", store)
        for _ in range(app.config["OTP_MAX_ATTEMPTS"] - 1):
            with pytest.raises(ValidationError, match="Invalid OTP"):
                auth_service.verify_otp("admin@example.com", wrong, store)
        otp = auth_service.send_otp("admin@example.com", store)

    with pytest.raises(ValidationError, match="Invalid OTP"):
        auth_service.verify_otp("admin@example.com", wrong, store)
    assert auth_service.verify_otp("admin@example.com", otp, store) is True


def test_memory_store_sweeps_expired_entries_on_write():
    clock = FakeClock()
    store = MemoryExpiringStore(clock=clock)
    store.set("otp:a@b.c", "123456", 300)
    store.set("otp:d@e.f", "654321", 900)

    clock.now += 301
    store.set("otp:g@h.i", "111111", 300)

    assert set(store._data) == {"otp:d@e.f", "otp:g@h.i"}
    assert store.get("otp:d@e.f") == "654321"
