"""Admin accounts, bearer tokens and OTP password reset."""
import datetime as dt
import hmac
import logging
import secrets

import jwt
from flask import current_app

from catalog_admin import extensions
from catalog_admin.errors import AuthError, ConflictError, NotFoundError, ValidationError
from catalog_admin.extensions import db
from catalog_admin.forms import clean_str, required_str
from catalog_admin.models.user import User
from catalog_admin.services.transactions import atomic

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def _secret():
    return current_app.config["JWT_SECRET"]


def _normalize_email(value):
    email = required_str(value, "email").lower()
    if "@" not in email or email.startswith("@") or email.endswith("@"):
        raise ValidationError("Invalid email")
    return email


def _check_password(password):
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"password must be at least {MIN_PASSWORD_LENGTH} characters"
        )
    return password


def _find_user(email):
    return User.query.filter(db.func.lower(User.email) == email).first()


def issue_token(user):
    payload = {
        "sub": str(user.id),
        "email": user.email,
        "exp": dt.datetime.now(dt.timezone.utc)
        + dt.timedelta(days=current_app.config["JWT_EXPIRES_DAYS"]),
    }
    return jwt.encode(payload, _secret(), algorithm="HS256")


def verify_token(token):
    """Return the User a token was issued to, or raise AuthError."""
    if not token:
        raise AuthError("Authorization token missing")
    try:
        data = jwt.decode(token, _secret(), algorithms=["HS256"])
    except jwt.ExpiredSignatureError:
        raise AuthError("Token expired")
    except jwt.InvalidTokenError:
        raise AuthError("Invalid token")

    try:
        user_id = int(data.get("sub"))
    except (TypeError, ValueError):
        raise AuthError("Invalid token")
    user = db.session.get(User, user_id)
    if user is None:
        raise AuthError("Invalid token")
    return user


def register(name, email, password):
    name = required_str(name, "name")
    email = _normalize_email(email)
    _check_password(password)

    with atomic():
        if _find_user(email):
            raise ConflictError("Email already registered")
        user = User(name=name, email=email)
        user.set_password(password)
        db.session.add(user)

    logger.info("Registered admin user %s", email)
    return user, issue_token(user)


def login(email, password):
    email = _normalize_email(email)
    user = _find_user(email)
    if user is None or not user.check_password(password or ""):
        logger.info("Failed login for %s", email)
        raise AuthError("Invalid credentials")
    return user, issue_token(user)


def ensure_admin(name, email, password):
    """Create the admin account if it does not exist yet. Returns (user, created)."""
    email = _normalize_email(email)
    user = _find_user(email)
    if user:
        return user, False
    user, _ = register(name, email, password)
    return user, True


# ---------------------------------------------------------------------------
# OTP password reset
# ---------------------------------------------------------------------------

def _otp_key(email):
    return f"otp:{email}"


def _verified_key(email):
    return f"otp_verified:{email}"


def _attempts_key(email):
    return f"otp_attempts:{email}"


def generate_otp():
    return f"{secrets.randbelow(10 ** 6):06d}"


def send_otp(email, store):
    """Store a fresh code for `email` and queue the mail that delivers it."""
    email = _normalize_email(email)
    user = _find_user(email)
    if user is None:
        raise NotFoundError("User not found")

    otp = generate_otp()
    store.set(_otp_key(email), otp, current_app.config["OTP_TTL_SECONDS"])
    store.delete(_verified_key(email))
    store.delete(_attempts_key(email))
    extensions.task_queue.enqueue(
        "catalog_admin.workers.mail.send_otp_mail", user.email, user.name, otp
    )
    logger.info("OTP issued for %s", email)
    return otp


def _record_failed_attempt(email, store):
    """Count a wrong guess; the code is burned after OTP_MAX_ATTEMPTS misses."""
    attempts = int(store.get(_attempts_key(email)) or 0) + 1
    if attempts >= current_app.config["OTP_MAX_ATTEMPTS"]:
        store.delete(_otp_key(email))
        store.delete(_attempts_key(email))
        logger.warning("OTP for %s invalidated after %d failed attempts", email, attempts)
        raise ValidationError("Too many invalid attempts, request a new OTP")
    store.set(_attempts_key(email), str(attempts), current_app.config["OTP_TTL_SECONDS"])


def verify_otp(email, otp, store):
    email = _normalize_email(email)
    otp = clean_str(otp)
    if not otp:
        raise ValidationError("otp is required")

    expected = store.get(_otp_key(email))
    if expected is None:
        raise ValidationError("OTP expired or not requested")
    if not hmac.compare_digest(expected.encode(), otp.encode()):
        _record_failed_attempt(email, store)
        raise ValidationError("Invalid OTP")

    store.delete(_otp_key(email))
    store.delete(_attempts_key(email))
    store.set(_verified_key(email), "1", current_app.config["OTP_VERIFIED_TTL_SECONDS"])
    return True


def reset_password(email, password, store):
    email = _normalize_email(email)
    _check_password(password)
    if store.get(_verified_key(email)) is None:
        raise ValidationError("OTP verification required")

    with atomic():
        user = _find_user(email)
        if user is None:
            raise NotFoundError("User not found")
        user.set_password(password)

    store.delete(_verified_key(email))
    logger.info("Password reset for %s", email)
    return user
