from flask import current_app, g, jsonify
from flask_limiter.util import get_remote_address

from catalog_admin.blueprints.api import api_bp
from catalog_admin.blueprints.api.common import auth_required, otp_store, request_fields
from catalog_admin.extensions import limiter
from catalog_admin.services import auth_service


def _email_key():
    return (request_fields().get("email") or "").strip().lower()


@api_bp.route("/auth/register", methods=["POST"])
def register():
    data = request_fields()
    user, token = auth_service.register(
        data.get("name"), data.get("email"), data.get("password")
    )
    return jsonify({"message": "Registered", "token": token, "user": user.to_dict()}), 201


@api_bp.route("/auth/login", methods=["POST"])
@limiter.limit(
    lambda: current_app.config["LOGIN_LIMIT_PER_IP"],
    key_func=get_remote_address,
    error_message="Too many login attempts from this IP",
)
def login():
    data = request_fields()
    user, token = auth_service.login(data.get("email"), data.get("password"))
    return jsonify({"message": "Login successful", "token": token, "user": user.to_dict()})


@api_bp.route("/auth/verify-token", methods=["POST"])
@auth_required
def verify_token():
    return jsonify({"valid": True, "user": g.user.to_dict()})


@api_bp.route("/auth/mail-verify", methods=["POST"])
@limiter.limit(
    lambda: current_app.config["OTP_SEND_LIMIT_PER_IP"],
    key_func=get_remote_address,
    error_message="Too many OTP requests from this IP",
)
@limiter.limit(
    lambda: current_app.config["OTP_SEND_LIMIT_PER_EMAIL"],
    key_func=_email_key,
    error_message="Too many OTP requests for this email",
)
def send_otp():
    auth_service.send_otp(request_fields().get("email"), otp_store())
    return jsonify({"message": "OTP sent to your email"})


@api_bp.route("/auth/otp-verify", methods=["POST"])
@limiter.limit(
    lambda: current_app.config["OTP_VERIFY_LIMIT_PER_IP"],
    key_func=get_remote_address,
    error_message="Too many OTP attempts from this IP",
)
def verify_otp():
    data = request_fields()
    auth_service.verify_otp(data.get("email"), data.get("otp"), otp_store())
    return jsonify({"message": "OTP verified"})


@api_bp.route("/auth/reset-password", methods=["POST"])
def reset_password():
    data = request_fields()
    auth_service.reset_password(data.get("email"), data.get("password"), otp_store())
    return jsonify({"message": "Password updated"})
