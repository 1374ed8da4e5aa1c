"""RQ jobs for outgoing mail. Run with: rq worker mail"""
import logging
import smtplib
from contextlib import contextmanager

from flask import current_app, has_app_context

from catalog_admin import create_app
from catalog_admin.services import mail_service

logger = logging.getLogger(__name__)

_worker_app = None


@contextmanager
def _app_context():
    """Yield an app inside an app context.

    Jobs executed inline (tests, CLI) reuse the running app; a worker
    process builds its own app once and keeps it.
    """
    global _worker_app
    if has_app_context():
        yield current_app._get_current_object()
        return
    if _worker_app is None:
        _worker_app = create_app()
    with _worker_app.app_context():
        yield _worker_app


def send_otp_mail(email, name, otp):
    """Deliver a password-reset code. SMTP errors propagate so RQ marks the job failed."""
    with _app_context() as app:
        body = mail_service.otp_message(name, otp, app.config["OTP_TTL_SECONDS"])
        try:
            mail_service.send_mail(email, "Your password reset code", body)
        except (smtplib.SMTPException, OSError):
            logger.exception("OTP mail to %s failed", email)
            raise
