import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import parseaddr

from flask import current_app

logger = logging.getLogger(__name__)


def send_mail(to_addr, subject, body):
    cfg = current_app.config
    msg = MIMEMultipart()
    msg["From"] = cfg["MAIL_FROM"]
    msg["To"] = to_addr
    msg["Subject"] = subject
    msg.attach(MIMEText(body, "plain", "utf-8"))

    with smtplib.SMTP(cfg["SMTP_HOST"], cfg["SMTP_PORT"]) as server:
        server.starttls()
        if cfg["SMTP_USER"]:
            server.login(cfg["SMTP_USER"], cfg["SMTP_PASS"])
        server.sendmail(parseaddr(cfg["MAIL_FROM"])[1], [to_addr], msg.as_string())
    logger.info("Sent mail %r to %s", subject, to_addr)


def otp_message(name, otp, ttl_seconds):
    minutes = max(ttl_seconds // 60, 1)
    return (
        f"Hi {name},\n\n"
        f"Your password reset code is {otp}.\n"
        f"It expires in {minutes} minute(s). If you did not ask for a reset, "
        f"ignore this message.\n"
    )
