import logging
import os
import smtplib
from email.message import EmailMessage

logger = logging.getLogger(__name__)


class EmailNotConfigured(RuntimeError):
    pass


def _env_bool(name: str, default: str = "1") -> bool:
    v = (os.getenv(name, default) or default).strip().lower()
    return v in {"1", "true", "yes", "y", "on"}


def _smtp_settings() -> dict:
    user = (os.getenv("SMTP_USER") or "").strip()
    return {
        "host": (os.getenv("SMTP_HOST") or "").strip(),
        "port": int((os.getenv("SMTP_PORT") or "587").strip()),
        "user": user,
        "password": (os.getenv("SMTP_PASS") or "").strip(),
        "mail_from": (os.getenv("SMTP_FROM") or user).strip(),
        "use_tls": _env_bool("SMTP_TLS", "1"),
    }


def send_password_reset_email(*, to_email: str, reset_url: str, expires_minutes: int = 60) -> None:
    """
    Sends the password reset link using SMTP (Gmail App Password recommended).

    Env vars:
      SMTP_HOST, SMTP_PORT, SMTP_USER, SMTP_PASS, SMTP_FROM, SMTP_TLS
    """
    cfg = _smtp_settings()
    if not cfg["host"] or not cfg["user"] or not cfg["password"] or not cfg["mail_from"]:
        raise EmailNotConfigured("SMTP is not configured (missing SMTP_HOST/SMTP_USER/SMTP_PASS/SMTP_FROM).")

    text = "\n".join(
        [
            "You requested a password reset for your AI Resume Builder account.",
            "",
            "Open the following link to reset your password:",
            reset_url,
            "",
            f"This link will expire in {expires_minutes} minutes.",
            "If you did not request this reset, please ignore this email.",
        ]
    )
    html = (
        "<p>You requested a password reset for your AI Resume Builder account.</p>"
        "<p>Please click on the following link to reset your password:</p>"
        f'<a href="{reset_url}" target="_blank">Reset Password</a>'
        f"<p>This link will expire in {expires_minutes} minutes.</p>"
        "<p>If you did not request this reset, please ignore this email.</p>"
    )

    msg = EmailMessage()
    msg["Subject"] = "Password Reset - AI Resume Builder"
    msg["From"] = cfg["mail_from"]
    msg["To"] = to_email
    msg.set_content(text)
    msg.add_alternative(html, subtype="html")

    logger.info("Sending password reset email via %s:%s (TLS=%s)", cfg["host"], cfg["port"], cfg["use_tls"])
    with smtplib.SMTP(cfg["host"], cfg["port"], timeout=15) as smtp:
        smtp.ehlo()
        if cfg["use_tls"]:
            smtp.starttls()
            smtp.ehlo()
        smtp.login(cfg["user"], cfg["password"])
        smtp.send_message(msg)
    logger.info("Password reset email sent to %s", to_email)
