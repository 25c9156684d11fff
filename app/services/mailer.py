# app/services/mailer.py
"""Outgoing mail over SMTP. Senders return False instead of raising."""
import logging
import smtplib
from email.message import EmailMessage
from html import escape
from urllib.parse import urlencode

from app.core.config import settings
from app.core.security import generate_approval_token

logger = logging.getLogger(__name__)


def smtp_is_configured() -> bool:
    return bool(settings.SMTP_HOST and settings.FROM_EMAIL)


def send_email(to_email: str, subject: str, text: str, html: str) -> bool:
    if not smtp_is_configured():
        logger.warning("SMTP not configured, skipping email %r to %s", subject, to_email)
        return False

    msg = EmailMessage()
    msg["Subject"] = subject
    msg["From"] = settings.FROM_EMAIL
    msg["To"] = to_email
    msg.set_content(text)
    msg.add_alternative(html, subtype="html")

    try:
        with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=10) as smtp:
            if settings.SMTP_USE_TLS:
                smtp.starttls()
            if settings.SMTP_USER:
                smtp.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
            smtp.send_message(msg)
        return True
    except (smtplib.SMTPException, OSError):
        logger.exception("failed to send email %r to %s", subject, to_email)
        return False


def _button(url: str, label: str, color: str = "#3b82f6") -> str:
    return (
        f'<a href="{escape(url)}" style="background-color: {color}; color: white; padding: 12px 24px; '
        f'text-decoration: none; border-radius: 6px; display: inline-block;">{escape(label)}</a>'
    )


def _wrap(body: str) -> str:
    return f'<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">{body}</div>'


def send_verification_email(email: str, name: str, token: str) -> bool:
    url = f"{settings.APP_URL}/verify-email?{urlencode({'token': token})}"
    text = (
        f"Hi {name},\n\nPlease verify your email by clicking the link below:\n\n{url}\n\n"
        f"This link will expire in {settings.EMAIL_TOKEN_EXPIRE_HOURS} hours.\n\n"
        "If you didn't create an account, you can ignore this email."
    )
    html = _wrap(
        f"<h2>Verify your email</h2><p>Hi {escape(name)},</p>"
        f"<p>Please verify your email by clicking the button below:</p>"
        f'<p style="margin: 30px 0;">{_button(url, "Verify Email")}</p>'
        f"<p>This link will expire in {settings.EMAIL_TOKEN_EXPIRE_HOURS} hours.</p>"
    )
    return send_email(email, "Verify your email - Kanban Board", text, html)


def send_password_reset_email(email: str, name: str, token: str) -> bool:
    url = f"{settings.APP_URL}/reset-password?{urlencode({'token': token})}"
    text = (
        f"Hi {name},\n\nReset your password using the link below:\n\n{url}\n\n"
        f"This link will expire in {settings.PASSWORD_RESET_EXPIRE_MINUTES} minutes.\n\n"
        "If you didn't request this, you can ignore this email."
    )
    html = _wrap(
        f"<h2>Reset your password</h2><p>Hi {escape(name)},</p>"
        f'<p style="margin: 30px 0;">{_button(url, "Reset Password")}</p>'
        f"<p>This link will expire in {settings.PASSWORD_RESET_EXPIRE_MINUTES} minutes.</p>"
    )
    return send_email(email, "Reset your password - Kanban Board", text, html)


def approval_url(user_id: str, action: str) -> str:
    query = urlencode({"userId": user_id, "action": action, "token": generate_approval_token(user_id, action)})
    return f"{settings.APP_URL}/api/auth/approve?{query}"


def send_admin_approval_email(user_id: str, email: str, name: str) -> bool:
    if not smtp_is_configured():
        logger.warning("SMTP not configured, skipping admin approval email for user %s", user_id)
        return False
    try:
        approve = approval_url(user_id, "approve")
        reject = approval_url(user_id, "reject")
    except RuntimeError as e:
        logger.error("cannot sign approval links for user %s: %s", user_id, e)
        return False
    text = (
        f"A new user has registered:\n\nName: {name}\nEmail: {email}\n\n"
        f"Approve: {approve}\nReject: {reject}\n"
    )
    html = _wrap(
        f"<h2>New user registration</h2><p><strong>Name:</strong> {escape(name)}<br>"
        f"<strong>Email:</strong> {escape(email)}</p>"
        f'<p style="margin: 30px 0;">{_button(approve, "Approve", "#10b981")} '
        f'{_button(reject, "Reject", "#ef4444")}</p>'
    )
    return send_email(settings.ADMIN_EMAIL, f"New user registration: {name}", text, html)


def send_approval_notification_email(email: str, name: str, approved: bool) -> bool:
    if approved:
        subject = "Your account has been approved - Kanban Board"
        line = f"Your account has been approved. You can now log in at {settings.APP_URL}/login"
    else:
        subject = "Your registration was not approved - Kanban Board"
        line = "Unfortunately your registration was not approved and your account has been removed."
    text = f"Hi {name},\n\n{line}\n"
    html = _wrap(f"<p>Hi {escape(name)},</p><p>{escape(line)}</p>")
    return send_email(email, subject, text, html)


def send_magic_link_email(email: str, token: str) -> bool:
    url = f"{settings.APP_URL}/auth/magic-link?{urlencode({'token': token})}"
    text = (
        f"Click the link below to log in:\n\n{url}\n\n"
        f"This link will expire in {settings.MAGIC_LINK_EXPIRE_MINUTES} minutes and can only be used once."
    )
    html = _wrap(
        "<h2>Your login link</h2>"
        f'<p style="margin: 30px 0;">{_button(url, "Log In")}</p>'
        f"<p>This link will expire in {settings.MAGIC_LINK_EXPIRE_MINUTES} minutes and can only be used once.</p>"
    )
    return send_email(email, "Your login link - Kanban Board", text, html)
