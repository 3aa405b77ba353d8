"""
Transactional email through a Resend-compatible HTTP API.
Runs from BackgroundTasks: failures are logged and reported as False, never raised.
"""
import logging
from datetime import datetime
from html import escape

import requests

from acrossmedia.config import get_settings

logger = logging.getLogger(__name__)


def send_email(to: str, subject: str, html: str) -> bool:
    settings = get_settings()
    if not settings.email_api_key:
        logger.warning("Email API key not configured; skipping email %r to %s", subject, to)
        return False
    payload = {
        "from": settings.email_from,
        "to": [to],
        "subject": subject,
        "html": html,
    }
    headers = {
        "Authorization": f"Bearer {settings.email_api_key}",
        "Content-Type": "application/json",
    }
    try:
        response = requests.post(
            settings.email_api_url,
            json=payload,
            headers=headers,
            timeout=settings.email_timeout_seconds,
        )
    except requests.RequestException as e:
        logger.error("Email %r to %s failed: %s", subject, to, e)
        return False
    if response.status_code >= 300:
        logger.error("Email %r to %s rejected: HTTP %s %s", subject, to, response.status_code, response.text[:200])
        return False
    logger.info("Email %r sent to %s", subject, to)
    return True


def approval_link(approval_token: str) -> str:
    return f"{get_settings().backend_url.rstrip('/')}/api/auth/approve/{approval_token}"


def send_approval_request_email(
    superadmin_email: str,
    username: str,
    email: str,
    registered_at: datetime,
    approval_token: str,
) -> bool:
    link = approval_link(approval_token)
    html = (
        "<h2>New Admin Registration - Approval Required</h2>"
        "<p>A new admin has registered and is awaiting your approval.</p>"
        f"<ul><li><strong>Username:</strong> {escape(username)}</li>"
        f"<li><strong>Email:</strong> {escape(email)}</li>"
        f"<li><strong>Registered:</strong> {registered_at:%Y-%m-%d %H:%M} UTC</li></ul>"
        f'<p><a href="{link}">Review &amp; Approve</a></p>'
        f"<p>If the link does not work, open this URL: {link}</p>"
    )
    return send_email(superadmin_email, "New Admin Registration - Approval Required", html)


def send_approval_notification(user_email: str, username: str) -> bool:
    login_url = f"{get_settings().frontend_url.rstrip('/')}/admin/login"
    html = (
        f"<p>Dear {escape(username)},</p>"
        "<p>Your account has been approved. You can now log in as an admin.</p>"
        f'<p><a href="{login_url}">Login to Admin Portal</a></p>'
    )
    return send_email(user_email, "AcrossMedia Admin Account Approved", html)
