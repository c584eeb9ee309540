# mailer.py
import logging
import smtplib
from email.mime.text import MIMEText
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from config import get_settings

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
env = Environment(loader=FileSystemLoader(str(TEMPLATES_DIR)), autoescape=select_autoescape(["html"]))


def render_reset_email(name: str, reset_url: str, ttl_minutes: int) -> str:
    return env.get_template("emails/reset_password.html").render(
        name=name,
        reset_url=reset_url,
        ttl_minutes=ttl_minutes,
        site_url=get_settings().frontend_url,
    )


def send_email(to_email: str, subject: str, html: str) -> None:
    settings = get_settings()
    if not settings.mail_enabled:
        logger.info("Mail disabled, not sending %r to %s", subject, to_email)
        return

    msg = MIMEText(html, "html", "utf-8")
    msg["Subject"] = subject
    msg["From"] = settings.mail_from
    msg["To"] = to_email

    with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=10) as server:
        server.starttls()
        if settings.smtp_username:
            server.login(settings.smtp_username, settings.smtp_password)
        server.send_message(msg)
    logger.info("Sent %r to %s", subject, to_email)


def send_password_reset(to_email: str, name: str, token: str) -> None:
    settings = get_settings()
    reset_url = f"{settings.frontend_url.rstrip('/')}/reset-password?token={token}"
    html = render_reset_email(name, reset_url, settings.reset_token_ttl_minutes)
    send_email(to_email, "Password recovery - Blue 7eam", html)
