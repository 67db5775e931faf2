from fastapi_mail import FastMail, MessageSchema, ConnectionConfig
from jinja2 import Environment, FileSystemLoader, TemplateNotFound, select_autoescape
from sqlalchemy.orm import Session
from typing import Any, Dict, Optional
import logging
import os

from app.models.templates import EmailTemplate
from app.utils.template import render_placeholders

logger = logging.getLogger(__name__)

TEMPLATE_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "templates", "email")

env = Environment(loader=FileSystemLoader(TEMPLATE_DIR), autoescape=select_autoescape(["html"]))

# Subjects for the built-in templates, used when no enabled template row exists
DEFAULT_SUBJECTS = {
    "registration_complete": "🎓 Registration Complete - Your ID Card is Ready!",
    "payment_receipt": "Payment Receipt - {{payment_type}}",
}


class EmailService:
    """Sends HTML mail through SMTP, trying STARTTLS (587) first and SSL (465) second."""

    def __init__(self, host: str, username: str, password: str, from_email: str, from_name: str = "Training Center"):
        self.host = host
        self.username = username
        self.password = password
        self.from_email = from_email
        self.from_name = from_name

    @classmethod
    def from_settings(cls, settings) -> "EmailService":
        return cls(
            host=settings.EMAIL_HOST,
            username=settings.EMAIL_HOST_USER,
            password=settings.EMAIL_HOST_PASSWORD,
            from_email=settings.EMAIL_FROM,
            from_name=settings.EMAIL_FROM_NAME,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.host and self.username and self.password and self.from_email)

    def _connection(self, port: int, ssl: bool) -> ConnectionConfig:
        return ConnectionConfig(
            MAIL_USERNAME=self.username,
            MAIL_PASSWORD=self.password,
            MAIL_FROM=self.from_email,
            MAIL_FROM_NAME=self.from_name,
            MAIL_PORT=port,
            MAIL_SERVER=self.host,
            MAIL_STARTTLS=not ssl,
            MAIL_SSL_TLS=ssl,
            USE_CREDENTIALS=True,
            VALIDATE_CERTS=True,
        )

    # 🔁 Central retry wrapper
    async def send_email(self, to_email: str, subject: str, html: str) -> bool:
        if not self.is_configured:
            logger.warning(f"SMTP not configured; skipping '{subject}' email to {to_email}")
            return False

        message = MessageSchema(
            subject=subject,
            recipients=[to_email],
            body=html,
            subtype="html"
        )

        try:
            await FastMail(self._connection(587, ssl=False)).send_message(message)
            logger.info(f"{subject} email sent to {to_email} via port 587")
            return True
        except Exception as e:
            logger.warning(f"Failed to send {subject} via port 587: {str(e)}")
            try:
                await FastMail(self._connection(465, ssl=True)).send_message(message)
                logger.info(f"{subject} email sent to {to_email} via port 465")
                return True
            except Exception as e2:
                logger.error(f"Failed to send {subject} email via both ports: {str(e2)}")
                return False

    async def send_template(self, db: Session, to_email: str, template_key: str, data: Dict[str, Any]) -> bool:
        """
        Send a keyed template. An enabled `email_templates` row wins; otherwise the
        built-in Jinja2 template of the same name is rendered.
        """
        subject, html = render_email(db, template_key, data)
        return await self.send_email(to_email, subject, html)


def render_default_template(template_key: str, data: Dict[str, Any]) -> Optional[str]:
    try:
        return env.get_template(f"{template_key}.html").render(**data)
    except TemplateNotFound:
        return None


def render_email(db: Session, template_key: str, data: Dict[str, Any]) -> tuple:
    template = db.query(EmailTemplate).filter(
        EmailTemplate.template_key == template_key,
        EmailTemplate.is_enabled.is_(True),
    ).first()

    if template:
        return (
            render_placeholders(template.subject_template, data),
            render_placeholders(template.html_template, data),
        )

    subject = render_placeholders(DEFAULT_SUBJECTS.get(template_key, f"Notification - {template_key}"), data)
    html = render_default_template(template_key, data)
    if html is None:
        logger.warning(f"No template found for '{template_key}', using generic layout")
        html = env.get_template("generic.html").render(subject=subject, data=data)
    return subject, html
