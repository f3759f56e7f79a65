"""Email delivery through Brevo (SMTP relay) and MailerLite (HTTP API).

Transactional and important mail goes through Brevo, marketing mail through
MailerLite. Each provider enforces its own daily limit using the
``email_usage`` table; a provider over its limit reports failure instead of
sending. Provider errors are returned as a failed ``EmailResponse`` so that
callers decide whether a failed email matters.
"""

from typing import Any
import httpx
from fastapi_mail import FastMail, MessageSchema, ConnectionConfig, MessageType
from loguru import logger
from pydantic import BaseModel
from sqlmodel import Session

from app.core.config import get_settings
from app.models.enums import EmailProvider, EmailType
from app.services import email_usage
from app.utils.validation import mask_email


class EmailOptions(BaseModel):
    to: str
    subject: str
    html: str
    text: str | None = None


class EmailResponse(BaseModel):
    success: bool
    provider: EmailProvider
    message_id: str | None = None
    error: str | None = None


EMAIL_TEMPLATES = {
    "opportunity_status_changed": {
        "subject": "Your opportunity \"{opportunity_title}\" is now {status_label}",
        "body": """
            <html><body>
            <h2>Opportunity status updated</h2>
            <p>Hello {host_name},</p>
            <p>The status of "{opportunity_title}" changed to <strong>{status_label}</strong>.</p>
            <p>{status_message}</p>
            <p><strong>Reason:</strong> {reason}</p>
            <p><a href="{frontend_url}/hosts/opportunities/{opportunity_id}">Open the opportunity</a></p>
            </body></html>
        """,
    },
    "application_received": {
        "subject": "New application for {opportunity_title}",
        "body": """
            <html><body>
            <h2>New application</h2>
            <p>Hello {host_name},</p>
            <p>{applicant_name} applied to "{opportunity_title}".</p>
            <p><a href="{frontend_url}/hosts/applications/{application_id}">Review the application</a></p>
            </body></html>
        """,
    },
    "application_status_changed": {
        "subject": "Your application for {opportunity_title}: {status_label}",
        "body": """
            <html><body>
            <h2>Application update</h2>
            <p>Hello {applicant_name},</p>
            <p>Your application for "{opportunity_title}" is now <strong>{status_label}</strong>.</p>
            <p>{note}</p>
            <p><a href="{frontend_url}/profile/applications/{application_id}">View the application</a></p>
            </body></html>
        """,
    },
    "host_status_changed": {
        "subject": "Host profile {host_name}: {status}",
        "body": """
            <html><body>
            <h2>Host profile update</h2>
            <p>Hello {host_name},</p>
            <p>Your host profile status is now <strong>{status}</strong>.</p>
            <p>{status_note}</p>
            </body></html>
        """,
    },
    "account_deactivated": {
        "subject": "Your TaiwanStay account has been deactivated",
        "body": """
            <html><body>
            <h2>Account deactivated</h2>
            <p>Hello {username},</p>
            <p>Your account has been deactivated by an administrator.
            Contact support if you believe this is a mistake.</p>
            </body></html>
        """,
    },
    "password_reset": {
        "subject": "Reset your TaiwanStay password",
        "body": """
            <html><body>
            <h2>Password reset</h2>
            <p>Hello {username},</p>
            <p>Someone asked to reset the password of your account.
            Use the link below within {expires_minutes} minutes:</p>
            <p><a href="{frontend_url}/auth/reset-password?token={token}">Choose a new password</a></p>
            <p>If you did not ask for this, ignore this email.</p>
            </body></html>
        """,
    },
    "newsletter": {
        "subject": "{subject}",
        "body": """
            <html><body>
            <p>{content}</p>
            <hr>
            <p><small>TaiwanStay</small></p>
            </body></html>
        """,
    },
}

PROVIDER_FOR_TYPE: dict[EmailType, EmailProvider] = {
    EmailType.TRANSACTIONAL: EmailProvider.BREVO,
    EmailType.IMPORTANT: EmailProvider.BREVO,
    EmailType.MARKETING: EmailProvider.MAILERLITE,
}


def get_email_config() -> ConnectionConfig:
    """
    Create and return the Brevo SMTP configuration for FastMail.

    Raises:
        ValueError: If required email settings are not configured.
    """
    settings = get_settings()

    if not settings.SMTP_USER:
        raise ValueError("SMTP_USER is required for email functionality")
    if not settings.SMTP_PASSWORD:
        raise ValueError("SMTP_PASSWORD is required for email functionality")
    if not settings.SMTP_FROM_EMAIL:
        raise ValueError("SMTP_FROM_EMAIL is required for email functionality")

    return ConnectionConfig(
        MAIL_USERNAME=settings.SMTP_USER,
        MAIL_PASSWORD=settings.SMTP_PASSWORD.get_secret_value(),
        MAIL_FROM=settings.SMTP_FROM_EMAIL,
        MAIL_FROM_NAME=settings.SMTP_FROM_NAME,
        MAIL_PORT=settings.SMTP_PORT,
        MAIL_SERVER=settings.SMTP_HOST,
        MAIL_STARTTLS=True,
        MAIL_SSL_TLS=False,
        USE_CREDENTIALS=True,
        VALIDATE_CERTS=True,
    )


class BrevoProvider:
    """Sends through the Brevo SMTP relay with fastapi-mail."""

    name = EmailProvider.BREVO

    @property
    def daily_limit(self) -> int:
        return get_settings().BREVO_DAILY_LIMIT

    async def deliver(self, options: EmailOptions) -> str | None:
        message = MessageSchema(
            subject=options.subject,
            recipients=[options.to],
            body=options.html,
            subtype=MessageType.html,
        )
        fm = FastMail(get_email_config())
        await fm.send_message(message)
        return None


class MailerLiteProvider:
    """Pushes marketing content to MailerLite's subscriber API with httpx."""

    name = EmailProvider.MAILERLITE

    @property
    def daily_limit(self) -> int:
        return get_settings().MAILERLITE_DAILY_LIMIT

    async def deliver(self, options: EmailOptions) -> str | None:
        settings = get_settings()
        if not settings.MAILERLITE_API_KEY:
            raise ValueError("MAILERLITE_API_KEY is required for marketing email")

        async with httpx.AsyncClient(
            timeout=settings.MAILERLITE_TIMEOUT_SECONDS
        ) as client:
            response = await client.post(
                f"{settings.MAILERLITE_API_URL}/subscribers",
                headers={
                    "Authorization": f"Bearer {settings.MAILERLITE_API_KEY.get_secret_value()}",
                    "Accept": "application/json",
                },
                json={
                    "email": options.to,
                    "fields": {
                        "subject": options.subject,
                        "html_content": options.html,
                        "text_content": options.text or "",
                    },
                    "status": "active",
                },
            )
            response.raise_for_status()
            data = response.json().get("data") or {}
            return str(data["id"]) if "id" in data else None


class EmailService:
    """Routes an email to the provider for its type and enforces daily limits."""

    def __init__(self, providers: dict[EmailProvider, Any] | None = None):
        self.providers = providers or {
            EmailProvider.BREVO: BrevoProvider(),
            EmailProvider.MAILERLITE: MailerLiteProvider(),
        }

    def provider_for(self, email_type: EmailType) -> EmailProvider:
        return PROVIDER_FOR_TYPE.get(email_type, EmailProvider.BREVO)

    async def send_email(
        self,
        session: Session,
        options: EmailOptions,
        email_type: EmailType = EmailType.TRANSACTIONAL,
    ) -> EmailResponse:
        """
        Send one email through the provider selected by `email_type`.

        The provider's counter is checked before sending and incremented only
        after a successful send.

        Args:
            session: Database session holding the usage counters.
            options: Recipient, subject and content.
            email_type: Decides the provider (Brevo or MailerLite).

        Returns:
            EmailResponse: `success=False` with an `error` when the daily limit
                is reached or the provider call fails.
        """
        provider_name = self.provider_for(email_type)
        provider = self.providers[provider_name]

        current_usage = email_usage.get_daily_usage(session, provider_name)
        if current_usage >= provider.daily_limit:
            logger.warning(
                f"Daily email limit reached for {provider_name.value} "
                f"({current_usage}/{provider.daily_limit})"
            )
            return EmailResponse(
                success=False,
                provider=provider_name,
                error="Daily email limit reached",
            )

        try:
            message_id = await provider.deliver(options)
        except Exception as e:
            logger.exception(
                f"{provider_name.value} failed to send email to {mask_email(options.to)}"
            )
            return EmailResponse(success=False, provider=provider_name, error=str(e))

        email_usage.increment_usage(session, provider_name)
        logger.info(f"Email sent to {mask_email(options.to)} via {provider_name.value}")
        return EmailResponse(success=True, provider=provider_name, message_id=message_id)


email_service = EmailService()


def render_template(template_name: str, context: dict[str, Any]) -> EmailOptions:
    """
    Render a named template into EmailOptions (without a recipient yet).

    Raises:
        ValueError: If template_name doesn't exist.
    """
    if template_name not in EMAIL_TEMPLATES:
        raise ValueError(f"Unknown email template: {template_name}")

    template = EMAIL_TEMPLATES[template_name]
    return EmailOptions(
        to="",
        subject=template["subject"].format(**context),
        html=template["body"].format(**context),
    )


async def send_notification_email(
    session: Session,
    template_name: str,
    recipient_email: str,
    context: dict[str, Any],
    email_type: EmailType = EmailType.TRANSACTIONAL,
) -> EmailResponse:
    """
    Send notification email using a template.

    Args:
        session: Database session for the provider usage counters
        template_name: Name of the template from EMAIL_TEMPLATES
        recipient_email: Email address to send to
        context: Variables to format into the template
        email_type: Routing category; notifications are transactional by default

    Returns:
        EmailResponse: Outcome of the send

    Raises:
        ValueError: If template_name doesn't exist
    """
    options = render_template(template_name, context)
    options.to = recipient_email
    return await email_service.send_email(session, options, email_type)
