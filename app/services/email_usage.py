"""Daily email counters backing the per-provider send limits."""

from datetime import date, datetime
from sqlmodel import Session, select

from app.models.email_usage import EmailUsage
from app.models.enums import EmailProvider


def _get_or_create_today(session: Session, provider: EmailProvider) -> EmailUsage:
    today = date.today()
    usage = session.exec(
        select(EmailUsage).where(
            EmailUsage.provider == provider, EmailUsage.usage_date == today
        )
    ).first()
    if usage is None:
        usage = EmailUsage(
            provider=provider, usage_date=today, count=0, last_reset=datetime.now()
        )
        session.add(usage)
        session.flush()
    return usage


def get_daily_usage(session: Session, provider: EmailProvider) -> int:
    """
    Number of emails already sent today through `provider`.

    Creates today's counter row on first use.
    """
    return _get_or_create_today(session, provider).count


def increment_usage(session: Session, provider: EmailProvider) -> int:
    """
    Count one successfully sent email and commit the counter.

    Returns:
        int: The updated count for today.
    """
    usage = _get_or_create_today(session, provider)
    usage.count += 1
    session.add(usage)
    session.commit()
    return usage.count
