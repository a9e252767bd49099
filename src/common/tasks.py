"""Common tasks."""

import smtplib

import structlog
from celery import shared_task
from django.conf import settings
from django.core.mail import EmailMultiAlternatives

logger = structlog.get_logger(__name__)


@shared_task
def send_email(*, to: str | list[str], subject: str, body: str, html_body: str | None = None) -> bool:
    """Send an email.

    Delivery is best-effort: transport failures are logged and reported
    through the return value instead of being raised.

    Args:
        to (str): The email address.
        subject (str): The email subject.
        body (str): The email body.
        html_body (str | None): The HTML email body.

    Returns:
        True if the message was handed to the mail backend.
    """
    recipients = [to] if isinstance(to, str) else to
    email_msg = EmailMultiAlternatives(
        subject=subject,
        body=body,
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=recipients,
    )
    if html_body:  # pragma: no branch
        email_msg.attach_alternative(html_body, "text/html")
    try:
        email_msg.send(fail_silently=False)
    except (smtplib.SMTPException, OSError):
        logger.warning("email_delivery_failed", subject=subject, recipients=len(recipients), exc_info=True)
        return False
    logger.info("email_sent", subject=subject, recipients=len(recipients))
    return True
