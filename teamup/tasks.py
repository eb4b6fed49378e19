import logging

from celery import shared_task
from django.core.mail import send_mail

logger = logging.getLogger(__name__)


@shared_task(ignore_result=True)
def send_notification_email(subject, message, sender, recipient, html_message=None):
    """
    Delivers one best-effort notification email. A failed send is logged
    and dropped, never retried.
    """
    try:
        send_mail(
            subject=subject,
            message=message,
            from_email=sender,
            recipient_list=[recipient],
            html_message=html_message,
            fail_silently=False,
        )
    except Exception as exc:
        logger.warning("Email '%s' to %s failed: %s", subject, recipient, exc)
        return False
    return True
