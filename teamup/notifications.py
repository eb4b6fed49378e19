# teamup/notifications.py
import logging
from dataclasses import dataclass

from django.conf import settings
from django.core.mail import send_mail

from .tasks import send_notification_email

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotificationConfig:
    sender: str
    enabled: bool = True


class EmailNotifier:
    """
    Sends the emails TeamUp produces.

    Team notifications (application received, accepted, rejected) and the
    welcome email are best effort: they are queued as a Celery task that
    makes a single attempt, and send or queueing errors are logged and
    swallowed, never retried.
    OTP emails are part of the OTP flow, so their delivery errors propagate.
    """

    def __init__(self, config: NotificationConfig):
        self.config = config

    def _deliver(self, subject, recipient, message, html_message=None):
        if not self.config.enabled or not recipient:
            return False
        send_mail(
            subject,
            message,
            self.config.sender,
            [recipient],
            html_message=html_message,
            fail_silently=False,
        )
        return True

    def _deliver_quietly(self, subject, recipient, message, html_message=None):
        if not self.config.enabled or not recipient:
            return False
        try:
            send_notification_email.delay(subject, message, self.config.sender, recipient, html_message)
        except Exception:
            logger.warning("Could not queue '%s' for %s", subject, recipient, exc_info=True)
            return False
        return True

    # Team lifecycle

    def application_received(self, team, applicant):
        creator = team.creator
        return self._deliver_quietly(
            f'New application for "{team.name}"',
            creator.email,
            (
                'A user applied to your team.\n\n'
                f'Team: {team.name}\n'
                f'Applicant: {applicant.name} ({applicant.email})'
            ),
        )

    def applicant_accepted(self, team, applicant):
        name = applicant.name or 'there'
        return self._deliver_quietly(
            f'Accepted to "{team.name}"',
            applicant.email,
            f'Hi {name}, you have been accepted to join the team "{team.name}". Welcome aboard!',
            html_message=(
                f'<p>Hi {name},</p><p>Congratulations, you have been accepted to join the team '
                f'"<strong>{team.name}</strong>". Welcome aboard!</p>'
            ),
        )

    def applicant_rejected(self, team, applicant):
        name = applicant.name or 'there'
        return self._deliver_quietly(
            f'Update on your application to "{team.name}"',
            applicant.email,
            (
                f'Hi {name}, thank you for applying to "{team.name}". After careful '
                'consideration, the team has decided to move forward with other candidates.'
            ),
            html_message=(
                f'<p>Hi {name},</p><p>Thank you for applying to "<strong>{team.name}</strong>". '
                'After careful consideration, the team has decided to move forward with other '
                'candidates.</p>'
            ),
        )

    # Accounts

    def welcome(self, user):
        return self._deliver_quietly(
            'Welcome to TeamUp!',
            user.email,
            f'Hello! Thanks for registering with us with your email: {user.email}',
        )

    def verification_otp(self, user, otp):
        return self._deliver(
            'Account verification OTP',
            user.email,
            f'Hello! Thanks for registering with us. Your OTP is {otp}',
        )

    def reset_otp(self, user, otp):
        return self._deliver(
            'Password Reset OTP',
            user.email,
            f'Your password reset OTP is {otp}. It will expire in {settings.OTP_EXPIRY_MINUTES} minutes.',
        )


def build_notifier():
    return EmailNotifier(NotificationConfig(
        sender=settings.DEFAULT_FROM_EMAIL,
        enabled=settings.NOTIFICATIONS_ENABLED,
    ))
