import logging
import string
from datetime import timedelta

from django.conf import settings
from django.contrib.auth import get_user_model
from django.contrib.auth.hashers import make_password
from django.db import IntegrityError
from django.db.models import Q
from django.utils.crypto import get_random_string
from django.utils.timezone import now

from teamup.notifications import build_notifier

logger = logging.getLogger(__name__)

User = get_user_model()

OTP_FIELDS = {
    'verify': ('verify_otp', 'verify_otp_expire_at'),
    'reset': ('reset_otp', 'reset_otp_expire_at'),
}


class AccountError(Exception):
    """An account flow failed; the message is shown to the user as is."""


def register_user(name, email, password, notifier=None):
    if User.objects.filter(Q(email__iexact=email) | Q(name=name)).exists():
        raise AccountError('User already exists')

    try:
        user = User.objects.create_user(email=email, name=name, password=password)
    except IntegrityError:
        raise AccountError('User already exists')

    logger.info('Registered user %s', user.pk)
    (notifier or build_notifier()).welcome(user)
    return user


def authenticate_user(email, password):
    user = User.objects.filter(email__iexact=email).first()
    if user is None:
        raise AccountError('User not found')
    if not user.check_password(password):
        raise AccountError('Invalid credentials')
    return user


def issue_otp(user, purpose):
    """Store a fresh 6-digit OTP for ``purpose`` ('verify' or 'reset') and return it."""
    code_field, expiry_field = OTP_FIELDS[purpose]
    otp = get_random_string(6, allowed_chars=string.digits)
    setattr(user, code_field, otp)
    setattr(user, expiry_field, now() + timedelta(minutes=settings.OTP_EXPIRY_MINUTES))
    user.save(update_fields=[code_field, expiry_field])
    return otp


def consume_otp(user, purpose, otp, invalid_message, **changes):
    """
    Check ``otp`` against the stored one and clear it, applying ``changes``.

    The clear is a guarded update on the stored code, so an OTP can only be
    consumed once even when two requests race with the same value.
    """
    code_field, expiry_field = OTP_FIELDS[purpose]
    otp = str(otp or '').strip()
    stored = getattr(user, code_field)

    if not stored or stored != otp:
        raise AccountError(invalid_message)
    if user.otp_expired(expiry_field):
        raise AccountError('OTP expired')

    changes.update({code_field: '', expiry_field: None})
    consumed = User.objects.filter(pk=user.pk, **{code_field: otp}).update(**changes)
    if not consumed:
        raise AccountError(invalid_message)

    for field, value in changes.items():
        setattr(user, field, value)
    return user


def send_verify_otp(user, notifier=None):
    if user.is_account_verified:
        raise AccountError('Account already verified')
    otp = issue_otp(user, 'verify')
    (notifier or build_notifier()).verification_otp(user, otp)
    return otp


def verify_account(user, otp):
    consume_otp(user, 'verify', otp, 'Invalid OTP', is_account_verified=True)
    logger.info('Verified account %s', user.pk)
    return user


def send_reset_otp(email, notifier=None):
    user = User.objects.filter(email__iexact=email).first()
    if user is None:
        raise AccountError('User not found')
    otp = issue_otp(user, 'reset')
    (notifier or build_notifier()).reset_otp(user, otp)
    return otp


def reset_password(email, otp, new_password):
    user = User.objects.filter(email__iexact=email).first()
    if user is None:
        raise AccountError('User not found')
    consume_otp(user, 'reset', otp, 'Invalid or expired OTP', password=make_password(new_password))
    logger.info('Password reset for user %s', user.pk)
    return user
