# accounts/authentication.py
from django.conf import settings
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.tokens import AccessToken


def issue_session_token(user):
    """Signed token carrying the user id and domain, valid for seven days."""
    token = AccessToken.for_user(user)
    token['domain'] = user.token_domain
    return str(token)


def set_session_cookie(response, token):
    cookie = settings.AUTH_COOKIE
    response.set_cookie(
        cookie['NAME'],
        token,
        max_age=cookie['MAX_AGE'],
        httponly=cookie['HTTPONLY'],
        secure=cookie['SECURE'],
        samesite=cookie['SAMESITE'],
    )
    return response


def clear_session_cookie(response):
    cookie = settings.AUTH_COOKIE
    response.delete_cookie(cookie['NAME'], samesite=cookie['SAMESITE'])
    return response


def _error_message(exc):
    detail = exc.detail
    if isinstance(detail, dict):
        detail = detail.get('detail', detail)
    return str(detail)


class CookieJWTAuthentication(JWTAuthentication):
    """
    Reads the session token from the ``token`` cookie.

    A missing or bad token never raises here: the request continues as
    anonymous and the token error is kept on ``request.token_error`` so that
    views requiring a caller can report it (see ``IsTokenAuthenticated``).
    """

    def authenticate(self, request):
        raw_token = request.COOKIES.get(settings.AUTH_COOKIE['NAME'])
        if not raw_token:
            return None

        try:
            validated_token = self.get_validated_token(raw_token)
            user = self.get_user(validated_token)
        except AuthenticationFailed as exc:
            request.token_error = _error_message(exc)
            return None

        return user, validated_token
