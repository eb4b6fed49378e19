from rest_framework.exceptions import NotAuthenticated, PermissionDenied
from rest_framework.permissions import BasePermission


class IsTokenAuthenticated(BasePermission):
    """
    Mandatory session mode.

    No token -> 401 "Unauthorized access"; invalid or expired token -> 403
    carrying the token error. Views that allow anonymous callers use
    ``AllowAny`` instead and still get ``request.user`` when a valid token
    is present.
    """

    def has_permission(self, request, view):
        if request.user and request.user.is_authenticated:
            return True

        token_error = getattr(request, 'token_error', None)
        if token_error:
            raise PermissionDenied(token_error)
        raise NotAuthenticated('Unauthorized access')
