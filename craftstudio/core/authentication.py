import logging

from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import InvalidToken

logger = logging.getLogger(__name__)


class OptionalJWTAuthentication(JWTAuthentication):
    """
    JWT auth for public endpoints: a valid token identifies the user,
    a stale or malformed one is ignored and the request stays anonymous.
    """

    def authenticate(self, request):
        try:
            return super().authenticate(request)
        except (InvalidToken, AuthenticationFailed) as e:
            logger.debug(f"Ignoring invalid token on public endpoint {request.path}: {e}")
            return None
