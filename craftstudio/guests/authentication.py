from rest_framework import authentication, exceptions

from .tokens import decode_guest_token, InvalidGuestToken


class GuestPrincipal:
    """request.user for guest-token requests"""
    is_authenticated = True
    is_anonymous = False
    role = 'guest'

    def __init__(self, email, order_ids=None):
        self.email = email
        self.order_ids = order_ids or []

    def __str__(self):
        return f"guest:{self.email}"


class GuestTokenAuthentication(authentication.BaseAuthentication):
    """
    Guest JWT from the X-Guest-Auth header, falling back to
    Authorization: Bearer <token>.
    """
    keyword = 'Bearer'

    def _raw_token(self, request):
        token = request.META.get('HTTP_X_GUEST_AUTH', '').strip()
        if token:
            return token
        parts = authentication.get_authorization_header(request).split()
        if len(parts) == 2 and parts[0].decode('latin-1').lower() == self.keyword.lower():
            return parts[1].decode('latin-1')
        return None

    def authenticate(self, request):
        token = self._raw_token(request)
        if not token:
            return None
        try:
            payload = decode_guest_token(token)
        except InvalidGuestToken as e:
            raise exceptions.AuthenticationFailed('Invalid guest token') from e
        return GuestPrincipal(payload['email'].lower(), payload.get('order_ids')), payload

    def authenticate_header(self, request):
        return self.keyword
