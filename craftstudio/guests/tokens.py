"""
Magic-link tokens and the guest JWT they are exchanged for.

Guest JWTs carry {"guest": true, "typ": "guest", "email", "order_ids"} and are
signed with JWT_GUEST_SECRET, separately from account tokens.
"""
import hashlib
import secrets
from datetime import datetime, timezone as dt_timezone

from django.conf import settings
from rest_framework_simplejwt.backends import TokenBackend
from rest_framework_simplejwt.exceptions import TokenBackendError

GUEST_TOKEN_TYPE = 'guest'


class InvalidGuestToken(Exception):
    pass


def _backend():
    return TokenBackend('HS256', signing_key=settings.JWT_GUEST_SECRET)


def generate_link_token():
    """Return (raw_token, sha256_hex); only the hash is persisted"""
    token = secrets.token_urlsafe(32)
    return token, hash_link_token(token)


def hash_link_token(token):
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


def issue_guest_token(email, order_ids=None):
    now = datetime.now(dt_timezone.utc)
    payload = {
        'guest': True,
        'typ': GUEST_TOKEN_TYPE,
        'email': email,
        'order_ids': list(order_ids or []),
        'iat': int(now.timestamp()),
        'exp': int((now + settings.GUEST_TOKEN_LIFETIME).timestamp()),
    }
    return _backend().encode(payload)


def decode_guest_token(token):
    try:
        payload = _backend().decode(token, verify=True)
    except TokenBackendError as e:
        raise InvalidGuestToken(str(e)) from e
    if payload.get('guest') is not True or payload.get('typ') != GUEST_TOKEN_TYPE:
        raise InvalidGuestToken('Not a guest token')
    if not payload.get('email'):
        raise InvalidGuestToken('Guest token has no email')
    return payload
