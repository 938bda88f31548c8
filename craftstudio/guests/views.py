import logging

from django.conf import settings
from django.db import transaction
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.exceptions import AuthenticationFailed
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from craftstudio.core.authentication import OptionalJWTAuthentication
from craftstudio.core.permissions import is_admin
from craftstudio.core.utils import get_client_ip
from craftstudio.notifications.email_service import send_email_best_effort
from craftstudio.notifications.templates import magic_link_email
from craftstudio.orders.models import Order
from craftstudio.orders.services import create_order
from .authentication import GuestTokenAuthentication
from .models import GuestDraft, GuestMagicLink
from .serializers import (
    GuestDraftSerializer, MagicLinkRequestSerializer, MagicLinkVerifySerializer,
    GuestOrderSerializer, GuestOrderCreateSerializer
)
from .tokens import generate_link_token, hash_link_token, issue_guest_token

logger = logging.getLogger(__name__)

DRAFT_LIST_DEFAULT_LIMIT = 50
DRAFT_LIST_MAX_LIMIT = 200


def _dev_links_allowed():
    return settings.ENVIRONMENT != 'production' or settings.RETURN_DEV_LINKS


def issue_magic_link(request, email, order_ids=None, order_number=None):
    """Store a single-use link for `email` and mail it; returns (link, sent)"""
    token, token_hash = generate_link_token()
    GuestMagicLink.objects.create(
        email=email,
        token_hash=token_hash,
        order_ids=[str(i) for i in order_ids or []],
        intent=GuestMagicLink.INTENT_ORDER_ACCESS,
        expires_at=timezone.now() + settings.GUEST_MAGIC_LINK_LIFETIME,
        created_by_ip=get_client_ip(request),
    )
    link = f"{settings.FRONTEND_BASE_URL}/guest/verify?token={token}"
    subject, text, html = magic_link_email(link, order_number=order_number)
    sent = send_email_best_effort(email, subject, text, html) is not None
    return link, sent


# Guest draft views
@api_view(['GET', 'POST'])
@authentication_classes([OptionalJWTAuthentication])
def guest_draft_list_create(request):
    """Save a draft (public) or list drafts (admin)"""
    if request.method == 'POST':
        serializer = GuestDraftSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        draft = serializer.save()
        return Response(GuestDraftSerializer(draft).data, status=status.HTTP_201_CREATED)

    if not is_admin(request.user):
        return Response({'error': 'Admin access required'}, status=status.HTTP_403_FORBIDDEN)

    drafts = GuestDraft.objects.order_by('-created_at')
    email = request.query_params.get('email')
    if email:
        drafts = drafts.filter(info__email=email)
    draft_type = request.query_params.get('type')
    if draft_type:
        drafts = drafts.filter(type=draft_type)
    try:
        limit = int(request.query_params.get('limit', DRAFT_LIST_DEFAULT_LIMIT))
    except ValueError:
        limit = DRAFT_LIST_DEFAULT_LIMIT
    limit = min(DRAFT_LIST_MAX_LIMIT, limit if limit > 0 else DRAFT_LIST_DEFAULT_LIMIT)
    return Response(GuestDraftSerializer(drafts[:limit], many=True).data)


@api_view(['GET'])
@authentication_classes([OptionalJWTAuthentication])
def guest_draft_detail(request, pk):
    draft = GuestDraft.objects.filter(pk=pk).first()
    if not draft:
        return Response({'error': 'Not Found'}, status=status.HTTP_404_NOT_FOUND)
    return Response(GuestDraftSerializer(draft).data)


# Magic link auth
@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def request_link(request):
    serializer = MagicLinkRequestSerializer(data=request.data)
    if not serializer.is_valid():
        return Response({'error': 'Valid email required'}, status=status.HTTP_400_BAD_REQUEST)
    email = serializer.validated_data['email']
    order_id = serializer.validated_data.get('order_id')

    link, sent = issue_magic_link(request, email, order_ids=[order_id] if order_id else None)
    logger.info(f"Magic link requested for {email} (sent={sent})")
    return Response({'ok': True, 'sent': sent, 'dev_link': link if _dev_links_allowed() else None})


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def verify_link(request):
    """Exchange a magic-link token for a guest JWT"""
    serializer = MagicLinkVerifySerializer(data=request.data)
    if not serializer.is_valid():
        return Response({'error': 'Missing token'}, status=status.HTTP_400_BAD_REQUEST)

    with transaction.atomic():
        link = GuestMagicLink.objects.select_for_update().filter(
            token_hash=hash_link_token(serializer.validated_data['token'])
        ).first()
        if not link:
            return Response({'error': 'Invalid token'}, status=status.HTTP_400_BAD_REQUEST)
        if link.used_at:
            return Response({'error': 'Token already used'}, status=status.HTTP_400_BAD_REQUEST)
        if link.is_expired:
            return Response({'error': 'Token expired'}, status=status.HTTP_400_BAD_REQUEST)
        link.used_at = timezone.now()
        link.save(update_fields=['used_at'])

    Order.objects.filter(guest_email=link.email, guest_verified_at__isnull=True).update(
        guest_verified_at=link.used_at
    )
    return Response({'token': issue_guest_token(link.email, link.order_ids), 'email': link.email})


# Guest orders
@api_view(['GET', 'POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def guest_order_list_create(request):
    """GET lists the guest's orders (guest token); POST places a guest order (public)"""
    if request.method == 'GET':
        try:
            result = GuestTokenAuthentication().authenticate(request)
        except AuthenticationFailed as e:
            return Response({'error': str(e.detail)}, status=status.HTTP_401_UNAUTHORIZED)
        if result is None:
            return Response({'error': 'Guest authentication required'}, status=status.HTTP_401_UNAUTHORIZED)
        guest, _ = result
        orders = Order.objects.filter(guest_email=guest.email, access_revoked_at__isnull=True) \
            .order_by('-created_at')
        return Response(GuestOrderSerializer(orders, many=True).data)

    serializer = GuestOrderCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = dict(serializer.validated_data)
    email = data.pop('email')
    order = create_order(dict(data, guest_email=email, customer_email=email), trigger_source='api')

    issue_magic_link(request, email, order_ids=[order.pk], order_number=order.order_number)
    logger.info(f"Guest order placed: {order.order_number} for {email}")
    return Response(GuestOrderSerializer(order).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@authentication_classes([GuestTokenAuthentication])
@permission_classes([IsAuthenticated])
def guest_order_detail(request, pk):
    order = Order.objects.filter(pk=pk, guest_email=request.user.email, access_revoked_at__isnull=True).first()
    if not order:
        return Response({'error': 'Not Found'}, status=status.HTTP_404_NOT_FOUND)
    return Response(GuestOrderSerializer(order).data)
