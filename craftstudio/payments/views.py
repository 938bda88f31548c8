import logging
from decimal import Decimal

from django.db import transaction
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from craftstudio.core.authentication import OptionalJWTAuthentication
from craftstudio.core.permissions import IsAdminRole
from craftstudio.notifications.email_service import send_email_best_effort
from craftstudio.notifications.templates import payment_receipt_email
from craftstudio.orders.models import Order
from craftstudio.orders.services import change_order_status, log_timeline
from . import stripe_service
from .models import Payment
from .serializers import CheckoutRequestSerializer, InvoiceRequestSerializer, ReconcileRequestSerializer

logger = logging.getLogger(__name__)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def create_checkout(request):
    """Start a Stripe Checkout Session for an order's deposit or balance"""
    serializer = CheckoutRequestSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    order_id = serializer.validated_data['order_id']
    phase = serializer.validated_data['phase']

    order = Order.objects.visible_to(request.user).filter(pk=order_id).first()
    if not order:
        return Response({'error': 'Order not found'}, status=status.HTTP_404_NOT_FOUND)
    payment = order.payments.filter(phase=phase).first()
    if not payment:
        return Response({'error': f'No {phase} payment for this order'}, status=status.HTTP_400_BAD_REQUEST)
    if payment.status == Payment.STATUS_PAID:
        return Response({'error': f'{phase.capitalize()} already paid'}, status=status.HTTP_400_BAD_REQUEST)

    session_id, url = stripe_service.create_checkout_session(order, payment)
    payment.stripe_checkout_session_id = session_id
    payment.save(update_fields=['stripe_checkout_session_id', 'updated_at'])
    return Response({'id': session_id, 'url': url})


@api_view(['POST'])
@permission_classes([IsAdminRole])
def create_invoice(request):
    """Send a Stripe invoice for the order's outstanding balance"""
    serializer = InvoiceRequestSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    order = Order.objects.filter(pk=serializer.validated_data['order_id']).first()
    if not order:
        return Response({'error': 'Order not found'}, status=status.HTTP_404_NOT_FOUND)

    outstanding = order.total_amount - order.total_paid_amount
    amount_cents = int((outstanding * 100).to_integral_value())
    if amount_cents <= 0:
        return Response({'error': 'Order has no outstanding balance'}, status=status.HTTP_400_BAD_REQUEST)
    customer_email = serializer.validated_data.get('customer_email') or order.notification_email
    if not customer_email:
        return Response({'error': 'customer_email required'}, status=status.HTTP_400_BAD_REQUEST)

    invoice_id, invoice_url = stripe_service.create_invoice(order, amount_cents, customer_email)
    balance = order.payments.filter(phase=Payment.PHASE_BALANCE).first()
    if balance:
        balance.metadata = dict(balance.metadata or {}, stripe_invoice_id=invoice_id, hosted_invoice_url=invoice_url)
        balance.save(update_fields=['metadata', 'updated_at'])
    log_timeline(order, 'invoice_sent', f'Invoice {invoice_id} sent to {customer_email}',
                 event_data={'invoice_id': invoice_id, 'amount_cents': amount_cents},
                 trigger_source='admin', triggered_by=request.user)
    return Response({'id': invoice_id, 'invoice_url': invoice_url})


def _payment_for(obj):
    """Locate the Payment a Stripe object refers to, by metadata then by intent id"""
    metadata = obj.get('metadata') or {}
    order_id = metadata.get('order_id')
    phase = metadata.get('phase')
    if order_id and str(order_id).isdigit() and phase:
        payment = Payment.objects.select_related('order').filter(order_id=order_id, phase=phase).first()
        if payment:
            return payment
    intent_id = obj.get('payment_intent') if obj.get('object') == 'checkout.session' else obj.get('id')
    if intent_id:
        return Payment.objects.select_related('order').filter(stripe_payment_intent_id=intent_id).first()
    return None


def _handle_checkout_completed(session):
    payment = _payment_for(session)
    if not payment:
        logger.warning(f"Checkout session {session.get('id')} matches no payment")
        return
    payment.stripe_checkout_session_id = session.get('id') or payment.stripe_checkout_session_id
    if session.get('payment_intent'):
        payment.stripe_payment_intent_id = session['payment_intent']
    payment.save(update_fields=['stripe_checkout_session_id', 'stripe_payment_intent_id', 'updated_at'])


def _handle_payment_succeeded(intent, trigger_source='webhook'):
    with transaction.atomic():
        payment = _payment_for(intent)
        if not payment:
            logger.warning(f"Payment intent {intent.get('id')} matches no payment")
            return None
        payment = Payment.objects.select_for_update().select_related('order').get(pk=payment.pk)
        if payment.status == Payment.STATUS_PAID:
            logger.info(f"Payment {payment.pk} already recorded as paid, ignoring replay")
            return payment

        now = timezone.now()
        payment.status = Payment.STATUS_PAID
        payment.paid_at = now
        payment.stripe_payment_intent_id = intent.get('id') or payment.stripe_payment_intent_id
        payment.stripe_charge_id = intent.get('latest_charge') or payment.stripe_charge_id
        payment.save()

        order = Order.objects.select_for_update().get(pk=payment.order_id)
        amount_cents = intent.get('amount_received') or payment.amount_cents
        order.total_paid_amount = order.total_paid_amount + Decimal(amount_cents) / 100
        if payment.phase == Payment.PHASE_DEPOSIT:
            order.stripe_deposit_payment_intent = payment.stripe_payment_intent_id
        else:
            order.stripe_balance_payment_intent = payment.stripe_payment_intent_id
        if order.status == Order.STATUS_SUBMITTED:
            change_order_status(order, Order.STATUS_PAID, trigger_source=trigger_source, notify=False)
        log_timeline(order, 'payment_received', f'{payment.phase.capitalize()} payment received',
                     event_data={'payment_id': payment.pk, 'amount_cents': amount_cents},
                     trigger_source=trigger_source)
        order.save()

    logger.info(f"Payment {payment.pk} ({payment.phase}) paid for order {order.order_number}")
    if order.notification_email:
        subject, text, html = payment_receipt_email(order, payment)
        send_email_best_effort(order.notification_email, subject, text, html)
    return payment


def _handle_payment_failed(intent):
    payment = _payment_for(intent)
    if not payment or payment.status == Payment.STATUS_PAID:
        return
    payment.status = Payment.STATUS_FAILED
    payment.stripe_payment_intent_id = intent.get('id') or payment.stripe_payment_intent_id
    payment.save(update_fields=['status', 'stripe_payment_intent_id', 'updated_at'])
    logger.warning(f"Payment {payment.pk} failed for order {payment.order.order_number}")


@api_view(['POST'])
@authentication_classes([OptionalJWTAuthentication])
@permission_classes([AllowAny])
def reconcile_payment(request):
    """
    Apply a payment's state from Stripe when the webhook is late or missed.

    Takes a Checkout Session id, or an order id and phase whose payment row
    already carries a session or payment intent id. Order and phase come from
    Stripe metadata or from that payment row, never from the caller alone.
    """
    serializer = ReconcileRequestSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data

    session = None
    intent_id = None
    if data.get('session_id'):
        session = stripe_service.retrieve_checkout_session(data['session_id'])
        intent_id = session.get('payment_intent')
        metadata = None
    else:
        payment = Payment.objects.filter(order_id=data['order_id'], phase=data['phase']).first()
        if not payment:
            return Response({'error': 'Payment not found'}, status=status.HTTP_404_NOT_FOUND)
        if payment.stripe_checkout_session_id:
            session = stripe_service.retrieve_checkout_session(payment.stripe_checkout_session_id)
            intent_id = session.get('payment_intent')
        intent_id = intent_id or payment.stripe_payment_intent_id or None
        metadata = {'order_id': str(payment.order_id), 'phase': payment.phase}
    intent = stripe_service.retrieve_payment_intent(intent_id) if intent_id else None

    if metadata is None:
        metadata = {}
        for source in (session, intent):
            for key, value in ((source or {}).get('metadata') or {}).items():
                if key in ('order_id', 'phase') and value:
                    metadata[key] = str(value)
        if not metadata.get('order_id') or not metadata.get('phase'):
            return Response({'error': 'Unable to resolve order/phase from Stripe'},
                            status=status.HTTP_400_BAD_REQUEST)

    stripe_status = (intent or {}).get('status') or (session or {}).get('payment_status') or 'unknown'
    if stripe_status not in ('succeeded', 'paid'):
        return Response({'reconciled': False, 'status': stripe_status})

    if session:
        _handle_checkout_completed(dict(session, metadata=metadata))
    payment = _handle_payment_succeeded({
        'id': intent_id or '',
        'object': 'payment_intent',
        'amount_received': (intent or {}).get('amount_received') or (session or {}).get('amount_total'),
        'latest_charge': (intent or {}).get('latest_charge'),
        'metadata': metadata,
    }, trigger_source='api')
    if not payment:
        return Response({'error': 'Payment not found'}, status=status.HTTP_404_NOT_FOUND)
    return Response({'reconciled': True, 'order_id': payment.order_id, 'phase': payment.phase,
                     'status': payment.status})


EVENT_HANDLERS = {
    'checkout.session.completed': _handle_checkout_completed,
    'payment_intent.succeeded': _handle_payment_succeeded,
    'payment_intent.payment_failed': _handle_payment_failed,
}


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def stripe_webhook(request):
    """Stripe event receiver; the signature is checked against the raw body"""
    signature = request.META.get('HTTP_STRIPE_SIGNATURE', '')
    try:
        event = stripe_service.construct_event(request.body, signature)
    except stripe_service.WebhookVerificationError as e:
        logger.warning(f"Rejected Stripe webhook: {str(e)}")
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    handler = EVENT_HANDLERS.get(event.get('type'))
    if handler:
        handler(event['data']['object'])
    else:
        logger.debug(f"Ignoring Stripe event {event.get('type')}")
    return Response({'received': True})
