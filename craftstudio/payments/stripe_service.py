"""
Thin wrapper over the Stripe API for checkout sessions, invoices, payment lookups and webhook
verification. Every Stripe failure surfaces as ServiceUnavailable.
"""
import json
import logging

import stripe
from django.conf import settings

from craftstudio.core.exceptions import ServiceUnavailable

logger = logging.getLogger(__name__)

INVOICE_DAYS_UNTIL_DUE = 7


class WebhookVerificationError(Exception):
    """The webhook payload or its signature is invalid"""


def _configure():
    if not settings.STRIPE_SECRET_KEY:
        raise ServiceUnavailable('Stripe not configured', status_code=503)
    stripe.api_key = settings.STRIPE_SECRET_KEY
    stripe.api_version = settings.STRIPE_API_VERSION


def create_checkout_session(order, payment):
    """Checkout Session for one payment phase; returns (session_id, url)"""
    _configure()
    metadata = {'order_id': str(order.pk), 'phase': payment.phase, 'payment_id': str(payment.pk)}
    base_url = settings.FRONTEND_BASE_URL
    try:
        session = stripe.checkout.Session.create(
            mode='payment',
            payment_method_types=['card'],
            line_items=[{
                'price_data': {
                    'currency': payment.currency,
                    'product_data': {'name': f'Order {order.order_number} {payment.phase}'},
                    'unit_amount': payment.amount_cents,
                },
                'quantity': 1,
            }],
            customer_email=order.notification_email or None,
            metadata=metadata,
            payment_intent_data={'metadata': metadata},
            success_url=f'{base_url}/orders/{order.pk}?payment=success&phase={payment.phase}',
            cancel_url=f'{base_url}/orders/{order.pk}?payment=cancelled&phase={payment.phase}',
        )
    except stripe.StripeError as e:
        logger.error(f"Stripe checkout failed for order {order.order_number}: {str(e)}")
        raise ServiceUnavailable(f'Stripe error: {str(e)}') from e

    logger.info(f"Checkout session {session.id} created for {order.order_number} ({payment.phase})")
    return session.id, session.url


def create_invoice(order, amount_cents, customer_email):
    """Finalize and email an invoice for the outstanding balance; returns (invoice_id, hosted_url)"""
    _configure()
    metadata = {'order_id': str(order.pk), 'phase': 'balance'}
    try:
        customer = stripe.Customer.create(email=customer_email, name=order.customer_name or None)
        invoice = stripe.Invoice.create(
            customer=customer.id,
            collection_method='send_invoice',
            days_until_due=INVOICE_DAYS_UNTIL_DUE,
            metadata=metadata,
        )
        stripe.InvoiceItem.create(
            customer=customer.id,
            invoice=invoice.id,
            amount=amount_cents,
            currency=settings.STRIPE_CURRENCY,
            description=f'Order {order.order_number} balance',
        )
        invoice = stripe.Invoice.finalize_invoice(invoice.id)
        invoice = stripe.Invoice.send_invoice(invoice.id)
    except stripe.StripeError as e:
        logger.error(f"Stripe invoice failed for order {order.order_number}: {str(e)}")
        raise ServiceUnavailable(f'Stripe error: {str(e)}') from e

    logger.info(f"Invoice {invoice.id} sent for {order.order_number}")
    return invoice.id, getattr(invoice, 'hosted_invoice_url', None)


def retrieve_checkout_session(session_id):
    _configure()
    try:
        return stripe.checkout.Session.retrieve(session_id)
    except stripe.StripeError as e:
        logger.error(f"Stripe session lookup failed for {session_id}: {str(e)}")
        raise ServiceUnavailable(f'Stripe error: {str(e)}') from e


def retrieve_payment_intent(intent_id):
    _configure()
    try:
        return stripe.PaymentIntent.retrieve(intent_id)
    except stripe.StripeError as e:
        logger.error(f"Stripe payment intent lookup failed for {intent_id}: {str(e)}")
        raise ServiceUnavailable(f'Stripe error: {str(e)}') from e


def construct_event(payload, signature):
    """Verify a webhook delivery and return the event as a plain dict"""
    if not settings.STRIPE_WEBHOOK_SECRET:
        raise ServiceUnavailable('Stripe webhook secret not configured', status_code=503)
    try:
        stripe.Webhook.construct_event(payload, signature, settings.STRIPE_WEBHOOK_SECRET)
    except ValueError as e:
        raise WebhookVerificationError('Invalid payload') from e
    except stripe.SignatureVerificationError as e:
        raise WebhookVerificationError('Invalid signature') from e
    return json.loads(payload)
