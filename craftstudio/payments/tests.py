"""
Test suite for Payments module
Tests: checkout sessions, invoices and Stripe webhook handling (Stripe calls are mocked)
"""
import json
import time
from decimal import Decimal
from unittest.mock import patch, MagicMock

import stripe
from django.test import TestCase, override_settings
from rest_framework import status
from craftstudio.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from craftstudio.orders.models import Order
from craftstudio.payments.models import Payment


@override_settings(STRIPE_SECRET_KEY='sk_test_123', FRONTEND_BASE_URL='https://shop.test', RESEND_API_KEY='')
class CheckoutAPITests(TestCase):
    """Test checkout session creation"""

    def setUp(self):
        self.customer = TestDataFactory.create_user()
        self.order = TestDataFactory.create_order(user=self.customer, total_amount=Decimal('1000.00'))
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.customer)

    @patch('stripe.checkout.Session.create')
    def test_create_checkout(self, mock_create):
        """Test a session is created for the deposit and its id stored"""
        mock_create.return_value = MagicMock(id='cs_test_1', url='https://checkout.stripe.test/cs_test_1')
        response = self.client.post('/api/payments/create-checkout/',
                                    {'order_id': self.order.id, 'phase': 'deposit'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {'id': 'cs_test_1', 'url': 'https://checkout.stripe.test/cs_test_1'})

        kwargs = mock_create.call_args.kwargs
        self.assertEqual(kwargs['line_items'][0]['price_data']['unit_amount'], 40000)
        self.assertEqual(kwargs['metadata']['phase'], 'deposit')
        self.assertEqual(kwargs['metadata']['order_id'], str(self.order.id))
        self.assertTrue(kwargs['success_url'].startswith(f'https://shop.test/orders/{self.order.id}'))
        payment = self.order.payments.get(phase='deposit')
        self.assertEqual(payment.stripe_checkout_session_id, 'cs_test_1')

    def test_invalid_phase(self):
        response = self.client.post('/api/payments/create-checkout/',
                                    {'order_id': self.order.id, 'phase': 'tip'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(str(response.data['phase'][0]), 'phase must be deposit or balance')

    def test_other_users_order(self):
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.post('/api/payments/create-checkout/',
                                    {'order_id': self.order.id, 'phase': 'deposit'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Order not found')

    def test_already_paid(self):
        self.order.payments.filter(phase='deposit').update(status=Payment.STATUS_PAID)
        response = self.client.post('/api/payments/create-checkout/',
                                    {'order_id': self.order.id, 'phase': 'deposit'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Deposit already paid')

    @override_settings(STRIPE_SECRET_KEY='')
    def test_stripe_not_configured(self):
        response = self.client.post('/api/payments/create-checkout/',
                                    {'order_id': self.order.id, 'phase': 'balance'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertEqual(response.data, {'error': 'Stripe not configured'})

    @patch('stripe.checkout.Session.create')
    def test_stripe_error(self, mock_create):
        mock_create.side_effect = stripe.StripeError('card declined')
        response = self.client.post('/api/payments/create-checkout/',
                                    {'order_id': self.order.id, 'phase': 'balance'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_502_BAD_GATEWAY)
        self.assertIn('error', response.data)


@override_settings(STRIPE_SECRET_KEY='sk_test_123')
class InvoiceAPITests(TestCase):
    """Test invoice creation for the outstanding balance"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.customer = TestDataFactory.create_user()
        self.order = TestDataFactory.create_order(user=self.customer, total_amount=Decimal('1000.00'))
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_customer_forbidden(self):
        self.client.authenticate_user(self.customer)
        response = self.client.post('/api/payments/create-invoice/', {'order_id': self.order.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    @patch('stripe.Invoice.send_invoice')
    @patch('stripe.Invoice.finalize_invoice')
    @patch('stripe.InvoiceItem.create')
    @patch('stripe.Invoice.create')
    @patch('stripe.Customer.create')
    def test_create_invoice(self, mock_customer, mock_invoice, mock_item, mock_finalize, mock_send):
        """Test the invoice covers total minus amount already paid and is emailed"""
        Order.objects.filter(pk=self.order.pk).update(total_paid_amount=Decimal('400.00'))
        mock_customer.return_value = MagicMock(id='cus_1')
        mock_invoice.return_value = MagicMock(id='in_1')
        mock_finalize.return_value = MagicMock(id='in_1')
        mock_send.return_value = MagicMock(id='in_1', hosted_invoice_url='https://invoice.stripe.test/in_1')

        response = self.client.post('/api/payments/create-invoice/', {'order_id': self.order.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {'id': 'in_1', 'invoice_url': 'https://invoice.stripe.test/in_1'})
        self.assertEqual(mock_item.call_args.kwargs['amount'], 60000)
        self.assertEqual(mock_customer.call_args.kwargs['email'], self.customer.email)
        self.assertTrue(self.order.timeline.filter(event_type='invoice_sent').exists())
        mock_send.assert_called_once_with('in_1')
        balance = self.order.payments.get(phase='balance')
        self.assertEqual(balance.metadata, {
            'stripe_invoice_id': 'in_1', 'hosted_invoice_url': 'https://invoice.stripe.test/in_1'
        })
        self.assertEqual(self.order.payments.get(phase='deposit').metadata, {})

    def test_nothing_outstanding(self):
        Order.objects.filter(pk=self.order.pk).update(total_paid_amount=Decimal('1000.00'))
        response = self.client.post('/api/payments/create-invoice/', {'order_id': self.order.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unknown_order(self):
        response = self.client.post('/api/payments/create-invoice/', {'order_id': 99999}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


@override_settings(STRIPE_WEBHOOK_SECRET='whsec_test', RESEND_API_KEY='')
class StripeWebhookTests(TestCase):
    """Test webhook verification and event handling"""

    def setUp(self):
        self.customer = TestDataFactory.create_user()
        self.order = TestDataFactory.create_order(user=self.customer, total_amount=Decimal('1000.00'))
        self.deposit = self.order.payments.get(phase='deposit')
        self.client = AuthenticatedAPIClient()

    def post_event(self, event_type, obj):
        payload = json.dumps({'id': 'evt_1', 'type': event_type, 'data': {'object': obj}})
        with patch('stripe.Webhook.construct_event') as mock_construct:
            mock_construct.return_value = MagicMock()
            return self.client.post('/api/webhooks/stripe/', data=payload, content_type='application/json',
                                    HTTP_STRIPE_SIGNATURE='t=1,v1=abc')

    def intent(self, **extra):
        obj = {
            'id': 'pi_1',
            'object': 'payment_intent',
            'amount_received': 40000,
            'latest_charge': 'ch_1',
            'metadata': {'order_id': str(self.order.id), 'phase': 'deposit'},
        }
        obj.update(extra)
        return obj

    def test_payment_succeeded_marks_paid(self):
        """Test the deposit is recorded and the order moves to paid"""
        response = self.post_event('payment_intent.succeeded', self.intent())
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {'received': True})

        self.deposit.refresh_from_db()
        self.assertEqual(self.deposit.status, Payment.STATUS_PAID)
        self.assertEqual(self.deposit.stripe_charge_id, 'ch_1')
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_PAID)
        self.assertEqual(self.order.total_paid_amount, Decimal('400.00'))
        self.assertEqual(self.order.stripe_deposit_payment_intent, 'pi_1')
        self.assertIsNotNone(self.order.paid_at)
        self.assertTrue(self.order.timeline.filter(event_type='payment_received',
                                                   trigger_source='webhook').exists())

    def test_replayed_event_is_idempotent(self):
        self.post_event('payment_intent.succeeded', self.intent())
        self.post_event('payment_intent.succeeded', self.intent())
        self.order.refresh_from_db()
        self.assertEqual(self.order.total_paid_amount, Decimal('400.00'))
        self.assertEqual(self.order.timeline.filter(event_type='payment_received').count(), 1)

    def test_balance_does_not_regress_status(self):
        """Test a balance payment on a shipping order keeps its status"""
        Order.objects.filter(pk=self.order.pk).update(status=Order.STATUS_SHIPPING)
        self.post_event('payment_intent.succeeded', self.intent(
            id='pi_2', amount_received=60000, metadata={'order_id': str(self.order.id), 'phase': 'balance'}
        ))
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_SHIPPING)
        self.assertEqual(self.order.stripe_balance_payment_intent, 'pi_2')

    def test_checkout_completed_records_intent(self):
        session = {
            'id': 'cs_1', 'object': 'checkout.session', 'payment_intent': 'pi_9',
            'metadata': {'order_id': str(self.order.id), 'phase': 'deposit'},
        }
        self.post_event('checkout.session.completed', session)
        self.deposit.refresh_from_db()
        self.assertEqual(self.deposit.stripe_checkout_session_id, 'cs_1')
        self.assertEqual(self.deposit.stripe_payment_intent_id, 'pi_9')

    def test_payment_lookup_by_intent_id(self):
        """Test an intent without metadata is matched by its id"""
        Payment.objects.filter(pk=self.deposit.pk).update(stripe_payment_intent_id='pi_7')
        self.post_event('payment_intent.succeeded', self.intent(id='pi_7', metadata={}))
        self.deposit.refresh_from_db()
        self.assertEqual(self.deposit.status, Payment.STATUS_PAID)

    def test_payment_failed(self):
        self.post_event('payment_intent.payment_failed', self.intent())
        self.deposit.refresh_from_db()
        self.assertEqual(self.deposit.status, Payment.STATUS_FAILED)

    def test_unknown_event_ignored(self):
        response = self.post_event('customer.created', {'id': 'cus_1'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    @patch('stripe.Webhook.construct_event')
    def test_invalid_signature(self, mock_construct):
        mock_construct.side_effect = stripe.SignatureVerificationError('bad signature', 't=1,v1=bad')
        response = self.client.post('/api/webhooks/stripe/', data='{}', content_type='application/json',
                                    HTTP_STRIPE_SIGNATURE='t=1,v1=bad')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data, {'error': 'Invalid signature'})

    @override_settings(STRIPE_WEBHOOK_SECRET='')
    def test_webhook_secret_missing(self):
        response = self.client.post('/api/webhooks/stripe/', data='{}', content_type='application/json')
        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)


@override_settings(STRIPE_WEBHOOK_SECRET='whsec_test', RESEND_API_KEY='')
class StripeWebhookSignatureTests(TestCase):
    """Test webhook signatures are verified against the configured secret"""

    def setUp(self):
        self.order = TestDataFactory.create_order(user=TestDataFactory.create_user(),
                                                  total_amount=Decimal('1000.00'))
        self.client = AuthenticatedAPIClient()
        self.payload = json.dumps({
            'id': 'evt_1',
            'type': 'payment_intent.succeeded',
            'data': {'object': {
                'id': 'pi_1', 'object': 'payment_intent', 'amount_received': 40000, 'latest_charge': 'ch_1',
                'metadata': {'order_id': str(self.order.id), 'phase': 'deposit'},
            }},
        })

    def sign(self, payload, secret='whsec_test'):
        timestamp = int(time.time())
        signature = stripe.WebhookSignature._compute_signature(f'{timestamp}.{payload}', secret)
        return f't={timestamp},v1={signature}'

    def post(self, payload, signature):
        return self.client.post('/api/webhooks/stripe/', data=payload, content_type='application/json',
                                HTTP_STRIPE_SIGNATURE=signature)

    def test_signed_event_accepted(self):
        response = self.post(self.payload, self.sign(self.payload))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(self.order.payments.get(phase='deposit').status, Payment.STATUS_PAID)

    def test_tampered_payload_rejected(self):
        """Test a payload changed after signing fails verification"""
        signature = self.sign(self.payload)
        tampered = self.payload.replace('40000', '1')
        response = self.post(tampered, signature)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data, {'error': 'Invalid signature'})
        self.assertEqual(self.order.payments.get(phase='deposit').status, Payment.STATUS_PENDING)

    def test_wrong_secret_rejected(self):
        response = self.post(self.payload, self.sign(self.payload, secret='whsec_other'))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_missing_signature_rejected(self):
        response = self.post(self.payload, '')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


@override_settings(STRIPE_SECRET_KEY='sk_test_123', RESEND_API_KEY='')
class ReconcilePaymentTests(TestCase):
    """Test recording payments from Stripe when the webhook has not arrived"""

    def setUp(self):
        self.order = TestDataFactory.create_order(user=TestDataFactory.create_user(),
                                                  total_amount=Decimal('1000.00'))
        self.deposit = self.order.payments.get(phase='deposit')
        self.client = AuthenticatedAPIClient()
        self.metadata = {'order_id': str(self.order.id), 'phase': 'deposit'}

    def session(self, **extra):
        obj = {'id': 'cs_1', 'object': 'checkout.session', 'payment_intent': 'pi_1',
               'payment_status': 'paid', 'amount_total': 40000, 'metadata': self.metadata}
        obj.update(extra)
        return obj

    def intent(self, **extra):
        obj = {'id': 'pi_1', 'object': 'payment_intent', 'status': 'succeeded', 'amount_received': 40000,
               'latest_charge': 'ch_1', 'metadata': self.metadata}
        obj.update(extra)
        return obj

    @patch('stripe.PaymentIntent.retrieve')
    @patch('stripe.checkout.Session.retrieve')
    def test_reconcile_by_session(self, mock_session, mock_intent):
        """Test a paid session marks the payment and order paid"""
        mock_session.return_value = self.session()
        mock_intent.return_value = self.intent()
        response = self.client.post('/api/payments/reconcile/', {'session_id': 'cs_1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {'reconciled': True, 'order_id': self.order.id, 'phase': 'deposit',
                                         'status': 'paid'})
        mock_session.assert_called_once_with('cs_1')
        mock_intent.assert_called_once_with('pi_1')

        self.deposit.refresh_from_db()
        self.assertEqual(self.deposit.status, Payment.STATUS_PAID)
        self.assertEqual(self.deposit.stripe_checkout_session_id, 'cs_1')
        self.assertEqual(self.deposit.stripe_charge_id, 'ch_1')
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_PAID)
        self.assertEqual(self.order.total_paid_amount, Decimal('400.00'))
        self.assertTrue(self.order.timeline.filter(event_type='payment_received', trigger_source='api').exists())

    @patch('stripe.PaymentIntent.retrieve')
    @patch('stripe.checkout.Session.retrieve')
    def test_reconcile_by_order_and_phase(self, mock_session, mock_intent):
        """Test the stored session id is used when only order and phase are given"""
        Payment.objects.filter(pk=self.deposit.pk).update(stripe_checkout_session_id='cs_1')
        mock_session.return_value = self.session()
        mock_intent.return_value = self.intent()
        response = self.client.post('/api/payments/reconcile/', {'order_id': self.order.id, 'phase': 'deposit'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['reconciled'])
        mock_session.assert_called_once_with('cs_1')

    @patch('stripe.PaymentIntent.retrieve')
    @patch('stripe.checkout.Session.retrieve')
    def test_reconcile_is_idempotent_with_webhook(self, mock_session, mock_intent):
        mock_session.return_value = self.session()
        mock_intent.return_value = self.intent()
        self.client.post('/api/payments/reconcile/', {'session_id': 'cs_1'}, format='json')
        response = self.client.post('/api/payments/reconcile/', {'session_id': 'cs_1'}, format='json')
        self.assertTrue(response.data['reconciled'])
        self.order.refresh_from_db()
        self.assertEqual(self.order.total_paid_amount, Decimal('400.00'))

    @patch('stripe.PaymentIntent.retrieve')
    @patch('stripe.checkout.Session.retrieve')
    def test_unpaid_session_not_reconciled(self, mock_session, mock_intent):
        mock_session.return_value = self.session(payment_status='unpaid')
        mock_intent.return_value = self.intent(status='processing')
        response = self.client.post('/api/payments/reconcile/', {'session_id': 'cs_1'}, format='json')
        self.assertEqual(response.data, {'reconciled': False, 'status': 'processing'})
        self.deposit.refresh_from_db()
        self.assertEqual(self.deposit.status, Payment.STATUS_PENDING)

    @patch('stripe.checkout.Session.retrieve')
    def test_session_without_metadata(self, mock_session):
        mock_session.return_value = self.session(payment_intent=None, metadata={})
        response = self.client.post('/api/payments/reconcile/', {'session_id': 'cs_1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data, {'error': 'Unable to resolve order/phase from Stripe'})

    @patch('stripe.PaymentIntent.retrieve')
    @patch('stripe.checkout.Session.retrieve')
    def test_caller_cannot_redirect_session_to_other_order(self, mock_session, mock_intent):
        """Test order and phase come from Stripe when a session id is given"""
        other = TestDataFactory.create_order(user=TestDataFactory.create_user())
        mock_session.return_value = self.session()
        mock_intent.return_value = self.intent()
        self.client.post('/api/payments/reconcile/',
                         {'session_id': 'cs_1', 'order_id': other.id, 'phase': 'balance'}, format='json')
        self.assertEqual(other.payments.filter(status=Payment.STATUS_PAID).count(), 0)
        self.assertEqual(self.order.payments.get(phase='deposit').status, Payment.STATUS_PAID)

    def test_requires_session_or_order_and_phase(self):
        response = self.client.post('/api/payments/reconcile/', {'order_id': self.order.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('non_field_errors', response.data)

    def test_unknown_payment(self):
        response = self.client.post('/api/payments/reconcile/', {'order_id': 99999, 'phase': 'deposit'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    @override_settings(STRIPE_SECRET_KEY='')
    def test_stripe_not_configured(self):
        response = self.client.post('/api/payments/reconcile/', {'session_id': 'cs_1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
