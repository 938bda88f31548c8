"""
Test suite for Notifications module
Tests: Resend email delivery, best-effort sending and email templates
"""
from decimal import Decimal
from unittest.mock import patch, MagicMock

import requests
from django.test import TestCase, override_settings
from rest_framework import status
from craftstudio.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from craftstudio.notifications.email_service import (
    send_email, send_email_best_effort, EmailNotConfigured, EmailDeliveryError
)
from craftstudio.notifications.templates import magic_link_email, order_status_email, payment_receipt_email


def resend_response(status_code=200, body=None):
    response = MagicMock(status_code=status_code, text='')
    response.json.return_value = body if body is not None else {'id': 'msg_123'}
    return response


@override_settings(RESEND_API_KEY='re_test', RESEND_API_URL='https://resend.test/emails',
                   EMAIL_FROM='Studio <studio@test.com>')
class EmailServiceTests(TestCase):
    """Test the Resend client"""

    @patch('craftstudio.notifications.email_service.requests.post')
    def test_send_email(self, mock_post):
        mock_post.return_value = resend_response()
        self.assertEqual(send_email('a@test.com', 'Hello', text='Hi', html='<p>Hi</p>'), 'msg_123')

        args, kwargs = mock_post.call_args
        self.assertEqual(args[0], 'https://resend.test/emails')
        self.assertEqual(kwargs['headers']['Authorization'], 'Bearer re_test')
        self.assertEqual(kwargs['json'], {
            'from': 'Studio <studio@test.com>', 'to': ['a@test.com'], 'subject': 'Hello',
            'text': 'Hi', 'html': '<p>Hi</p>',
        })

    @patch('craftstudio.notifications.email_service.requests.post')
    def test_rejected_email(self, mock_post):
        mock_post.return_value = resend_response(status_code=422)
        with self.assertRaises(EmailDeliveryError):
            send_email(['a@test.com'], 'Hello')

    @patch('craftstudio.notifications.email_service.requests.post')
    def test_network_failure(self, mock_post):
        mock_post.side_effect = requests.exceptions.ConnectionError('down')
        with self.assertRaises(EmailDeliveryError):
            send_email('a@test.com', 'Hello')

    @patch('craftstudio.notifications.email_service.requests.post')
    def test_best_effort_swallows_delivery_errors(self, mock_post):
        mock_post.side_effect = requests.exceptions.Timeout('slow')
        self.assertIsNone(send_email_best_effort('a@test.com', 'Hello'))

    @override_settings(RESEND_API_KEY='')
    def test_not_configured(self):
        with self.assertRaises(EmailNotConfigured):
            send_email('a@test.com', 'Hello')
        self.assertIsNone(send_email_best_effort('a@test.com', 'Hello'))


@override_settings(RESEND_API_KEY='re_test')
class SendEmailAPITests(TestCase):
    """Test the email endpoint"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user())

    @patch('craftstudio.notifications.email_service.requests.post')
    def test_send(self, mock_post):
        mock_post.return_value = resend_response()
        response = self.client.post('/api/emails/send/', {'to': 'a@test.com', 'subject': 'Hi'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {'ok': True, 'id': 'msg_123'})

    def test_missing_fields(self):
        response = self.client.post('/api/emails/send/', {'to': 'a@test.com'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    @override_settings(RESEND_API_KEY='')
    def test_not_configured(self):
        response = self.client.post('/api/emails/send/', {'to': 'a@test.com', 'subject': 'Hi'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertEqual(response.data, {'error': 'Resend not configured'})

    @patch('craftstudio.notifications.email_service.requests.post')
    def test_delivery_failure(self, mock_post):
        mock_post.return_value = resend_response(status_code=500)
        response = self.client.post('/api/emails/send/', {'to': 'a@test.com', 'subject': 'Hi'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_502_BAD_GATEWAY)

    def test_requires_auth(self):
        self.client.logout()
        response = self.client.post('/api/emails/send/', {'to': 'a@test.com', 'subject': 'Hi'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class EmailTemplateTests(TestCase):
    """Test email bodies"""

    def test_magic_link_email(self):
        subject, text, html = magic_link_email('https://shop.test/guest/verify?token=abc', order_number='ORD-1')
        self.assertIn('ORD-1', subject + text)
        self.assertIn('https://shop.test/guest/verify?token=abc', text)
        self.assertIn('token=abc', html)

    def test_order_status_email_includes_tracking(self):
        order = TestDataFactory.create_order(tracking_number='1Z999')
        subject, text, _ = order_status_email(order, 'in_production', 'shipping')
        self.assertIn(order.order_number, subject)
        self.assertIn('Tracking number: 1Z999', text)

    def test_payment_receipt_email(self):
        order = TestDataFactory.create_order(total_amount=Decimal('1000.00'))
        order.total_paid_amount = Decimal('400.00')
        payment = order.payments.get(phase='deposit')
        _, text, _ = payment_receipt_email(order, payment)
        self.assertIn('deposit payment of $400.00', text)
        self.assertIn('$400.00 of $1,000.00', text)
