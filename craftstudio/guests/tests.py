"""
Test suite for Guests module
Tests: guest drafts, magic-link sign in, guest tokens and guest orders
"""
from datetime import timedelta
from urllib.parse import urlparse, parse_qs

from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework import status
from craftstudio.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from craftstudio.guests.models import GuestDraft, GuestMagicLink
from craftstudio.guests.tokens import issue_guest_token, decode_guest_token, InvalidGuestToken, hash_link_token
from craftstudio.orders.models import Order


def token_from_link(link):
    return parse_qs(urlparse(link).query)['token'][0]


class GuestTokenTests(TestCase):
    """Test guest JWT issue and decode"""

    def test_round_trip_payload(self):
        payload = decode_guest_token(issue_guest_token('guest@test.com', ['7']))
        self.assertTrue(payload['guest'])
        self.assertEqual(payload['typ'], 'guest')
        self.assertEqual(payload['email'], 'guest@test.com')
        self.assertEqual(payload['order_ids'], ['7'])

    def test_garbage_rejected(self):
        with self.assertRaises(InvalidGuestToken):
            decode_guest_token('not-a-jwt')

    def test_account_token_rejected(self):
        """Test an account access token is not accepted as a guest token"""
        from rest_framework_simplejwt.tokens import RefreshToken
        access = str(RefreshToken.for_user(TestDataFactory.create_user()).access_token)
        with self.assertRaises(InvalidGuestToken):
            decode_guest_token(access)

    def test_link_hash_is_sha256(self):
        self.assertEqual(len(hash_link_token('abc')), 64)


class GuestDraftAPITests(TestCase):
    """Test guest draft endpoints"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()

    def test_create_draft_is_public(self):
        response = self.client.post('/api/guest-drafts/', {
            'info': {'email': 'guest@test.com'}, 'draft': {'quantity': 50}, 'totals': None
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['type'], 'quote')
        self.assertEqual(response.data['totals'], {})

    def test_invalid_type(self):
        response = self.client.post('/api/guest-drafts/', {'type': 'wishlist'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_requires_admin(self):
        response = self.client.get('/api/guest-drafts/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_list_filters(self):
        TestDataFactory.create_guest_draft(email='a@test.com')
        TestDataFactory.create_guest_draft(draft_type='sample', email='a@test.com')
        TestDataFactory.create_guest_draft(email='b@test.com')
        self.client.authenticate_user(TestDataFactory.create_admin())

        response = self.client.get('/api/guest-drafts/', {'email': 'a@test.com'})
        self.assertEqual(len(response.data), 2)
        response = self.client.get('/api/guest-drafts/', {'email': 'a@test.com', 'type': 'sample'})
        self.assertEqual(len(response.data), 1)
        response = self.client.get('/api/guest-drafts/', {'limit': 1})
        self.assertEqual(len(response.data), 1)

    def test_get_draft(self):
        draft = TestDataFactory.create_guest_draft()
        response = self.client.get(f'/api/guest-drafts/{draft.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['info'], {'email': 'guest@test.com'})

    def test_missing_draft(self):
        response = self.client.get('/api/guest-drafts/99999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data, {'error': 'Not Found'})


@override_settings(RESEND_API_KEY='', FRONTEND_BASE_URL='https://shop.test', ENVIRONMENT='development')
class MagicLinkAPITests(TestCase):
    """Test requesting and verifying magic links"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()

    def request_link(self, email='Guest@Test.com'):
        return self.client.post('/api/guest/auth/request-link/', {'email': email}, format='json')

    def test_request_link(self):
        """Test a link is stored hashed and returned in development"""
        response = self.request_link()
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['ok'])
        self.assertFalse(response.data['sent'])
        self.assertTrue(response.data['dev_link'].startswith('https://shop.test/guest/verify?token='))

        link = GuestMagicLink.objects.get()
        self.assertEqual(link.email, 'guest@test.com')
        self.assertEqual(link.token_hash, hash_link_token(token_from_link(response.data['dev_link'])))
        self.assertGreater(link.expires_at, timezone.now())

    @override_settings(ENVIRONMENT='production', RETURN_DEV_LINKS=False)
    def test_no_dev_link_in_production(self):
        response = self.request_link()
        self.assertIsNone(response.data['dev_link'])

    def test_request_link_invalid_email(self):
        response = self.request_link(email='not-an-email')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data, {'error': 'Valid email required'})

    def test_verify_link(self):
        """Test verifying issues a guest token and marks guest orders verified"""
        order = TestDataFactory.create_guest_order(email='guest@test.com')
        token = token_from_link(self.request_link().data['dev_link'])

        response = self.client.post('/api/guest/auth/verify/', {'token': token}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['email'], 'guest@test.com')
        self.assertEqual(decode_guest_token(response.data['token'])['email'], 'guest@test.com')
        self.assertIsNotNone(GuestMagicLink.objects.get().used_at)
        order.refresh_from_db()
        self.assertIsNotNone(order.guest_verified_at)

    def test_verify_link_single_use(self):
        token = token_from_link(self.request_link().data['dev_link'])
        self.client.post('/api/guest/auth/verify/', {'token': token}, format='json')
        response = self.client.post('/api/guest/auth/verify/', {'token': token}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Token already used')

    def test_verify_expired_link(self):
        token = token_from_link(self.request_link().data['dev_link'])
        GuestMagicLink.objects.update(expires_at=timezone.now() - timedelta(minutes=1))
        response = self.client.post('/api/guest/auth/verify/', {'token': token}, format='json')
        self.assertEqual(response.data['error'], 'Token expired')

    def test_verify_unknown_and_missing_token(self):
        response = self.client.post('/api/guest/auth/verify/', {'token': 'nope'}, format='json')
        self.assertEqual(response.data['error'], 'Invalid token')
        response = self.client.post('/api/guest/auth/verify/', {}, format='json')
        self.assertEqual(response.data['error'], 'Missing token')


@override_settings(RESEND_API_KEY='')
class GuestOrderAPITests(TestCase):
    """Test guest order placement and access"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()

    def test_place_guest_order(self):
        """Test a guest order is created and a magic link issued for it"""
        response = self.client.post('/api/guest/orders/', {
            'email': 'Guest@Test.com', 'product_name': 'Classic Tee', 'quantity': 50, 'unit_price': '10.00',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['guest_email'], 'guest@test.com')
        self.assertEqual(response.data['product_category'], 'custom')
        self.assertNotIn('admin_notes', response.data)
        self.assertNotIn('stripe_deposit_payment_intent', response.data)

        order = Order.objects.get(pk=response.data['id'])
        self.assertIsNone(order.user)
        self.assertEqual(order.payments.count(), 2)
        link = GuestMagicLink.objects.get(email='guest@test.com')
        self.assertEqual(link.order_ids, [str(order.id)])

    def test_place_guest_order_requires_email(self):
        response = self.client.post('/api/guest/orders/', {'quantity': 50}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_requires_guest_token(self):
        response = self.client.get('/api/guest/orders/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertIn('error', response.data)

    def test_list_invalid_guest_token(self):
        self.client.credentials(HTTP_X_GUEST_AUTH='garbage')
        response = self.client.get('/api/guest/orders/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['error'], 'Invalid guest token')

    def test_list_own_orders(self):
        """Test only the guest's non-revoked orders are listed"""
        mine = TestDataFactory.create_guest_order(email='guest@test.com')
        revoked = TestDataFactory.create_guest_order(email='guest@test.com')
        Order.objects.filter(pk=revoked.pk).update(access_revoked_at=timezone.now())
        TestDataFactory.create_guest_order(email='other@test.com')

        self.client.authenticate_guest('guest@test.com')
        response = self.client.get('/api/guest/orders/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([o['id'] for o in response.data], [mine.id])

    def test_guest_token_via_bearer(self):
        TestDataFactory.create_guest_order(email='guest@test.com')
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {issue_guest_token('guest@test.com')}")
        response = self.client.get('/api/guest/orders/')
        self.assertEqual(len(response.data), 1)

    def test_order_detail(self):
        order = TestDataFactory.create_guest_order(email='guest@test.com')
        other = TestDataFactory.create_guest_order(email='other@test.com')
        self.client.authenticate_guest('guest@test.com')

        response = self.client.get(f'/api/guest/orders/{order.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['order_number'], order.order_number)

        response = self.client.get(f'/api/guest/orders/{other.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_order_detail_rejects_account_token(self):
        order = TestDataFactory.create_guest_order(email='guest@test.com')
        self.client.authenticate_user(TestDataFactory.create_user(email='guest@test.com'))
        response = self.client.get(f'/api/guest/orders/{order.id}/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class GuestModelTests(TestCase):
    """Test guest model defaults"""

    def test_magic_link_email_lowercased(self):
        link = GuestMagicLink.objects.create(
            email='Mixed@Case.com', token_hash='x' * 64, expires_at=timezone.now() + timedelta(minutes=5)
        )
        self.assertEqual(link.email, 'mixed@case.com')
        self.assertFalse(link.is_expired)

    def test_draft_default_type(self):
        self.assertEqual(GuestDraft.objects.create().type, GuestDraft.TYPE_QUOTE)
