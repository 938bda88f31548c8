"""
Test suite for Bookings module
Tests: designer consultation booking and access rules
"""
from decimal import Decimal

from django.test import TestCase
from rest_framework import status
from craftstudio.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from craftstudio.bookings.models import DesignerBooking


class DesignerBookingAPITests(TestCase):
    """Test DesignerBooking API endpoints"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.customer = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.customer)
        self.payload = {
            'designer_id': 'designer-1',
            'consultation_type': 'logo-review',
            'scheduled_date': '2026-03-02T15:00:00Z',
            'price': '75.00',
        }

    def create_booking(self, user):
        return DesignerBooking.objects.create(
            user=user, designer_id='designer-1', consultation_type='logo-review',
            scheduled_date='2026-03-02T15:00:00Z', price=Decimal('75.00'),
        )

    def test_create_booking(self):
        """Test booking defaults and company linking"""
        company = TestDataFactory.create_company(name='Acme')
        TestDataFactory.create_profile(self.customer, company=company)
        response = self.client.post('/api/bookings/', self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['duration_minutes'], 60)
        self.assertEqual(response.data['status'], 'scheduled')
        self.assertEqual(response.data['price'], Decimal('75.00'))
        self.assertEqual(response.data['user_id'], self.customer.id)
        self.assertEqual(response.data['company_id'], company.id)

    def test_create_booking_without_profile(self):
        response = self.client.post('/api/bookings/', self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIsNone(response.data['company_id'])

    def test_create_booking_validation(self):
        response = self.client.post('/api/bookings/', dict(self.payload, duration_minutes=5), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.post('/api/bookings/', dict(self.payload, price='-1'), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_own_bookings(self):
        mine = self.create_booking(self.customer)
        self.create_booking(TestDataFactory.create_user())
        response = self.client.get('/api/bookings/')
        self.assertEqual([b['id'] for b in response.data], [mine.id])

        self.client.authenticate_user(self.admin)
        self.assertEqual(len(self.client.get('/api/bookings/').data), 2)

    def test_other_users_booking_not_found(self):
        booking = self.create_booking(TestDataFactory.create_user())
        response = self.client.get(f'/api/bookings/{booking.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_update_booking(self):
        booking = self.create_booking(self.customer)
        response = self.client.patch(f'/api/bookings/{booking.id}/',
                                     {'status': 'confirmed', 'meeting_link': 'https://meet.test/abc'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        booking.refresh_from_db()
        self.assertEqual(booking.status, 'confirmed')
        self.assertEqual(booking.meeting_link, 'https://meet.test/abc')
