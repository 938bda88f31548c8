"""
Test suite for Parties module
Tests: storefront profiles and company linking
"""
from django.test import TestCase
from rest_framework import status
from craftstudio.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from craftstudio.parties.models import Company, Profile


class ProfileAPITests(TestCase):
    """Test Profile API endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_profile_requires_auth(self):
        self.client.logout()
        response = self.client.get('/api/profile/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_missing_profile_is_empty(self):
        response = self.client.get('/api/profile/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {})

    def test_patch_creates_profile_and_company(self):
        """Test first PATCH creates the profile and a new company"""
        response = self.client.patch('/api/profile/', {'first_name': 'Ada', 'company_name': 'Acme'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['first_name'], 'Ada')
        self.assertEqual(response.data['company_name'], 'Acme')
        self.assertEqual(Profile.objects.get(user=self.user).company.name, 'Acme')

    def test_patch_links_existing_company(self):
        """Test a known company name is reused"""
        company = TestDataFactory.create_company(name='Acme')
        self.client.patch('/api/profile/', {'company_name': 'Acme'}, format='json')
        self.assertEqual(Company.objects.filter(name='Acme').count(), 1)
        self.assertEqual(Profile.objects.get(user=self.user).company_id, company.id)

    def test_role_is_read_only(self):
        TestDataFactory.create_profile(self.user)
        self.client.patch('/api/profile/', {'role': 'owner', 'phone': '555-0100'}, format='json')
        profile = Profile.objects.get(user=self.user)
        self.assertEqual(profile.role, 'member')
        self.assertEqual(profile.phone, '555-0100')


class CompanyAPITests(TestCase):
    """Test Company API endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_company_not_found_without_profile(self):
        response = self.client.get('/api/company/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Not Found')

    def test_get_and_update_company(self):
        company = TestDataFactory.create_company(name='Acme')
        TestDataFactory.create_profile(self.user, company=company)
        response = self.client.get('/api/company/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['name'], 'Acme')

        response = self.client.patch('/api/company/', {'industry': 'Education'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        company.refresh_from_db()
        self.assertEqual(company.industry, 'Education')
