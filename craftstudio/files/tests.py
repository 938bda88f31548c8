"""
Test suite for Files module
Tests: artwork uploads and per-order file listing
"""
import os
import shutil
import tempfile

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings
from rest_framework import status
from craftstudio.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from craftstudio.files.models import FileUpload


class FileUploadAPITests(TestCase):
    """Test file upload endpoints"""

    def setUp(self):
        self.upload_dir = tempfile.mkdtemp()
        self.settings_override = override_settings(UPLOAD_DIR=self.upload_dir, MEDIA_URL='/uploads/')
        self.settings_override.enable()
        self.customer = TestDataFactory.create_user()
        self.order = TestDataFactory.create_order(user=self.customer)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.customer)

    def tearDown(self):
        self.settings_override.disable()
        shutil.rmtree(self.upload_dir, ignore_errors=True)

    def artwork(self, name='logo final.png', content=b'\x89PNG fake image'):
        return SimpleUploadedFile(name, content, content_type='image/png')

    def test_upload_requires_auth(self):
        self.client.logout()
        response = self.client.post('/api/files/upload/', {'file': self.artwork()}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_upload_file(self):
        """Test the file is stored under a unique name and recorded"""
        response = self.client.post('/api/files/upload/', {'file': self.artwork(), 'order_id': self.order.id},
                                    format='multipart')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        file_url = response.data['file_url']
        self.assertTrue(file_url.startswith('/uploads/'))
        self.assertTrue(file_url.endswith('logo_final.png'))
        self.assertTrue(os.path.exists(os.path.join(self.upload_dir, file_url.rsplit('/', 1)[-1])))

        upload = FileUpload.objects.get()
        self.assertEqual(upload.order, self.order)
        self.assertEqual(upload.file_name, 'logo final.png')
        self.assertEqual(upload.file_type, 'image/png')
        self.assertEqual(upload.file_purpose, 'artwork')

    def test_upload_missing_file(self):
        response = self.client.post('/api/files/upload/', {'file_purpose': 'artwork'}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(str(response.data['file'][0]), 'No file')

    @override_settings(FILE_UPLOAD_MAX_BYTES=1024 * 1024)
    def test_upload_too_large(self):
        big = self.artwork(content=b'x' * (1024 * 1024 + 1))
        response = self.client.post('/api/files/upload/', {'file': big}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(str(response.data['file'][0]), 'File too large (max 1 MB)')

    def test_upload_to_other_users_order(self):
        other_order = TestDataFactory.create_order(user=TestDataFactory.create_user())
        response = self.client.post('/api/files/upload/', {'file': self.artwork(), 'order_id': other_order.id},
                                    format='multipart')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertFalse(FileUpload.objects.exists())

    def test_order_files(self):
        self.client.post('/api/files/upload/', {'file': self.artwork(), 'order_id': self.order.id},
                         format='multipart')
        self.client.post('/api/files/upload/', {'file': self.artwork(name='loose.png')}, format='multipart')
        response = self.client.get(f'/api/files/order/{self.order.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([f['file_name'] for f in response.data], ['logo final.png'])
        self.assertEqual(response.data[0]['order_id'], self.order.id)
