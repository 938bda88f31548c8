"""
Test suite for SEO module
Tests: sitemap.xml, the OpenAPI document and their generator commands
"""
import json
import os
import tempfile
from io import StringIO

from django.core.management import call_command
from django.test import TestCase, override_settings
from rest_framework import status
from craftstudio.core.test_utils import TestDataFactory
from craftstudio.seo.sitemaps import STATIC_ROUTES, render_sitemap


@override_settings(SITE_URL='https://prism.test')
class SitemapTests(TestCase):
    """Test the storefront sitemap"""

    def setUp(self):
        self.product = TestDataFactory.create_product()
        self.hidden = TestDataFactory.create_product(active=False)

    def test_sitemap_view(self):
        response = self.client.get('/sitemap.xml')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        body = response.content.decode()
        self.assertIn('<loc>https://prism.test/</loc>', body)
        self.assertIn('<loc>https://prism.test/catalog</loc>', body)
        self.assertIn(f'<loc>https://prism.test/products/{self.product.id}</loc>', body)
        self.assertNotIn(f'/products/{self.hidden.id}<', body)
        self.assertIn('<changefreq>weekly</changefreq>', body)

    def test_render_sitemap(self):
        xml = render_sitemap()
        self.assertEqual(xml.count('<url>'), len(STATIC_ROUTES) + 1)
        self.assertIn('<priority>1.0</priority>', xml)

    def test_generate_sitemap_command(self):
        with tempfile.TemporaryDirectory() as tmp:
            output = os.path.join(tmp, 'public', 'sitemap.xml')
            out = StringIO()
            call_command('generate_sitemap', output=output, stdout=out)
            with open(output, encoding='utf-8') as f:
                self.assertIn('https://prism.test/pricing', f.read())
            self.assertIn(f'{len(STATIC_ROUTES) + 1} URLs', out.getvalue())


class OpenAPITests(TestCase):
    """Test the OpenAPI document"""

    def test_openapi_json(self):
        response = self.client.get('/api-docs.json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        schema = response.json()
        self.assertEqual(schema['info']['title'], 'Prism Craft Studio API')
        self.assertIn('/api/orders/', schema['paths'])
        self.assertIn('/api/pricing/quote/', schema['paths'])

    def test_generate_openapi_command(self):
        with tempfile.TemporaryDirectory() as tmp:
            output = os.path.join(tmp, 'openapi.json')
            call_command('generate_openapi', output=output, stdout=StringIO())
            with open(output, encoding='utf-8') as f:
                schema = json.load(f)
            self.assertEqual(schema['info']['version'], '1.0.0')
            self.assertIn('/api/webhooks/stripe/', schema['paths'])
