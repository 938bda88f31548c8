"""
Storefront sitemap rooted at SITE_URL rather than the API host.
"""
from urllib.parse import urlsplit

from django.conf import settings
from django.contrib.sitemaps import Sitemap
from django.template.loader import render_to_string

from craftstudio.catalog.models import Product

STATIC_ROUTES = [
    '/',
    '/catalog',
    '/pricing',
    '/samples',
    '/designers',
    '/customize',
    '/case-studies',
    '/terms',
    '/privacy',
]


class StorefrontSitemap(Sitemap):
    changefreq = 'weekly'
    priority = 0.7

    def get_protocol(self, protocol=None):
        return urlsplit(settings.SITE_URL).scheme or 'https'

    def get_domain(self, site=None):
        return urlsplit(settings.SITE_URL).netloc


class StaticRoutesSitemap(StorefrontSitemap):
    def items(self):
        return STATIC_ROUTES

    def location(self, item):
        return item

    def priority(self, item):
        return 1.0 if item == '/' else 0.7


class ProductSitemap(StorefrontSitemap):
    def items(self):
        return Product.objects.filter(active=True).order_by('pk')

    def location(self, obj):
        return f'/products/{obj.pk}'

    def lastmod(self, obj):
        return obj.updated_at


SITEMAPS = {
    'static': StaticRoutesSitemap,
    'products': ProductSitemap,
}


def render_sitemap():
    """The sitemap XML, without a request"""
    urls = []
    for sitemap_class in SITEMAPS.values():
        urls.extend(sitemap_class().get_urls())
    return render_to_string('sitemap.xml', {'urlset': urls})
