"""
URL configuration for the Prism Craft Studio API.

Every app mounts its routes under api/. Uploaded artwork is served from
UPLOAD_DIR under both /uploads/ and /api/uploads/.
"""
from django.contrib import admin
from django.urls import path, include, re_path
from django.conf import settings
from django.views.static import serve

from craftstudio.core.views import health
from craftstudio.seo.views import sitemap_xml, openapi_json

admin.site.site_header = "Prism Craft Studio Admin"
admin.site.site_title = "Prism Craft Studio Admin Portal"
admin.site.index_title = "Studio administration"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('health/', health, name='health'),
    path('api/health/', health, name='api-health'),
    path('sitemap.xml', sitemap_xml, name='sitemap'),
    path('api-docs.json', openapi_json, name='openapi-json'),
    path('api/', include('craftstudio.core.urls')),
    path('api/', include('craftstudio.catalog.urls')),
    path('api/', include('craftstudio.pricing.urls')),
    path('api/', include('craftstudio.parties.urls')),
    path('api/', include('craftstudio.orders.urls')),
    path('api/', include('craftstudio.payments.urls')),
    path('api/', include('craftstudio.guests.urls')),
    path('api/', include('craftstudio.bookings.urls')),
    path('api/', include('craftstudio.files.urls')),
    path('api/', include('craftstudio.notifications.urls')),
    re_path(r'^uploads/(?P<path>.*)$', serve, {'document_root': settings.UPLOAD_DIR}),
    re_path(r'^api/uploads/(?P<path>.*)$', serve, {'document_root': settings.UPLOAD_DIR}),
    re_path(r'^static/(?P<path>.*)$', serve, {'document_root': settings.STATIC_ROOT}),
]

handler404 = 'craftstudio.core.exceptions.not_found'
handler500 = 'craftstudio.core.exceptions.server_error'
