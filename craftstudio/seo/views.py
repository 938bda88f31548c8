from django.contrib.sitemaps.views import sitemap
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from craftstudio.core.authentication import OptionalJWTAuthentication
from .openapi import build_openapi_schema
from .sitemaps import SITEMAPS


def sitemap_xml(request):
    return sitemap(request, sitemaps=SITEMAPS)


@api_view(['GET'])
@authentication_classes([OptionalJWTAuthentication])
@permission_classes([AllowAny])
def openapi_json(request):
    return Response(build_openapi_schema(request))
