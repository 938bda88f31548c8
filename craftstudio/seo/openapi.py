from rest_framework.schemas.openapi import SchemaGenerator

API_TITLE = 'Prism Craft Studio API'
API_VERSION = '1.0.0'
API_DESCRIPTION = 'Custom apparel catalog, pricing, orders and payments'


def build_openapi_schema(request=None):
    generator = SchemaGenerator(title=API_TITLE, version=API_VERSION, description=API_DESCRIPTION)
    return generator.get_schema(request=request, public=True)
