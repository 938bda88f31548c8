from django.urls import path
from .views import (
    product_list_create, product_detail,
    variant_list, product_variants, variant_detail, adjust_variant_stock,
    admin_inventory,
    lead_time_defaults, product_effective_lead_times, product_lead_times,
)

urlpatterns = [
    # Product endpoints
    path('products/', product_list_create, name='product-list-create'),
    path('products/<int:pk>/', product_detail, name='product-detail'),
    path('products/<int:pk>/variants/', product_variants, name='product-variants'),

    # ProductVariant endpoints
    path('variants/', variant_list, name='variant-list'),
    path('variants/<int:pk>/', variant_detail, name='variant-detail'),
    path('variants/<int:pk>/adjust-stock/', adjust_variant_stock, name='variant-adjust-stock'),

    # Admin inventory
    path('admin/inventory/', admin_inventory, name='admin-inventory'),

    # Lead time endpoints
    path('lead-times/defaults/', lead_time_defaults, name='lead-time-defaults'),
    path('lead-times/products/<int:pk>/effective/', product_effective_lead_times, name='product-effective-lead-times'),
    path('lead-times/products/<int:pk>/', product_lead_times, name='product-lead-times'),
]
