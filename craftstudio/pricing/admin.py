from django.contrib import admin
from .models import PricingRule


@admin.register(PricingRule)
class PricingRuleAdmin(admin.ModelAdmin):
    list_display = ['product_type', 'customization_type', 'quantity_min', 'quantity_max', 'base_price',
                    'customization_cost', 'discount_percentage', 'active']
    list_filter = ['active', 'product_type', 'customization_type']
    search_fields = ['product_type', 'customization_type']
    ordering = ['product_type', 'quantity_min']
    readonly_fields = ['created_at', 'updated_at']
