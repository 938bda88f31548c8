from django.contrib import admin
from .models import Order, OrderTimeline, ProductionUpdate, Sample


class OrderTimelineInline(admin.TabularInline):
    model = OrderTimeline
    extra = 0
    fields = ['event_type', 'description', 'trigger_source', 'triggered_by', 'created_at']
    readonly_fields = ['created_at']


class ProductionUpdateInline(admin.TabularInline):
    model = ProductionUpdate
    extra = 0
    fields = ['stage', 'status', 'description', 'visible_to_customer']


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ['order_number', 'customer_email', 'product_name', 'quantity', 'total_amount', 'status',
                    'paid_at', 'created_at']
    list_filter = ['status', 'created_at']
    search_fields = ['order_number', 'customer_email', 'guest_email', 'product_name', 'company_name']
    ordering = ['-created_at']
    readonly_fields = ['order_number', 'deposit_amount', 'balance_amount', 'total_paid_amount',
                       'lead_time_snapshot', 'expected_schedule', 'estimated_delivery_window',
                       'created_at', 'updated_at']
    inlines = [OrderTimelineInline, ProductionUpdateInline]


@admin.register(Sample)
class SampleAdmin(admin.ModelAdmin):
    list_display = ['sample_number', 'user', 'total_price', 'status', 'created_at']
    list_filter = ['status', 'created_at']
    search_fields = ['sample_number', 'user__email', 'tracking_number']
    ordering = ['-created_at']
