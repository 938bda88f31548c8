from django.contrib import admin
from .models import DesignerBooking


@admin.register(DesignerBooking)
class DesignerBookingAdmin(admin.ModelAdmin):
    list_display = ['consultation_type', 'designer_id', 'user', 'scheduled_date', 'status', 'price']
    list_filter = ['status', 'consultation_type', 'scheduled_date']
    search_fields = ['designer_id', 'user__email', 'notes']
    ordering = ['-scheduled_date']
