from django.contrib import admin
from .models import FileUpload


@admin.register(FileUpload)
class FileUploadAdmin(admin.ModelAdmin):
    list_display = ['file_name', 'file_purpose', 'file_size', 'order', 'user', 'uploaded_at']
    list_filter = ['file_purpose', 'uploaded_at']
    search_fields = ['file_name', 'order__order_number', 'user__email']
    ordering = ['-uploaded_at']
