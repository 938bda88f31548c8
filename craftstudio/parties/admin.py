from django.contrib import admin
from .models import Company, Profile


@admin.register(Company)
class CompanyAdmin(admin.ModelAdmin):
    list_display = ['name', 'industry', 'size', 'phone', 'created_at']
    list_filter = ['industry', 'size', 'created_at']
    search_fields = ['name', 'phone']
    ordering = ['name']


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ['user', 'first_name', 'last_name', 'company', 'role', 'created_at']
    list_filter = ['role', 'created_at']
    search_fields = ['user__email', 'first_name', 'last_name', 'company__name']
    ordering = ['-created_at']
