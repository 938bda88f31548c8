from django.urls import path
from .views import (
    register, login, CustomTokenRefreshView, profile, change_password,
    user_list, create_admin, toggle_user_status,
    setting_list_create, setting_detail,
    audit_log_list,
)

urlpatterns = [
    # Auth endpoints
    path('auth/register/', register, name='register'),
    path('auth/login/', login, name='login'),
    path('auth/refresh/', CustomTokenRefreshView.as_view(), name='token-refresh'),
    path('auth/profile/', profile, name='auth-profile'),
    path('auth/password/', change_password, name='auth-password'),

    # Admin user management
    path('auth/users/', user_list, name='user-list'),
    path('auth/users/<int:pk>/toggle-status/', toggle_user_status, name='user-toggle-status'),
    path('auth/admin/', create_admin, name='create-admin'),

    # Setting endpoints
    path('settings/', setting_list_create, name='setting-list-create'),
    path('settings/<int:pk>/', setting_detail, name='setting-detail'),

    # AuditLog endpoints
    path('audit-logs/', audit_log_list, name='audit-log-list'),
]
