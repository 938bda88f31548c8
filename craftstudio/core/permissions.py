from rest_framework.permissions import BasePermission, SAFE_METHODS


def is_admin(user):
    return bool(user and user.is_authenticated and getattr(user, 'role', None) == 'admin')


class IsAdminRole(BasePermission):
    """Allows access only to authenticated users with the admin role"""
    message = 'Admin access required'

    def has_permission(self, request, view):
        return is_admin(request.user)


class IsAdminOrReadOnly(BasePermission):
    """Public reads, admin-only writes"""
    message = 'Admin access required'

    def has_permission(self, request, view):
        if request.method in SAFE_METHODS:
            return True
        return is_admin(request.user)
