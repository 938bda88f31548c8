import logging

from django.contrib.auth import get_user_model
from django.core.exceptions import ObjectDoesNotExist
from django.core.paginator import Paginator
from django.db.models import Q
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.exceptions import AuthenticationFailed
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer
from rest_framework_simplejwt.views import TokenRefreshView

from .models import Setting, AuditLog
from .permissions import IsAdminRole
from .serializers import (
    UserSerializer, UserCreateSerializer, ProfileUpdateSerializer, PasswordChangeSerializer,
    SettingSerializer, AuditLogSerializer
)
from .utils import create_audit_log

logger = logging.getLogger(__name__)

User = get_user_model()


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    def validate(self, attrs):
        data = super().validate(attrs)
        if not self.user.is_active:
            raise AuthenticationFailed('Account is deactivated')
        return data

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['email'] = user.email
        token['role'] = user.role
        token['first_name'] = user.first_name
        token['last_name'] = user.last_name
        return token


class CustomTokenRefreshSerializer(TokenRefreshSerializer):
    """Token refresh that treats deleted users as an invalid token"""
    def validate(self, attrs):
        try:
            return super().validate(attrs)
        except (InvalidToken, TokenError):
            raise InvalidToken('Token is invalid or expired.')
        except (ObjectDoesNotExist, User.DoesNotExist):
            raise InvalidToken('Token is invalid. User no longer exists.')


class CustomTokenRefreshView(TokenRefreshView):
    serializer_class = CustomTokenRefreshSerializer


def issue_tokens(user):
    refresh = CustomTokenObtainPairSerializer.get_token(user)
    return {'token': str(refresh.access_token), 'refresh': str(refresh)}


def _requesting_admin(request):
    """Return the active admin behind the request's bearer token, if any"""
    try:
        result = JWTAuthentication().authenticate(request)
    except AuthenticationFailed as e:
        logger.warning(f"Admin validation failed: {e}")
        return None
    if not result:
        return None
    user, _ = result
    if user.role != User.ROLE_ADMIN or not user.is_active:
        return None
    return user


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def register(request):
    """Register a customer, or an admin when bootstrapping or called by an admin"""
    data = request.data
    if not all(data.get(f) for f in ('email', 'password', 'first_name', 'last_name')):
        return Response({'error': 'Email, password, first name, and last name are required'},
                        status=status.HTTP_400_BAD_REQUEST)

    email = str(data.get('email')).lower().strip()
    if User.objects.filter(email=email).exists():
        return Response({'error': 'User with this email already exists'}, status=status.HTTP_409_CONFLICT)

    role = User.ROLE_CUSTOMER
    if data.get('role') == User.ROLE_ADMIN:
        if not User.objects.exists():
            logger.info("Creating bootstrap admin user")
            role = User.ROLE_ADMIN
        elif _requesting_admin(request):
            role = User.ROLE_ADMIN
        else:
            return Response({'error': 'Only active admins can create admin users'},
                            status=status.HTTP_403_FORBIDDEN)

    serializer = UserCreateSerializer(data=data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    user = serializer.save(role=role)
    logger.info(f"New user registered: {user.email} ({user.role})")

    return Response({
        'message': 'User registered successfully',
        'user': UserSerializer(user).data,
        **issue_tokens(user),
    }, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def login(request):
    """Exchange email and password for a token pair"""
    email = str(request.data.get('email') or '').lower().strip()
    password = request.data.get('password')
    if not email or not password:
        return Response({'error': 'Email and password are required'}, status=status.HTTP_400_BAD_REQUEST)

    user = User.objects.filter(email=email).first()
    if not user:
        return Response({'error': 'Invalid email or password'}, status=status.HTTP_401_UNAUTHORIZED)
    if not user.is_active:
        return Response({'error': 'Account is deactivated'}, status=status.HTTP_401_UNAUTHORIZED)
    if not user.check_password(password):
        return Response({'error': 'Invalid email or password'}, status=status.HTTP_401_UNAUTHORIZED)

    user.last_login = timezone.now()
    user.save(update_fields=['last_login'])
    logger.info(f"User logged in: {user.email} ({user.role})")

    return Response({
        'message': 'Login successful',
        'user': UserSerializer(user).data,
        **issue_tokens(user),
    })


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated])
def profile(request):
    """Get or update the current user"""
    user = request.user
    if request.method == 'GET':
        return Response({'user': UserSerializer(user).data})

    serializer = ProfileUpdateSerializer(user, data=request.data, partial=True)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    serializer.save()
    logger.info(f"Profile updated: {user.email}")
    return Response({'message': 'Profile updated successfully', 'user': UserSerializer(user).data})


@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def change_password(request):
    if not request.data.get('current_password') or not request.data.get('new_password'):
        return Response({'error': 'Current password and new password are required'},
                        status=status.HTTP_400_BAD_REQUEST)
    serializer = PasswordChangeSerializer(data=request.data)
    if not serializer.is_valid():
        return Response({'error': 'New password must be at least 6 characters long'},
                        status=status.HTTP_400_BAD_REQUEST)

    user = request.user
    if not user.check_password(serializer.validated_data['current_password']):
        return Response({'error': 'Current password is incorrect'}, status=status.HTTP_401_UNAUTHORIZED)

    user.set_password(serializer.validated_data['new_password'])
    user.save()
    logger.info(f"Password changed: {user.email}")
    return Response({'message': 'Password changed successfully'})


@api_view(['GET'])
@permission_classes([IsAdminRole])
def user_list(request):
    """Paginated user list with role filter and free-text search"""
    try:
        page = max(1, int(request.query_params.get('page', 1)))
        limit = max(1, min(100, int(request.query_params.get('limit', 20))))
    except ValueError:
        return Response({'error': 'page and limit must be integers'}, status=status.HTTP_400_BAD_REQUEST)

    queryset = User.objects.all().order_by('-created_at')
    role = request.query_params.get('role')
    if role in (User.ROLE_ADMIN, User.ROLE_CUSTOMER):
        queryset = queryset.filter(role=role)
    search = request.query_params.get('search', '').strip()
    if search:
        queryset = queryset.filter(
            Q(email__icontains=search) |
            Q(first_name__icontains=search) |
            Q(last_name__icontains=search) |
            Q(company_name__icontains=search)
        )

    paginator = Paginator(queryset, limit)
    users = paginator.get_page(page) if paginator.count else []
    return Response({
        'users': UserSerializer(users, many=True).data,
        'pagination': {
            'page': users.number if paginator.count else page,
            'limit': limit,
            'total': paginator.count,
            'pages': paginator.num_pages if paginator.count else 0,
        }
    })


@api_view(['POST'])
@permission_classes([IsAdminRole])
def create_admin(request):
    """Create another admin account"""
    data = request.data
    if not all(data.get(f) for f in ('email', 'password', 'first_name', 'last_name')):
        return Response({'error': 'Email, password, first name, and last name are required'},
                        status=status.HTTP_400_BAD_REQUEST)
    if User.objects.filter(email=str(data['email']).lower().strip()).exists():
        return Response({'error': 'User with this email already exists'}, status=status.HTTP_409_CONFLICT)

    serializer = UserCreateSerializer(data=data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    user = serializer.save(role=User.ROLE_ADMIN)
    logger.info(f"Admin user created: {user.email} by {request.user.email}")
    return Response({'message': 'Admin user created successfully', 'user': UserSerializer(user).data},
                    status=status.HTTP_201_CREATED)


@api_view(['PUT'])
@permission_classes([IsAdminRole])
def toggle_user_status(request, pk):
    user = get_object_or_404(User, pk=pk)
    if user.pk == request.user.pk:
        return Response({'error': 'Cannot deactivate your own account'}, status=status.HTTP_400_BAD_REQUEST)

    user.is_active = not user.is_active
    user.save(update_fields=['is_active', 'updated_at'])
    create_audit_log(request, 'user_toggle', 'User', user.pk, changes={'is_active': user.is_active},
                     object_name=user.email)
    state = 'activated' if user.is_active else 'deactivated'
    logger.info(f"User status toggled: {user.email} -> {state} by {request.user.email}")
    return Response({'message': f'User {state} successfully', 'user': UserSerializer(user).data})


# Setting views
@api_view(['GET', 'POST'])
@permission_classes([IsAdminRole])
def setting_list_create(request):
    """List all settings or create a new setting"""
    if request.method == 'GET':
        settings = Setting.objects.all().order_by('key')
        serializer = SettingSerializer(settings, many=True)
        return Response(serializer.data)
    serializer = SettingSerializer(data=request.data)
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAdminRole])
def setting_detail(request, pk):
    """Retrieve, update or delete a setting"""
    setting = get_object_or_404(Setting, pk=pk)

    if request.method == 'GET':
        return Response(SettingSerializer(setting).data)
    elif request.method == 'PATCH':
        serializer = SettingSerializer(setting, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        setting.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAdminRole])
def audit_log_list(request):
    """List audit logs with filtering"""
    queryset = AuditLog.objects.select_related('user')

    action_filter = request.query_params.get('action')
    if action_filter:
        queryset = queryset.filter(action=action_filter)
    model_filter = request.query_params.get('model')
    if model_filter:
        queryset = queryset.filter(model_name=model_filter)
    date_from = request.query_params.get('date_from')
    date_to = request.query_params.get('date_to')
    if date_from:
        queryset = queryset.filter(created_at__date__gte=date_from)
    if date_to:
        queryset = queryset.filter(created_at__date__lte=date_to)

    serializer = AuditLogSerializer(queryset.order_by('-created_at')[:500], many=True)
    return Response(serializer.data)


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def health(request):
    return Response({'status': 'ok'})
