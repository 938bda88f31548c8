import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from craftstudio.core.permissions import is_admin
from .models import DesignerBooking
from .serializers import DesignerBookingSerializer

logger = logging.getLogger(__name__)


def _company_of(user):
    profile = getattr(user, 'profile', None)
    return profile.company if profile else None


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def booking_list_create(request):
    """Customers see and book their own consultations; admins see all"""
    if request.method == 'GET':
        bookings = DesignerBooking.objects.select_related('user', 'company').order_by('-created_at')
        if not is_admin(request.user):
            bookings = bookings.filter(user=request.user)
        return Response(DesignerBookingSerializer(bookings, many=True).data)

    serializer = DesignerBookingSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    booking = serializer.save(user=request.user, company=_company_of(request.user))
    logger.info(f"Booking created: {booking} by {request.user.email}")
    return Response(DesignerBookingSerializer(booking).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def booking_detail(request, pk):
    bookings = DesignerBooking.objects.all()
    if not is_admin(request.user):
        bookings = bookings.filter(user=request.user)
    booking = bookings.filter(pk=pk).first()
    if not booking:
        return Response({'error': 'Not Found'}, status=status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        return Response(DesignerBookingSerializer(booking).data)

    serializer = DesignerBookingSerializer(booking, data=request.data, partial=True)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    booking = serializer.save()
    return Response(DesignerBookingSerializer(booking).data)
