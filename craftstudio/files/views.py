import logging

from rest_framework import status
from rest_framework.decorators import api_view, parser_classes, permission_classes
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from craftstudio.bookings.models import DesignerBooking
from craftstudio.core.permissions import is_admin
from craftstudio.orders.models import Order
from .models import FileUpload
from .serializers import FileUploadSerializer, UploadRequestSerializer
from .storage import save_upload

logger = logging.getLogger(__name__)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
@parser_classes([MultiPartParser, FormParser])
def upload_file(request):
    """Multipart upload of a single `file`, optionally linked to an order or booking"""
    serializer = UploadRequestSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data

    order = None
    if data.get('order_id'):
        order = Order.objects.visible_to(request.user).filter(pk=data['order_id']).first()
        if not order:
            return Response({'error': 'Order not found'}, status=status.HTTP_404_NOT_FOUND)
    booking = None
    if data.get('booking_id'):
        bookings = DesignerBooking.objects.all()
        if not is_admin(request.user):
            bookings = bookings.filter(user=request.user)
        booking = bookings.filter(pk=data['booking_id']).first()
        if not booking:
            return Response({'error': 'Booking not found'}, status=status.HTTP_404_NOT_FOUND)

    uploaded = data['file']
    file_url = save_upload(uploaded)
    FileUpload.objects.create(
        user=request.user,
        order=order,
        booking=booking,
        file_name=uploaded.name,
        file_size=uploaded.size,
        file_type=uploaded.content_type or 'application/octet-stream',
        file_url=file_url,
        file_purpose=data['file_purpose'],
    )
    logger.info(f"File uploaded: {uploaded.name} ({uploaded.size} bytes) by {request.user.email}")
    return Response({'file_url': file_url})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def order_files(request, pk):
    order = Order.objects.visible_to(request.user).filter(pk=pk).first()
    if not order:
        return Response({'error': 'Not Found'}, status=status.HTTP_404_NOT_FOUND)
    uploads = order.uploads.order_by('-uploaded_at')
    return Response(FileUploadSerializer(uploads, many=True).data)
