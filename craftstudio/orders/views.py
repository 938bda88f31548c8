import logging

from django.db import transaction
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from craftstudio.core.permissions import is_admin
from craftstudio.core.utils import create_audit_log
from craftstudio.notifications.templates import production_update_email
from craftstudio.payments.serializers import PaymentSerializer
from .eta import compute_eta
from .models import Order, Sample
from .serializers import (
    OrderSerializer, OrderCreateSerializer, OrderUpdateSerializer,
    OrderTimelineSerializer, ProductionUpdateSerializer, SampleSerializer
)
from .services import (
    create_order, change_order_status, log_timeline, capture_lead_time_snapshot, generate_sample_number,
    notify_customer
)

logger = logging.getLogger(__name__)

SAMPLE_ADMIN_FIELDS = ('status', 'converted_order', 'total_price', 'tracking_number')


def _visible_order(request, pk):
    return Order.objects.visible_to(request.user).filter(pk=pk).first()


def _not_found():
    return Response({'error': 'Not Found'}, status=status.HTTP_404_NOT_FOUND)


# Order views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def order_list_create(request):
    """List visible orders (optional ?status=) or place an order"""
    if request.method == 'GET':
        orders = Order.objects.visible_to(request.user).select_related('user').order_by('-created_at')
        status_filter = request.query_params.get('status')
        if status_filter:
            orders = orders.filter(status=status_filter)
        return Response(OrderSerializer(orders, many=True).data)

    serializer = OrderCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    order = create_order(serializer.validated_data, user=request.user, trigger_source='api')
    return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def order_detail(request, pk):
    """Retrieve a visible order, or update it (admin)"""
    order = _visible_order(request, pk)
    if not order:
        return _not_found()

    if request.method == 'GET':
        return Response(OrderSerializer(order).data)

    if not is_admin(request.user):
        return Response({'error': 'Admin access required'}, status=status.HTTP_403_FORBIDDEN)

    serializer = OrderUpdateSerializer(order, data=request.data, partial=True)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = dict(serializer.validated_data)
    new_status = data.pop('status', None)
    old_status = order.status

    with transaction.atomic():
        for field, value in data.items():
            setattr(order, field, value)
        if new_status and new_status != old_status:
            try:
                change_order_status(order, new_status, user=request.user, trigger_source='admin')
            except ValueError as e:
                transaction.set_rollback(True)
                return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        order.save()

    changes = {k: str(v) for k, v in data.items()}
    if new_status and new_status != old_status:
        changes['status'] = {'old': old_status, 'new': new_status}
        create_audit_log(request, 'status_change', 'Order', order.pk, changes=changes,
                         object_name=order.order_number)
    elif changes:
        create_audit_log(request, 'update', 'Order', order.pk, changes=changes, object_name=order.order_number)
    return Response(OrderSerializer(order).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def order_payments(request, pk):
    order = _visible_order(request, pk)
    if not order:
        return _not_found()
    payments = order.payments.order_by('created_at')
    return Response(PaymentSerializer(payments, many=True).data)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def order_timeline(request, pk):
    """Order history; admins may add manual events"""
    order = _visible_order(request, pk)
    if not order:
        return _not_found()

    if request.method == 'GET':
        events = order.timeline.select_related('triggered_by').order_by('-created_at')
        return Response(OrderTimelineSerializer(events, many=True).data)

    if not is_admin(request.user):
        return Response({'error': 'Admin access required'}, status=status.HTTP_403_FORBIDDEN)
    serializer = OrderTimelineSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    event = log_timeline(
        order,
        serializer.validated_data['event_type'],
        serializer.validated_data['description'],
        event_data=serializer.validated_data.get('event_data'),
        trigger_source='manual',
        triggered_by=request.user,
    )
    return Response(OrderTimelineSerializer(event).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def order_production_updates(request, pk):
    """Production updates; customers only see the ones marked visible"""
    order = _visible_order(request, pk)
    if not order:
        return _not_found()

    if request.method == 'GET':
        updates = order.production_updates.order_by('-created_at')
        if not is_admin(request.user):
            updates = updates.filter(visible_to_customer=True)
        return Response(ProductionUpdateSerializer(updates, many=True).data)

    if not is_admin(request.user):
        return Response({'error': 'Admin access required'}, status=status.HTTP_403_FORBIDDEN)
    serializer = ProductionUpdateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    update = serializer.save(order=order, created_by=request.user)
    log_timeline(order, 'production_update', f'{update.stage}: {update.status}',
                 event_data={'production_update_id': update.pk}, trigger_source='admin',
                 triggered_by=request.user)
    if update.visible_to_customer:
        notify_customer(order, *production_update_email(order, update))
    return Response(ProductionUpdateSerializer(update).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def order_eta(request, pk):
    """Stage-by-stage ETA computed from the order's lead-time snapshot"""
    order = _visible_order(request, pk)
    if not order:
        return _not_found()

    snapshot = order.lead_time_snapshot
    if not snapshot:
        # Orders placed before snapshots existed get one on first read
        snapshot = capture_lead_time_snapshot(order.product)
        order.lead_time_snapshot = snapshot
        order.save(update_fields=['lead_time_snapshot', 'updated_at'])
    return Response(compute_eta(order, snapshot))


# Sample views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def sample_list_create(request):
    if request.method == 'GET':
        samples = Sample.objects.select_related('user').order_by('-created_at')
        if not is_admin(request.user):
            samples = samples.filter(user=request.user)
        return Response(SampleSerializer(samples, many=True).data)

    serializer = SampleSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    sample = serializer.save(user=request.user, sample_number=generate_sample_number(), status='ordered',
                             converted_order=None, tracking_number='')
    logger.info(f"Sample ordered: {sample.sample_number} by {request.user.email}")
    return Response(SampleSerializer(sample).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def sample_detail(request, pk):
    """Owner or admin; fulfilment fields are admin-only"""
    sample = Sample.objects.filter(pk=pk).first()
    if not sample or (sample.user_id != request.user.id and not is_admin(request.user)):
        return _not_found()

    if request.method == 'GET':
        return Response(SampleSerializer(sample).data)

    if not is_admin(request.user) and any(field in request.data for field in SAMPLE_ADMIN_FIELDS):
        return Response({'error': 'Admin access required'}, status=status.HTTP_403_FORBIDDEN)
    serializer = SampleSerializer(sample, data=request.data, partial=True)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    sample = serializer.save()
    return Response(SampleSerializer(sample).data)
