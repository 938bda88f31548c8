import logging

from django.core.paginator import Paginator
from django.db import transaction
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response

from craftstudio.core.cache_utils import cached_query, PRODUCTS_LIST_CACHE_TTL, PRODUCTS_NAMESPACE
from craftstudio.core.authentication import OptionalJWTAuthentication
from craftstudio.core.permissions import IsAdminRole, IsAdminOrReadOnly
from craftstudio.core.utils import create_audit_log
from .filters import ProductFilter, InventoryFilter
from .lead_times import get_global_lead_times, save_global_lead_times, get_effective_lead_times, STAGES
from .models import Product, ProductVariant
from .serializers import (
    ProductSerializer, ProductVariantSerializer, ProductVariantCreateSerializer,
    InventoryRowSerializer, StockAdjustmentSerializer, LeadTimeDefaultsSerializer
)
from .validators import validate_lead_time_range

logger = logging.getLogger(__name__)


@cached_query(cache_ttl=PRODUCTS_LIST_CACHE_TTL, key_prefix=PRODUCTS_NAMESPACE)
def _product_list_data(filters):
    queryset = Product.objects.filter(active=True).order_by('-created_at')
    filterset = ProductFilter(dict(filters), queryset=queryset)
    return list(ProductSerializer(filterset.qs, many=True).data)


# Product views
@api_view(['GET', 'POST'])
@authentication_classes([OptionalJWTAuthentication])
@permission_classes([IsAdminOrReadOnly])
def product_list_create(request):
    """List active products (cached) or create a product"""
    if request.method == 'GET':
        filters = tuple(sorted(
            (key, request.query_params.get(key, ''))
            for key in ProductFilter.Meta.fields
            if request.query_params.get(key)
        ))
        return Response(_product_list_data(filters))

    data = request.data
    base_price = data.get('base_price')
    if not data.get('name') or not data.get('category') or isinstance(base_price, bool) \
            or not isinstance(base_price, (int, float)):
        return Response({'error': 'name, category, base_price required'}, status=status.HTTP_400_BAD_REQUEST)

    serializer = ProductSerializer(data=data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    product = serializer.save()
    create_audit_log(request, 'create', 'Product', product.pk, changes={'name': product.name},
                     object_name=product.name)
    logger.info(f"Product created: {product.name} ({product.pk}) by {request.user.email}")
    return Response(ProductSerializer(product).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH', 'DELETE'])
@authentication_classes([OptionalJWTAuthentication])
@permission_classes([IsAdminOrReadOnly])
def product_detail(request, pk):
    """Retrieve, update or delete a product"""
    product = get_object_or_404(Product, pk=pk)

    if request.method == 'GET':
        return Response(ProductSerializer(product).data)
    elif request.method == 'PATCH':
        old_price = product.base_price
        serializer = ProductSerializer(product, data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        product = serializer.save()
        if product.base_price != old_price:
            create_audit_log(request, 'price_change', 'Product', product.pk,
                             changes={'base_price': {'old': str(old_price), 'new': str(product.base_price)}},
                             object_name=product.name)
        else:
            create_audit_log(request, 'update', 'Product', product.pk,
                             changes={k: str(v) for k, v in serializer.validated_data.items()},
                             object_name=product.name)
        return Response(ProductSerializer(product).data)
    else:  # DELETE
        create_audit_log(request, 'delete', 'Product', product.pk, object_name=product.name)
        product.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# ProductVariant views
@api_view(['GET'])
@authentication_classes([OptionalJWTAuthentication])
def variant_list(request):
    """Batch fetch: ?productIds=a,b,c or ?productId=a; no ids returns every variant"""
    product_ids = request.query_params.get('productIds')
    product_id = request.query_params.get('productId')
    if product_ids:
        ids = [s.strip() for s in product_ids.split(',') if s.strip()]
    elif product_id:
        ids = [product_id.strip()]
    else:
        ids = []

    queryset = ProductVariant.objects.select_related('product').order_by('color_name')
    if ids:
        if not all(i.isdigit() for i in ids):
            return Response({'error': 'Product ids must be integers'}, status=status.HTTP_400_BAD_REQUEST)
        queryset = queryset.filter(product_id__in=ids)
    return Response({'variants': ProductVariantSerializer(queryset, many=True).data})


@api_view(['GET', 'POST'])
@authentication_classes([OptionalJWTAuthentication])
@permission_classes([IsAdminOrReadOnly])
def product_variants(request, pk):
    """List or create variants for a product"""
    product = get_object_or_404(Product, pk=pk)

    if request.method == 'GET':
        variants = product.variants.order_by('color_name')
        return Response({'variants': ProductVariantSerializer(variants, many=True).data})

    serializer = ProductVariantCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    variant = serializer.save(product=product)
    create_audit_log(request, 'create', 'ProductVariant', variant.pk,
                     changes={'color_name': variant.color_name, 'stock': variant.stock},
                     object_name=str(variant))
    return Response(ProductVariantSerializer(variant).data, status=status.HTTP_201_CREATED)


@api_view(['PATCH', 'DELETE'])
@permission_classes([IsAdminRole])
def variant_detail(request, pk):
    """Update (whitelisted fields only) or delete a variant"""
    variant = ProductVariant.objects.select_related('product').filter(pk=pk).first()
    if not variant:
        return Response({'error': 'Variant not found'}, status=status.HTTP_404_NOT_FOUND)

    if request.method == 'PATCH':
        serializer = ProductVariantCreateSerializer(variant, data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        variant = serializer.save()
        create_audit_log(request, 'update', 'ProductVariant', variant.pk,
                         changes={k: str(v) for k, v in serializer.validated_data.items()},
                         object_name=str(variant))
        return Response(ProductVariantSerializer(variant).data)

    create_audit_log(request, 'delete', 'ProductVariant', variant.pk, object_name=str(variant))
    variant.delete()
    return Response({'ok': True})


@api_view(['POST'])
@permission_classes([IsAdminRole])
def adjust_variant_stock(request, pk):
    """Apply a signed stock delta to a variant; stock never drops below zero"""
    serializer = StockAdjustmentSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    delta = serializer.validated_data['delta']
    reason = serializer.validated_data['reason']

    with transaction.atomic():
        variant = ProductVariant.objects.select_for_update().select_related('product').filter(pk=pk).first()
        if not variant:
            return Response({'error': 'Variant not found'}, status=status.HTTP_404_NOT_FOUND)

        old_stock = variant.stock
        new_stock = old_stock + delta
        if new_stock < 0:
            return Response({'error': f'Insufficient stock: {old_stock} available, cannot remove {-delta}'},
                            status=status.HTTP_400_BAD_REQUEST)
        variant.stock = new_stock
        variant.save(update_fields=['stock', 'updated_at'])

    create_audit_log(request, 'stock_adjust', 'ProductVariant', variant.pk,
                     changes={'old_stock': old_stock, 'new_stock': new_stock, 'delta': delta, 'reason': reason},
                     object_name=str(variant))
    logger.info(f"Stock adjusted for {variant}: {old_stock} -> {new_stock} ({reason or 'no reason'})")
    return Response(ProductVariantSerializer(variant).data)


@api_view(['GET'])
@permission_classes([IsAdminRole])
def admin_inventory(request):
    """Paged product rows with variants and total stock"""
    try:
        page = max(1, int(request.query_params.get('page', 1)))
        page_size = max(1, min(100, int(request.query_params.get('page_size', 20))))
    except ValueError:
        return Response({'error': 'page and page_size must be integers'}, status=status.HTTP_400_BAD_REQUEST)

    queryset = Product.objects.prefetch_related('variants').order_by('name')
    filterset = InventoryFilter(request.query_params, queryset=queryset)
    paginator = Paginator(filterset.qs, page_size)
    rows = paginator.page(page).object_list if page <= paginator.num_pages and paginator.count else []

    categories = sorted(set(
        Product.objects.exclude(category='').values_list('category', flat=True).distinct()
    ))
    return Response({
        'rows': InventoryRowSerializer(rows, many=True).data,
        'total': paginator.count,
        'categories': categories,
    })


# Lead time views
@api_view(['GET', 'PUT'])
@authentication_classes([OptionalJWTAuthentication])
@permission_classes([IsAdminOrReadOnly])
def lead_time_defaults(request):
    """Get (public) or replace (admin) the global lead-time defaults"""
    if request.method == 'GET':
        return Response(get_global_lead_times())

    serializer = LeadTimeDefaultsSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    value = save_global_lead_times(user=request.user, **serializer.validated_data)
    create_audit_log(request, 'lead_time_change', 'Setting', 'lead_times', changes=serializer.validated_data,
                     object_name='Global lead times')
    return Response(value)


@api_view(['GET'])
@authentication_classes([OptionalJWTAuthentication])
def product_effective_lead_times(request, pk):
    product = Product.objects.filter(pk=pk).first()
    if not product:
        return Response({'error': 'Product not found'}, status=status.HTTP_404_NOT_FOUND)
    return Response(get_effective_lead_times(product))


@api_view(['PUT'])
@permission_classes([IsAdminRole])
def product_lead_times(request, pk):
    """
    Set or clear a product's lead-time override.

    use_global=true (or both stages null) removes the override; an object sets
    a stage and null clears it.
    """
    product = Product.objects.filter(pk=pk).first()
    if not product:
        return Response({'error': 'Product not found'}, status=status.HTTP_404_NOT_FOUND)

    data = request.data
    use_global = data.get('use_global') is True
    all_null = all(stage in data and data[stage] is None for stage in STAGES)

    if use_global or all_null:
        lead_times = None
        changed = True
    else:
        lead_times = dict(product.lead_times or {})
        changed = False
        for stage in STAGES:
            if stage not in data:
                continue
            if data[stage] is None:
                lead_times.pop(stage, None)
                changed = True
            elif isinstance(data[stage], dict):
                try:
                    lead_times[stage] = validate_lead_time_range(data[stage], stage)
                except ValidationError as e:
                    return Response({'error': str(e.detail[0])}, status=status.HTTP_400_BAD_REQUEST)
                changed = True

    if not changed:
        return Response({'error': 'No changes provided'}, status=status.HTTP_400_BAD_REQUEST)

    product.lead_times = lead_times or None
    product.save(update_fields=['lead_times', 'updated_at'])
    create_audit_log(request, 'lead_time_change', 'Product', product.pk,
                     changes={'lead_times': product.lead_times}, object_name=product.name)
    return Response({'ok': True, 'lead_times': product.lead_times or {}})
