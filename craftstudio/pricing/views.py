import logging

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.response import Response

from craftstudio.core.authentication import OptionalJWTAuthentication
from craftstudio.core.permissions import IsAdminRole, IsAdminOrReadOnly
from craftstudio.core.utils import create_audit_log
from .calculator import active_rules, calculate_quote
from .models import PricingRule
from .serializers import PricingRuleSerializer, QuoteRequestSerializer

logger = logging.getLogger(__name__)


# PricingRule views
@api_view(['GET', 'POST'])
@authentication_classes([OptionalJWTAuthentication])
@permission_classes([IsAdminOrReadOnly])
def pricing_rule_list_create(request):
    """List active pricing rules or create a new rule"""
    if request.method == 'GET':
        serializer = PricingRuleSerializer(active_rules(), many=True)
        return Response(serializer.data)

    serializer = PricingRuleSerializer(data=request.data)
    if serializer.is_valid():
        rule = serializer.save()
        create_audit_log(request, 'create', 'PricingRule', rule.pk, object_name=str(rule))
        return Response(PricingRuleSerializer(rule).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAdminRole])
def pricing_rule_detail(request, pk):
    """Retrieve, update or delete a pricing rule"""
    rule = get_object_or_404(PricingRule, pk=pk)

    if request.method == 'GET':
        return Response(PricingRuleSerializer(rule).data)
    elif request.method == 'PATCH':
        serializer = PricingRuleSerializer(rule, data=request.data, partial=True)
        if serializer.is_valid():
            rule = serializer.save()
            create_audit_log(request, 'price_change', 'PricingRule', rule.pk,
                             changes={k: str(v) for k, v in serializer.validated_data.items()},
                             object_name=str(rule))
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        create_audit_log(request, 'delete', 'PricingRule', rule.pk, object_name=str(rule))
        rule.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@authentication_classes([OptionalJWTAuthentication])
def pricing_quote(request):
    """Price a custom order from the rules table or the volume tiers"""
    serializer = QuoteRequestSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    quote = calculate_quote(
        product_type=data['product_type'],
        quantity=data['quantity'],
        customization_type=data['customization_type'],
        prints=data['prints'],
    )
    logger.debug(f"Quote for {data['product_type']} x{quote['quantity']}: {quote['total_price']}")
    return Response(quote)
