import logging

from django.db import transaction
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .models import Company, Profile
from .serializers import CompanySerializer, ProfileSerializer, ProfileUpdateSerializer

logger = logging.getLogger(__name__)


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def profile_detail(request):
    """
    Get or update the caller's storefront profile.

    PATCH creates the profile on first use; a company_name links the profile
    to the company of that name, creating it when needed.
    """
    profile = Profile.objects.select_related('company').filter(user=request.user).first()

    if request.method == 'GET':
        if not profile:
            return Response({})
        return Response(ProfileSerializer(profile).data)

    serializer = ProfileUpdateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data

    with transaction.atomic():
        if not profile:
            profile = Profile(user=request.user)
        for field in ('first_name', 'last_name', 'phone'):
            if field in data:
                setattr(profile, field, data[field])

        company_name = (data.get('company_name') or '').strip()
        if company_name:
            company = Company.objects.filter(name=company_name).order_by('id').first()
            if not company:
                company = Company.objects.create(name=company_name)
                logger.info(f"Company created: {company.name} for {request.user.email}")
            profile.company = company
        profile.save()

    return Response(ProfileSerializer(profile).data)


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def company_detail(request):
    """Get or update the company linked to the caller's profile"""
    profile = Profile.objects.select_related('company').filter(user=request.user).first()
    if not profile or not profile.company:
        return Response({'error': 'Not Found'}, status=status.HTTP_404_NOT_FOUND)
    company = profile.company

    if request.method == 'GET':
        return Response(CompanySerializer(company).data)

    serializer = CompanySerializer(company, data=request.data, partial=True)
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
