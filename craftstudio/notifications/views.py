from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from craftstudio.core.exceptions import ServiceUnavailable
from .email_service import send_email, EmailNotConfigured, EmailDeliveryError


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def send_email_view(request):
    """Send an email through Resend on behalf of the caller"""
    to = request.data.get('to')
    subject = request.data.get('subject')
    if not to or not subject:
        return Response({'error': 'to and subject required'}, status=status.HTTP_400_BAD_REQUEST)

    try:
        message_id = send_email(to, subject, text=request.data.get('text', ''), html=request.data.get('html'))
    except EmailNotConfigured as e:
        raise ServiceUnavailable(str(e), status_code=status.HTTP_503_SERVICE_UNAVAILABLE) from e
    except EmailDeliveryError as e:
        raise ServiceUnavailable(f'Email delivery failed: {e}') from e
    return Response({'ok': True, 'id': message_id})
