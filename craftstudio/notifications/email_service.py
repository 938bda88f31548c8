"""
Transactional email through the Resend HTTP API
"""
import logging

import requests
from django.conf import settings

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 10


class EmailNotConfigured(Exception):
    """RESEND_API_KEY is not set"""


class EmailDeliveryError(Exception):
    """Resend rejected the message or could not be reached"""


def send_email(to, subject, text='', html=None, from_email=None):
    """
    Send an email and return the Resend message id.

    Raises EmailNotConfigured without an API key and EmailDeliveryError when
    the request fails.
    """
    if not settings.RESEND_API_KEY:
        raise EmailNotConfigured('Resend not configured')

    recipients = to if isinstance(to, (list, tuple)) else [to]
    payload = {
        'from': from_email or settings.EMAIL_FROM,
        'to': list(recipients),
        'subject': subject,
        'text': text or '',
    }
    if html:
        payload['html'] = html

    try:
        response = requests.post(
            settings.RESEND_API_URL,
            json=payload,
            headers={'Authorization': f'Bearer {settings.RESEND_API_KEY}'},
            timeout=REQUEST_TIMEOUT,
        )
    except requests.exceptions.RequestException as e:
        logger.error(f"Email request failed for {recipients}: {str(e)}")
        raise EmailDeliveryError(str(e)) from e

    if response.status_code >= 400:
        logger.error(f"Resend rejected email to {recipients}: {response.status_code} {response.text[:200]}")
        raise EmailDeliveryError(f'Resend returned {response.status_code}')

    message_id = response.json().get('id')
    logger.info(f"Email sent to {recipients}: {subject} ({message_id})")
    return message_id


def send_email_best_effort(to, subject, text='', html=None):
    """Send a notification; failures are logged and reported as None"""
    try:
        return send_email(to, subject, text=text, html=html)
    except EmailNotConfigured:
        logger.info(f"Email not configured, skipping: {subject}")
    except EmailDeliveryError as e:
        logger.warning(f"Notification email to {to} failed: {str(e)}")
    return None
