"""
Global and per-product lead times.

Global defaults live in the `lead_times` Setting; a product may override the
production and/or shipping stage. The business calendar is always global.
"""
from django.utils import timezone

from craftstudio.core.models import Setting

DEFAULT_LEAD_TIMES = {
    'production': {'min_days': 7, 'max_days': 10},
    'shipping': {'min_days': 2, 'max_days': 4},
    'business_calendar': {
        'timezone': 'America/New_York',
        'working_days': ['Mon', 'Tue', 'Wed', 'Thu', 'Fri'],
    },
}

STAGES = ('production', 'shipping')


def get_global_lead_times():
    setting = Setting.objects.filter(key=Setting.LEAD_TIMES_KEY).first()
    stored = (setting.value if setting else None) or {}
    return {
        'production': stored.get('production') or DEFAULT_LEAD_TIMES['production'],
        'shipping': stored.get('shipping') or DEFAULT_LEAD_TIMES['shipping'],
        'business_calendar': stored.get('business_calendar') or DEFAULT_LEAD_TIMES['business_calendar'],
    }


def save_global_lead_times(production, shipping, business_calendar, user=None):
    value = {
        'production': production,
        'shipping': shipping,
        'business_calendar': business_calendar,
        'updated_at': timezone.now().isoformat(),
        'updated_by_user_id': user.pk if user else None,
    }
    setting, _ = Setting.objects.update_or_create(
        key=Setting.LEAD_TIMES_KEY,
        defaults={'value': value, 'description': 'Global production and shipping lead times'},
    )
    return setting.value


def get_effective_lead_times(product):
    """Product override per stage, falling back to the global defaults"""
    global_lead_times = get_global_lead_times()
    override = (product.lead_times if product else None) or {}
    return {
        'production': override.get('production') or global_lead_times['production'],
        'shipping': override.get('shipping') or global_lead_times['shipping'],
        'business_calendar': global_lead_times['business_calendar'],
    }
