"""
Validation helpers for lead-time ranges and business calendars
"""
from rest_framework import serializers

WEEKDAYS = ['Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat', 'Sun']
MAX_LEAD_TIME_DAYS = 365


def validate_lead_time_range(value, stage='range'):
    """
    Validate a {"min_days", "max_days"} range.

    Both values must be integers with 0 <= min_days <= max_days <= MAX_LEAD_TIME_DAYS.
    Returns a cleaned dict with only the two keys.
    """
    if not isinstance(value, dict):
        raise serializers.ValidationError(f'{stage} must be an object with min_days and max_days')

    cleaned = {}
    for key in ('min_days', 'max_days'):
        raw = value.get(key)
        # bool is a subclass of int
        if isinstance(raw, bool) or not isinstance(raw, int):
            raise serializers.ValidationError(f'{stage}.{key} must be an integer')
        if raw < 0:
            raise serializers.ValidationError(f'{stage}.{key} must be >= 0')
        if raw > MAX_LEAD_TIME_DAYS:
            raise serializers.ValidationError(f'{stage}.{key} must be <= {MAX_LEAD_TIME_DAYS}')
        cleaned[key] = raw

    if cleaned['min_days'] > cleaned['max_days']:
        raise serializers.ValidationError(f'{stage}.min_days must be <= {stage}.max_days')
    return cleaned


def validate_business_calendar(value):
    if not isinstance(value, dict):
        raise serializers.ValidationError('business_calendar must be an object')

    timezone_name = value.get('timezone')
    if not isinstance(timezone_name, str) or not timezone_name:
        raise serializers.ValidationError('business_calendar.timezone is required')

    working_days = value.get('working_days')
    if not isinstance(working_days, list) or not working_days:
        raise serializers.ValidationError('business_calendar.working_days must be a non-empty list')
    invalid = [d for d in working_days if d not in WEEKDAYS]
    if invalid:
        raise serializers.ValidationError(f'Unknown working days: {", ".join(map(str, invalid))}')

    return {'timezone': timezone_name, 'working_days': working_days}
