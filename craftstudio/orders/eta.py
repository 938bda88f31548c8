"""
Delivery estimates from an order's lead-time snapshot.

Production starts when the order is paid (or when it was created, until
then). Each stage's expected end uses the maximum of its range, and the
delivery window spans the summed minimums to the summed maximums. All day
counts are business days in the snapshot's calendar.
"""
import logging
from datetime import timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from django.utils import timezone
from django.utils.dateparse import parse_datetime

logger = logging.getLogger(__name__)

WEEKDAY_INDEX = {'Mon': 0, 'Tue': 1, 'Wed': 2, 'Thu': 3, 'Fri': 4, 'Sat': 5, 'Sun': 6}
STAGE_KEYS = ('in_production', 'shipping')


def _calendar_zone(calendar):
    name = (calendar or {}).get('timezone') or 'UTC'
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown calendar timezone {name!r}, using UTC")
        return ZoneInfo('UTC')


def _working_set(working_days):
    return {WEEKDAY_INDEX[d] for d in working_days or [] if d in WEEKDAY_INDEX}


def add_business_days(start, days, working_days, tz=None):
    """Step forward one calendar day at a time until `days` working days have passed"""
    working = _working_set(working_days)
    tz = tz or ZoneInfo('UTC')
    current = start
    remaining = max(0, int(days))
    if not working:
        return current + timedelta(days=remaining)
    while remaining > 0:
        current = current + timedelta(days=1)
        if current.astimezone(tz).weekday() in working:
            remaining -= 1
    return current


def count_working_days_between(start, end, working_days, tz=None):
    """Working days from start (inclusive) up to end (exclusive)"""
    if end <= start:
        return 0
    working = _working_set(working_days)
    tz = tz or ZoneInfo('UTC')
    current = start
    count = 0
    while current < end:
        if current.astimezone(tz).weekday() in working:
            count += 1
        current = current + timedelta(days=1)
    return count


def compute_expected_schedule(snapshot, created_at, paid_at=None):
    """
    Returns (schedule, delivery_window) with ISO-8601 strings, ready to be
    stored on the order.
    """
    calendar = snapshot['business_calendar']
    working_days = calendar.get('working_days')
    tz = _calendar_zone(calendar)
    production = snapshot['production']
    shipping = snapshot['shipping']

    start = paid_at or created_at
    production_end = add_business_days(start, production['max_days'], working_days, tz)
    shipping_end = add_business_days(production_end, shipping['max_days'], working_days, tz)
    earliest = add_business_days(start, production['min_days'] + shipping['min_days'], working_days, tz)
    latest = add_business_days(start, production['max_days'] + shipping['max_days'], working_days, tz)

    schedule = {
        'in_production': {
            'expected_start_at': start.isoformat(),
            'expected_end_at': production_end.isoformat(),
        },
        'shipping': {
            'expected_start_at': production_end.isoformat(),
            'expected_end_at': shipping_end.isoformat(),
        },
    }
    window = {'start': earliest.isoformat(), 'end': latest.isoformat()}
    return schedule, window


def _stage_statuses(status):
    if status in ('in_production', 'shipping', 'delivered'):
        production = 'done'
    elif status == 'paid':
        production = 'in_progress'
    else:
        production = 'pending'

    if status == 'delivered':
        shipping = 'done'
    elif status == 'shipping':
        shipping = 'in_progress'
    else:
        shipping = 'pending'
    return {'in_production': production, 'shipping': shipping}


def compute_eta(order, snapshot, now=None):
    """ETA payload: per-stage status and timing plus the overall delivery window"""
    now = now or timezone.now()
    calendar = snapshot['business_calendar']
    working_days = calendar.get('working_days')
    tz = _calendar_zone(calendar)

    computed_schedule, window = compute_expected_schedule(snapshot, order.created_at, order.paid_at)
    schedule = order.expected_schedule or computed_schedule
    statuses = _stage_statuses(order.status)

    stages = {}
    stage_ends = {}
    for key in STAGE_KEYS:
        stage = {'status': statuses[key]}
        planned = schedule.get(key) or {}
        start = parse_datetime(planned['expected_start_at']) if planned.get('expected_start_at') else None
        end = parse_datetime(planned['expected_end_at']) if planned.get('expected_end_at') else None
        if start:
            stage['expected_start_at'] = start.isoformat()
        if end:
            stage['expected_end_at'] = end.isoformat()
            stage['remaining_business_days'] = count_working_days_between(now, end, working_days, tz)
        stage_ends[key] = end
        stages[key] = stage

    # Late when the stage currently in progress has passed its expected end
    is_late = False
    days_late = 0
    late_stage = {'paid': 'in_production', 'shipping': 'shipping'}.get(order.status)
    if late_stage and stage_ends.get(late_stage) and now > stage_ends[late_stage]:
        is_late = True
        days_late = count_working_days_between(stage_ends[late_stage], now, working_days, tz)

    delivery_window = order.estimated_delivery_window or window
    return {
        'stages': stages,
        'overall': {
            'delivery_window': {'start': delivery_window['start'], 'end': delivery_window['end']},
            'is_late': is_late,
            'days_late': days_late,
        },
    }
