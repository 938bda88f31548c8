"""
Order creation and lifecycle changes shared by the customer, guest, admin and
webhook entry points.
"""
import logging
import secrets
import time
from decimal import Decimal, ROUND_HALF_UP

from django.db import transaction
from django.utils import timezone

from craftstudio.catalog.lead_times import get_effective_lead_times
from craftstudio.notifications.email_service import send_email_best_effort
from craftstudio.notifications.templates import order_created_email, order_status_email, order_completed_email
from craftstudio.payments.models import Payment
from .eta import compute_expected_schedule
from .models import Order, OrderTimeline, Sample

logger = logging.getLogger(__name__)

DEPOSIT_RATE = Decimal('0.40')
CENT = Decimal('0.01')


def _unique_number(prefix, model, field):
    number = f"{prefix}-{int(time.time() * 1000)}"
    while model.objects.filter(**{field: number}).exists():
        number = f"{prefix}-{int(time.time() * 1000)}-{secrets.token_hex(2).upper()}"
    return number


def generate_order_number():
    return _unique_number('ORD', Order, 'order_number')


def generate_sample_number():
    return _unique_number('SMPL', Sample, 'sample_number')


def split_deposit(total_amount):
    """40% deposit rounded to cents; the balance is the remainder"""
    total = Decimal(total_amount).quantize(CENT, rounding=ROUND_HALF_UP)
    deposit = (total * DEPOSIT_RATE).quantize(CENT, rounding=ROUND_HALF_UP)
    return deposit, total - deposit


def to_cents(amount):
    return int((Decimal(amount) * 100).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def capture_lead_time_snapshot(product=None):
    snapshot = get_effective_lead_times(product)
    snapshot['captured_at'] = timezone.now().isoformat()
    return snapshot


def apply_expected_schedule(order):
    """Recompute the expected schedule and delivery window from the snapshot"""
    if not order.lead_time_snapshot:
        order.lead_time_snapshot = capture_lead_time_snapshot(order.product)
    schedule, window = compute_expected_schedule(order.lead_time_snapshot, order.created_at, order.paid_at)
    order.expected_schedule = schedule
    order.estimated_delivery_window = window
    return order


def log_timeline(order, event_type, description, event_data=None, trigger_source='system', triggered_by=None):
    return OrderTimeline.objects.create(
        order=order,
        event_type=event_type,
        description=description,
        event_data=event_data or {},
        trigger_source=trigger_source,
        triggered_by=triggered_by if triggered_by and triggered_by.is_authenticated else None,
    )


def notify_customer(order, subject, text, html):
    """Queue a best-effort email to the order's contact once the transaction commits"""
    email = order.notification_email
    if email:
        transaction.on_commit(lambda: send_email_best_effort(email, subject, text, html))


@transaction.atomic
def create_order(data, user=None, trigger_source='api'):
    """
    Create an order with its deposit/balance payment rows, lead-time snapshot
    and expected schedule.

    `data` holds validated order fields; total_amount defaults to
    unit_price * quantity.
    """
    data = dict(data)
    quantity = data.get('quantity') or 1
    unit_price = Decimal(data.get('unit_price') or 0)
    total_amount = data.pop('total_amount', None)
    if total_amount is None:
        total_amount = unit_price * quantity
    deposit, balance = split_deposit(total_amount)

    order = Order(
        order_number=generate_order_number(),
        user=user if user and user.is_authenticated else None,
        total_amount=Decimal(total_amount).quantize(CENT, rounding=ROUND_HALF_UP),
        deposit_amount=deposit,
        balance_amount=balance,
        status=Order.STATUS_SUBMITTED,
        **data,
    )
    if order.user:
        order.customer_email = order.customer_email or order.user.email
        order.customer_name = order.customer_name or order.user.full_name
        order.company_name = order.company_name or order.user.company_name
    order.lead_time_snapshot = capture_lead_time_snapshot(order.product)
    order.save()

    # created_at is only known after the first save
    apply_expected_schedule(order)
    order.save(update_fields=['lead_time_snapshot', 'expected_schedule', 'estimated_delivery_window', 'updated_at'])

    Payment.objects.bulk_create([
        Payment(order=order, phase=Payment.PHASE_DEPOSIT, amount_cents=to_cents(deposit), currency='usd'),
        Payment(order=order, phase=Payment.PHASE_BALANCE, amount_cents=to_cents(balance), currency='usd'),
    ])

    log_timeline(order, 'created', f'Order {order.order_number} created',
                 event_data={'total_amount': str(order.total_amount), 'deposit_amount': str(deposit)},
                 trigger_source=trigger_source, triggered_by=user)
    notify_customer(order, *order_created_email(order))
    logger.info(f"Order created: {order.order_number} total={order.total_amount} deposit={deposit}")
    return order


def change_order_status(order, new_status, user=None, trigger_source='admin', notify=True):
    """
    Move an order forward in its lifecycle.

    Raises ValueError for a backward or unknown status. Callers save the order.
    """
    old_status = order.status
    if new_status == old_status:
        return False
    if not order.can_transition_to(new_status):
        raise ValueError(f"Cannot change status from {old_status} to {new_status}")

    now = timezone.now()
    order.status = new_status
    if new_status == Order.STATUS_PAID and not order.paid_at:
        order.paid_at = now
        apply_expected_schedule(order)
    if new_status == Order.STATUS_DELIVERED:
        order.actual_delivery = now

    log_timeline(order, 'status_changed', f'Status changed from {old_status} to {new_status}',
                 event_data={'from': old_status, 'to': new_status},
                 trigger_source=trigger_source, triggered_by=user)
    logger.info(f"Order {order.order_number} status: {old_status} -> {new_status}")

    if notify:
        if new_status == Order.STATUS_DELIVERED:
            notify_customer(order, *order_completed_email(order))
        else:
            notify_customer(order, *order_status_email(order, old_status, new_status))
    return True
