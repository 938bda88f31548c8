"""
Test suite for Orders module
Tests: order creation, deposit split, status lifecycle, timeline, production updates, ETA and samples
"""
from datetime import datetime
from decimal import Decimal
from zoneinfo import ZoneInfo
from unittest.mock import patch

from django.test import TestCase
from rest_framework import status
from craftstudio.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from craftstudio.core.models import AuditLog
from craftstudio.orders.eta import add_business_days, count_working_days_between, compute_expected_schedule, \
    compute_eta
from craftstudio.orders.models import Order, OrderTimeline, ProductionUpdate, Sample
from craftstudio.orders.services import split_deposit, to_cents, change_order_status, generate_order_number
from craftstudio.payments.models import Payment

UTC = ZoneInfo('UTC')
WEEKDAYS = ['Mon', 'Tue', 'Wed', 'Thu', 'Fri']


def snapshot(production=(2, 3), shipping=(1, 2), tz='UTC'):
    return {
        'production': {'min_days': production[0], 'max_days': production[1]},
        'shipping': {'min_days': shipping[0], 'max_days': shipping[1]},
        'business_calendar': {'timezone': tz, 'working_days': WEEKDAYS},
    }


class OrderServiceTests(TestCase):
    """Test order service helpers"""

    def test_split_deposit(self):
        self.assertEqual(split_deposit(Decimal('1000')), (Decimal('400.00'), Decimal('600.00')))
        self.assertEqual(split_deposit(Decimal('333.33')), (Decimal('133.33'), Decimal('200.00')))
        self.assertEqual(split_deposit(Decimal('0.05')), (Decimal('0.02'), Decimal('0.03')))

    def test_to_cents(self):
        self.assertEqual(to_cents(Decimal('133.33')), 13333)
        self.assertEqual(to_cents(Decimal('0.005')), 1)

    def test_order_number_format(self):
        self.assertTrue(generate_order_number().startswith('ORD-'))

    def test_create_order_builds_payments_and_snapshot(self):
        """Test a new order gets two payment rows, a snapshot and a schedule"""
        user = TestDataFactory.create_user(company_name='Acme')
        order = TestDataFactory.create_order(user=user, total_amount=Decimal('1000.00'))
        self.assertEqual(order.status, Order.STATUS_SUBMITTED)
        self.assertEqual(order.deposit_amount, Decimal('400.00'))
        self.assertEqual(order.balance_amount, Decimal('600.00'))
        self.assertEqual(order.customer_email, user.email)
        self.assertEqual(order.company_name, 'Acme')
        payments = {p.phase: p.amount_cents for p in order.payments.all()}
        self.assertEqual(payments, {'deposit': 40000, 'balance': 60000})
        self.assertIn('captured_at', order.lead_time_snapshot)
        self.assertIn('in_production', order.expected_schedule)
        self.assertIn('start', order.estimated_delivery_window)
        self.assertTrue(order.timeline.filter(event_type='created').exists())

    def test_product_override_captured_in_snapshot(self):
        product = TestDataFactory.create_product(lead_times={'production': {'min_days': 1, 'max_days': 1}})
        order = TestDataFactory.create_order(product=product)
        self.assertEqual(order.lead_time_snapshot['production'], {'min_days': 1, 'max_days': 1})

    def test_change_status_forward_only(self):
        order = TestDataFactory.create_order()
        self.assertFalse(change_order_status(order, 'submitted'))
        self.assertTrue(change_order_status(order, 'paid', notify=False))
        self.assertIsNotNone(order.paid_at)
        with self.assertRaises(ValueError):
            change_order_status(order, 'submitted', notify=False)
        with self.assertRaises(ValueError):
            change_order_status(order, 'cancelled', notify=False)

    def test_delivered_sets_actual_delivery(self):
        order = TestDataFactory.create_order()
        change_order_status(order, 'delivered', notify=False)
        self.assertIsNotNone(order.actual_delivery)


class BusinessDayTests(TestCase):
    """Test business-day arithmetic"""

    def test_add_business_days_skips_weekend(self):
        friday = datetime(2026, 1, 2, 12, 0, tzinfo=UTC)
        self.assertEqual(add_business_days(friday, 1, WEEKDAYS, UTC), datetime(2026, 1, 5, 12, 0, tzinfo=UTC))
        self.assertEqual(add_business_days(friday, 0, WEEKDAYS, UTC), friday)

    def test_weekdays_use_calendar_timezone(self):
        """Test Friday evening in New York is already Saturday in UTC"""
        start = datetime(2026, 1, 3, 4, 0, tzinfo=UTC)
        self.assertEqual(add_business_days(start, 1, WEEKDAYS, UTC), datetime(2026, 1, 5, 4, 0, tzinfo=UTC))
        self.assertEqual(add_business_days(start, 1, WEEKDAYS, ZoneInfo('America/New_York')),
                         datetime(2026, 1, 6, 4, 0, tzinfo=UTC))

    def test_empty_working_days_counts_calendar_days(self):
        friday = datetime(2026, 1, 2, 12, 0, tzinfo=UTC)
        self.assertEqual(add_business_days(friday, 2, [], UTC), datetime(2026, 1, 4, 12, 0, tzinfo=UTC))

    def test_count_working_days_between(self):
        thursday = datetime(2026, 1, 8, 12, 0, tzinfo=UTC)
        monday = datetime(2026, 1, 12, 12, 0, tzinfo=UTC)
        self.assertEqual(count_working_days_between(thursday, monday, WEEKDAYS, UTC), 2)
        self.assertEqual(count_working_days_between(monday, thursday, WEEKDAYS, UTC), 0)


class ScheduleAndEtaTests(TestCase):
    """Test the expected schedule and the ETA payload"""

    def setUp(self):
        self.monday = datetime(2026, 1, 5, 12, 0, tzinfo=UTC)

    def test_expected_schedule(self):
        schedule, window = compute_expected_schedule(snapshot(), self.monday)
        self.assertEqual(schedule['in_production']['expected_start_at'], self.monday.isoformat())
        self.assertEqual(schedule['in_production']['expected_end_at'],
                         datetime(2026, 1, 8, 12, 0, tzinfo=UTC).isoformat())
        self.assertEqual(schedule['shipping']['expected_end_at'],
                         datetime(2026, 1, 12, 12, 0, tzinfo=UTC).isoformat())
        self.assertEqual(window, {
            'start': datetime(2026, 1, 8, 12, 0, tzinfo=UTC).isoformat(),
            'end': datetime(2026, 1, 12, 12, 0, tzinfo=UTC).isoformat(),
        })

    def test_schedule_starts_at_payment(self):
        paid = datetime(2026, 1, 7, 12, 0, tzinfo=UTC)
        schedule, _ = compute_expected_schedule(snapshot(), self.monday, paid)
        self.assertEqual(schedule['in_production']['expected_start_at'], paid.isoformat())

    def test_eta_late_in_production(self):
        """Test a paid order past its production end is late"""
        order = Order(status='paid', created_at=self.monday, paid_at=self.monday)
        eta = compute_eta(order, snapshot(), now=datetime(2026, 1, 12, 12, 0, tzinfo=UTC))
        self.assertEqual(eta['stages']['in_production']['status'], 'in_progress')
        self.assertEqual(eta['stages']['shipping']['status'], 'pending')
        self.assertEqual(eta['stages']['shipping']['remaining_business_days'], 0)
        self.assertTrue(eta['overall']['is_late'])
        self.assertEqual(eta['overall']['days_late'], 2)

    def test_eta_on_time(self):
        order = Order(status='submitted', created_at=self.monday)
        eta = compute_eta(order, snapshot(), now=self.monday)
        self.assertFalse(eta['overall']['is_late'])
        self.assertEqual(eta['stages']['in_production']['status'], 'pending')
        self.assertEqual(eta['stages']['in_production']['remaining_business_days'], 3)

    def test_stored_window_preferred(self):
        stored = {'start': '2030-01-01T00:00:00+00:00', 'end': '2030-01-02T00:00:00+00:00'}
        order = Order(status='delivered', created_at=self.monday, estimated_delivery_window=stored)
        eta = compute_eta(order, snapshot(), now=self.monday)
        self.assertEqual(eta['overall']['delivery_window'], stored)
        self.assertEqual(eta['stages']['shipping']['status'], 'done')


class OrderAPITests(TestCase):
    """Test Order API endpoints"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.customer = TestDataFactory.create_user()
        self.other = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.customer)

    def test_orders_require_auth(self):
        self.client.logout()
        response = self.client.get('/api/orders/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_create_order(self):
        """Test total defaults to unit price times quantity"""
        response = self.client.post('/api/orders/', {
            'product_category': 't-shirts', 'product_name': 'Classic Tee', 'quantity': 100, 'unit_price': '10.00',
            'colors': ['Black'], 'sizes': {'M': 50, 'L': 50},
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'submitted')
        self.assertEqual(response.data['total_amount'], Decimal('1000.00'))
        self.assertEqual(response.data['deposit_amount'], Decimal('400.00'))
        self.assertEqual(response.data['user_id'], self.customer.id)
        self.assertTrue(response.data['order_number'].startswith('ORD-'))
        self.assertEqual(Payment.objects.filter(order_id=response.data['id']).count(), 2)

    def test_create_order_with_product(self):
        product = TestDataFactory.create_product()
        response = self.client.post('/api/orders/', {
            'product_category': 't-shirts', 'product_name': product.name, 'quantity': 50,
            'total_amount': '500.00', 'product_id': product.id,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['product_id'], product.id)

    def test_create_order_invalid_quantity(self):
        response = self.client.post('/api/orders/', {
            'product_category': 't-shirts', 'product_name': 'Tee', 'quantity': 0
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_visible_orders(self):
        """Test customers see own and claimed orders, admins see all"""
        own = TestDataFactory.create_order(user=self.customer)
        claimed = TestDataFactory.create_guest_order(email='guest@test.com')
        claimed.claimed_by = self.customer
        claimed.save()
        TestDataFactory.create_order(user=self.other)

        response = self.client.get('/api/orders/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual({o['id'] for o in response.data}, {own.id, claimed.id})

        self.client.authenticate_user(self.admin)
        self.assertEqual(len(self.client.get('/api/orders/').data), 3)

    def test_list_status_filter(self):
        order = TestDataFactory.create_order(user=self.customer)
        TestDataFactory.create_order(user=self.customer)
        Order.objects.filter(pk=order.pk).update(status='paid')
        response = self.client.get('/api/orders/', {'status': 'paid'})
        self.assertEqual([o['id'] for o in response.data], [order.id])

    def test_other_users_order_not_found(self):
        order = TestDataFactory.create_order(user=self.other)
        response = self.client.get(f'/api/orders/{order.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data, {'error': 'Not Found'})

    def test_customer_cannot_update(self):
        order = TestDataFactory.create_order(user=self.customer)
        response = self.client.patch(f'/api/orders/{order.id}/', {'status': 'paid'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_status_change(self):
        """Test a status change stamps paid_at, adds a timeline event and is audited"""
        order = TestDataFactory.create_order(user=self.customer)
        self.client.authenticate_user(self.admin)
        response = self.client.patch(f'/api/orders/{order.id}/',
                                     {'status': 'paid', 'tracking_number': '1Z999'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        order.refresh_from_db()
        self.assertEqual(order.status, 'paid')
        self.assertEqual(order.tracking_number, '1Z999')
        self.assertIsNotNone(order.paid_at)
        event = OrderTimeline.objects.get(order=order, event_type='status_changed')
        self.assertEqual(event.event_data, {'from': 'submitted', 'to': 'paid'})
        self.assertEqual(event.triggered_by, self.admin)
        log = AuditLog.objects.get(action='status_change', object_id=str(order.id))
        self.assertEqual(log.changes['status'], {'old': 'submitted', 'new': 'paid'})

    def test_admin_backward_status_rejected(self):
        """Test moving backwards fails and leaves the order untouched"""
        order = TestDataFactory.create_order(user=self.customer)
        Order.objects.filter(pk=order.pk).update(status='shipping')
        self.client.authenticate_user(self.admin)
        response = self.client.patch(f'/api/orders/{order.id}/',
                                     {'status': 'paid', 'admin_notes': 'oops'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        order.refresh_from_db()
        self.assertEqual(order.status, 'shipping')
        self.assertEqual(order.admin_notes, '')

    def test_admin_invalid_status(self):
        order = TestDataFactory.create_order(user=self.customer)
        self.client.authenticate_user(self.admin)
        response = self.client.patch(f'/api/orders/{order.id}/', {'status': 'lost'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_order_payments(self):
        order = TestDataFactory.create_order(user=self.customer, total_amount=Decimal('250.00'))
        response = self.client.get(f'/api/orders/{order.id}/payments/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual({p['phase']: p['amount_cents'] for p in response.data},
                         {'deposit': 10000, 'balance': 15000})


class OrderTimelineAPITests(TestCase):
    """Test timeline and production update endpoints"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.customer = TestDataFactory.create_user()
        self.order = TestDataFactory.create_order(user=self.customer)
        self.client = AuthenticatedAPIClient()

    def test_customer_reads_timeline(self):
        self.client.authenticate_user(self.customer)
        response = self.client.get(f'/api/orders/{self.order.id}/timeline/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[0]['event_type'], 'created')

    def test_admin_adds_manual_event(self):
        self.client.authenticate_user(self.admin)
        response = self.client.post(f'/api/orders/{self.order.id}/timeline/',
                                    {'event_type': 'note', 'description': 'Called customer'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['trigger_source'], 'manual')
        self.assertEqual(response.data['triggered_by_id'], self.admin.id)

    def test_customer_cannot_add_event(self):
        self.client.authenticate_user(self.customer)
        response = self.client.post(f'/api/orders/{self.order.id}/timeline/',
                                    {'event_type': 'note', 'description': 'x'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_production_updates_visibility(self):
        """Test hidden updates are admin-only"""
        self.client.authenticate_user(self.admin)
        response = self.client.post(f'/api/orders/{self.order.id}/production-updates/',
                                    {'stage': 'printing', 'status': 'started'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(self.order.timeline.filter(event_type='production_update').exists())
        ProductionUpdate.objects.create(order=self.order, stage='qc', status='failed', visible_to_customer=False)

        self.assertEqual(len(self.client.get(f'/api/orders/{self.order.id}/production-updates/').data), 2)
        self.client.authenticate_user(self.customer)
        response = self.client.get(f'/api/orders/{self.order.id}/production-updates/')
        self.assertEqual([u['stage'] for u in response.data], ['printing'])

    def test_order_eta(self):
        self.client.authenticate_user(self.customer)
        response = self.client.get(f'/api/orders/{self.order.id}/eta/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('in_production', response.data['stages'])
        self.assertFalse(response.data['overall']['is_late'])

    def test_order_eta_captures_missing_snapshot(self):
        Order.objects.filter(pk=self.order.pk).update(lead_time_snapshot=None)
        self.client.authenticate_user(self.customer)
        response = self.client.get(f'/api/orders/{self.order.id}/eta/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.order.refresh_from_db()
        self.assertIsNotNone(self.order.lead_time_snapshot)


@patch('craftstudio.orders.services.send_email_best_effort')
class OrderNotificationTests(TestCase):
    """Test customer emails queued on order creation, production updates and completion"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.customer = TestDataFactory.create_user(email='buyer@test.com')
        self.client = AuthenticatedAPIClient()

    def test_order_created_email(self, mock_send):
        with self.captureOnCommitCallbacks(execute=True):
            order = TestDataFactory.create_order(user=self.customer, total_amount=Decimal('1000.00'))
        mock_send.assert_called_once()
        to, subject, text, _ = mock_send.call_args.args
        self.assertEqual(to, 'buyer@test.com')
        self.assertEqual(subject, f'Order confirmation - {order.order_number}')
        self.assertIn('Deposit required: $400.00', text)

    def test_production_update_email(self, mock_send):
        """Test only updates visible to the customer are emailed"""
        order = TestDataFactory.create_order(user=self.customer)
        self.client.authenticate_user(self.admin)
        with self.captureOnCommitCallbacks(execute=True):
            self.client.post(f'/api/orders/{order.id}/production-updates/',
                             {'stage': 'printing', 'status': 'started', 'description': 'Screens are burned'},
                             format='json')
        mock_send.assert_called_once()
        self.assertEqual(mock_send.call_args.args[1], f'Production update - {order.order_number}')
        self.assertIn('Screens are burned', mock_send.call_args.args[2])

        mock_send.reset_mock()
        with self.captureOnCommitCallbacks(execute=True):
            self.client.post(f'/api/orders/{order.id}/production-updates/',
                             {'stage': 'qc', 'status': 'failed', 'visible_to_customer': False}, format='json')
        mock_send.assert_not_called()

    def test_order_completed_email(self, mock_send):
        order = TestDataFactory.create_order(user=self.customer)
        Order.objects.filter(pk=order.pk).update(status=Order.STATUS_SHIPPING)
        order.refresh_from_db()
        with self.captureOnCommitCallbacks(execute=True):
            change_order_status(order, Order.STATUS_DELIVERED)
            order.save()
        mock_send.assert_called_once()
        self.assertEqual(mock_send.call_args.args[1], f'Order completed - {order.order_number}')

    def test_other_status_changes_use_status_email(self, mock_send):
        order = TestDataFactory.create_order(user=self.customer)
        with self.captureOnCommitCallbacks(execute=True):
            change_order_status(order, Order.STATUS_PAID)
            order.save()
        self.assertEqual(mock_send.call_args.args[1], f'Order {order.order_number} is now paid')


class SampleAPITests(TestCase):
    """Test Sample API endpoints"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.customer = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.customer)

    def test_create_sample(self):
        response = self.client.post('/api/samples/', {
            'products': [{'product_id': 1, 'color': 'Black', 'size': 'L'}], 'total_price': '25.00'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['sample_number'].startswith('SMPL-'))
        self.assertEqual(response.data['status'], 'ordered')
        self.assertEqual(response.data['user_id'], self.customer.id)

    def test_products_must_be_list(self):
        response = self.client.post('/api/samples/', {'products': {'a': 1}}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_only_own_samples(self):
        mine = TestDataFactory.create_sample(self.customer)
        TestDataFactory.create_sample(TestDataFactory.create_user())
        response = self.client.get('/api/samples/')
        self.assertEqual([s['id'] for s in response.data], [mine.id])

    def test_other_users_sample_not_found(self):
        sample = TestDataFactory.create_sample(TestDataFactory.create_user())
        response = self.client.get(f'/api/samples/{sample.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_status_change_admin_only(self):
        sample = TestDataFactory.create_sample(self.customer)
        response = self.client.patch(f'/api/samples/{sample.id}/', {'status': 'shipped'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.authenticate_user(self.admin)
        response = self.client.patch(f'/api/samples/{sample.id}/', {'status': 'shipped'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Sample.objects.get(pk=sample.id).status, 'shipped')

    def test_fulfilment_fields_admin_only(self):
        """Test owners cannot relink, reprice or set tracking on their sample"""
        sample = TestDataFactory.create_sample(self.customer)
        other_order = TestDataFactory.create_order(user=TestDataFactory.create_user())
        for payload in ({'converted_order': other_order.id}, {'total_price': '0.00'},
                        {'tracking_number': '1Z999'}):
            response = self.client.patch(f'/api/samples/{sample.id}/', payload, format='json')
            self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        sample.refresh_from_db()
        self.assertIsNone(sample.converted_order_id)
        self.assertEqual(sample.total_price, Decimal('25.00'))
        self.assertEqual(sample.tracking_number, '')

        response = self.client.patch(f'/api/samples/{sample.id}/', {'shipping_address': {'city': 'Austin'}},
                                     format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        self.client.authenticate_user(self.admin)
        response = self.client.patch(f'/api/samples/{sample.id}/',
                                     {'tracking_number': '1Z999', 'converted_order': other_order.id},
                                     format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['converted_order'], other_order.id)

    def test_create_ignores_fulfilment_fields(self):
        other_order = TestDataFactory.create_order(user=TestDataFactory.create_user())
        response = self.client.post('/api/samples/', {
            'products': [], 'converted_order': other_order.id, 'tracking_number': '1Z999'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIsNone(response.data['converted_order'])
        self.assertEqual(response.data['tracking_number'], '')
