# Generated manually for Order, OrderTimeline, ProductionUpdate and Sample models

import craftstudio.orders.models
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('catalog', '0001_initial'),
        ('parties', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Order',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('customer_email', models.EmailField(blank=True, max_length=254)),
                ('customer_name', models.CharField(blank=True, max_length=200)),
                ('company_name', models.CharField(blank=True, max_length=200)),
                ('order_number', models.CharField(max_length=50, unique=True)),
                ('product_category', models.CharField(max_length=100)),
                ('product_name', models.CharField(max_length=200)),
                ('quantity', models.PositiveIntegerField()),
                ('unit_price', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('total_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('deposit_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('balance_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('customization', models.JSONField(blank=True, default=dict)),
                ('colors', models.JSONField(blank=True, default=craftstudio.orders.models.empty_list)),
                ('sizes', models.JSONField(blank=True, default=dict)),
                ('print_locations', models.JSONField(blank=True, default=craftstudio.orders.models.empty_list)),
                ('status', models.CharField(choices=[('submitted', 'Submitted'), ('paid', 'Paid'), ('in_production', 'In Production'), ('shipping', 'Shipping'), ('delivered', 'Delivered')], db_index=True, default='submitted', max_length=20)),
                ('priority', models.CharField(blank=True, max_length=20)),
                ('labels', models.JSONField(blank=True, default=craftstudio.orders.models.empty_list)),
                ('total_paid_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('paid_at', models.DateTimeField(blank=True, null=True)),
                ('shipping_address', models.JSONField(blank=True, default=dict)),
                ('tracking_number', models.CharField(blank=True, max_length=100)),
                ('estimated_delivery', models.DateTimeField(blank=True, null=True)),
                ('actual_delivery', models.DateTimeField(blank=True, null=True)),
                ('artwork_files', models.JSONField(blank=True, default=craftstudio.orders.models.empty_list)),
                ('production_notes', models.TextField(blank=True)),
                ('customer_notes', models.TextField(blank=True)),
                ('admin_notes', models.TextField(blank=True)),
                ('stripe_deposit_payment_intent', models.CharField(blank=True, max_length=255)),
                ('stripe_balance_payment_intent', models.CharField(blank=True, max_length=255)),
                ('mockup_images', models.JSONField(blank=True, default=dict)),
                ('lead_time_snapshot', models.JSONField(blank=True, null=True)),
                ('expected_schedule', models.JSONField(blank=True, null=True)),
                ('estimated_delivery_window', models.JSONField(blank=True, null=True)),
                ('guest_email', models.EmailField(blank=True, db_index=True, max_length=254)),
                ('guest_verified_at', models.DateTimeField(blank=True, null=True)),
                ('access_revoked_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('claimed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='claimed_orders', to=settings.AUTH_USER_MODEL)),
                ('company', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='orders', to='parties.company')),
                ('product', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='orders', to='catalog.product')),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='orders', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'orders',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='OrderTimeline',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('event_type', models.CharField(max_length=50)),
                ('description', models.TextField()),
                ('event_data', models.JSONField(blank=True, default=dict)),
                ('trigger_source', models.CharField(choices=[('manual', 'Manual'), ('system', 'System'), ('webhook', 'Webhook'), ('api', 'API'), ('admin', 'Admin')], default='manual', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('order', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='timeline', to='orders.order')),
                ('triggered_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='order_events', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'order_timeline',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='ProductionUpdate',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('stage', models.CharField(max_length=50)),
                ('status', models.CharField(max_length=50)),
                ('description', models.TextField(blank=True)),
                ('photos', models.JSONField(blank=True, default=craftstudio.orders.models.empty_list)),
                ('documents', models.JSONField(blank=True, default=craftstudio.orders.models.empty_list)),
                ('estimated_completion', models.DateTimeField(blank=True, null=True)),
                ('actual_completion', models.DateTimeField(blank=True, null=True)),
                ('visible_to_customer', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='production_updates', to=settings.AUTH_USER_MODEL)),
                ('order', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='production_updates', to='orders.order')),
            ],
            options={
                'db_table': 'production_updates',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='Sample',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('sample_number', models.CharField(max_length=50, unique=True)),
                ('products', models.JSONField(blank=True, default=craftstudio.orders.models.empty_list)),
                ('total_price', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('status', models.CharField(choices=[('ordered', 'Ordered'), ('processing', 'Processing'), ('shipped', 'Shipped'), ('delivered', 'Delivered'), ('converted_to_order', 'Converted to Order')], default='ordered', max_length=20)),
                ('shipping_address', models.JSONField(blank=True, default=dict)),
                ('tracking_number', models.CharField(blank=True, max_length=100)),
                ('stripe_payment_intent_id', models.CharField(blank=True, max_length=255)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('company', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='samples', to='parties.company')),
                ('converted_order', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='source_samples', to='orders.order')),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='samples', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'samples',
                'ordering': ['-created_at'],
            },
        ),
    ]
