# Generated manually for Product and ProductVariant models

import craftstudio.catalog.models
import django.core.validators
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Product',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(db_index=True, max_length=200)),
                ('category', models.CharField(db_index=True, max_length=100)),
                ('base_price', models.DecimalField(decimal_places=2, max_digits=10)),
                ('description', models.TextField(blank=True)),
                ('image_url', models.URLField(blank=True, max_length=500)),
                ('images', models.JSONField(blank=True, default=craftstudio.catalog.models.empty_list)),
                ('materials', models.JSONField(blank=True, default=craftstudio.catalog.models.empty_list)),
                ('colors', models.JSONField(blank=True, default=craftstudio.catalog.models.empty_list)),
                ('sizes', models.JSONField(blank=True, default=craftstudio.catalog.models.empty_list)),
                ('minimum_quantity', models.PositiveIntegerField(default=25)),
                ('moq', models.PositiveIntegerField(default=50)),
                ('specifications', models.JSONField(blank=True, default=dict)),
                ('active', models.BooleanField(db_index=True, default=True)),
                ('lead_times', models.JSONField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'products',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='ProductVariant',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('color_name', models.CharField(max_length=100)),
                ('color_hex', models.CharField(default='#000000', max_length=7, validators=[craftstudio.catalog.models.color_hex_validator])),
                ('stock', models.IntegerField(default=0, validators=[django.core.validators.MinValueValidator(0)])),
                ('price', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('image_url', models.URLField(blank=True, max_length=500, null=True)),
                ('front_image_url', models.URLField(blank=True, max_length=500, null=True)),
                ('back_image_url', models.URLField(blank=True, max_length=500, null=True)),
                ('sleeve_image_url', models.URLField(blank=True, max_length=500, null=True)),
                ('active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='variants', to='catalog.product')),
            ],
            options={
                'db_table': 'product_variants',
                'ordering': ['color_name'],
                'indexes': [models.Index(fields=['product', 'color_name'], name='idx_variant_product_color')],
            },
        ),
    ]
