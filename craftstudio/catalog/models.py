from django.core.validators import MinValueValidator, RegexValidator
from django.db import models
from decimal import Decimal


def empty_list():
    return []


color_hex_validator = RegexValidator(
    regex=r'^#[0-9A-Fa-f]{6}$',
    message='Color must be a hex value like #1A2B3C',
)


class Product(models.Model):
    """Blank garment offered in the storefront catalog"""
    name = models.CharField(max_length=200, db_index=True)
    category = models.CharField(max_length=100, db_index=True)
    base_price = models.DecimalField(max_digits=10, decimal_places=2)
    description = models.TextField(blank=True)
    image_url = models.URLField(max_length=500, blank=True)
    images = models.JSONField(default=empty_list, blank=True)
    materials = models.JSONField(default=empty_list, blank=True)
    colors = models.JSONField(default=empty_list, blank=True)
    sizes = models.JSONField(default=empty_list, blank=True)
    minimum_quantity = models.PositiveIntegerField(default=25)
    moq = models.PositiveIntegerField(default=50)
    specifications = models.JSONField(default=dict, blank=True)
    active = models.BooleanField(default=True, db_index=True)
    # {"production": {"min_days", "max_days"}, "shipping": {...}}; null means use global defaults
    lead_times = models.JSONField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    @property
    def total_stock(self):
        return sum(v.stock for v in self.variants.all())

    class Meta:
        db_table = 'products'
        ordering = ['-created_at']


class ProductVariant(models.Model):
    """A color of a product with its own stock and mockup images"""
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='variants')
    color_name = models.CharField(max_length=100)
    color_hex = models.CharField(max_length=7, default='#000000', validators=[color_hex_validator])
    stock = models.IntegerField(default=0, validators=[MinValueValidator(0)])
    price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    image_url = models.URLField(max_length=500, null=True, blank=True)
    front_image_url = models.URLField(max_length=500, null=True, blank=True)
    back_image_url = models.URLField(max_length=500, null=True, blank=True)
    sleeve_image_url = models.URLField(max_length=500, null=True, blank=True)
    active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.product.name} - {self.color_name}"

    def effective_price(self):
        return self.price if self.price is not None else self.product.base_price or Decimal('0.00')

    class Meta:
        db_table = 'product_variants'
        ordering = ['color_name']
        indexes = [
            models.Index(fields=['product', 'color_name'], name='idx_variant_product_color'),
        ]
