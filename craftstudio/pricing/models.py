from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
from decimal import Decimal


class PricingRule(models.Model):
    """Unit price for a product/customization type within a quantity range"""
    product_type = models.CharField(max_length=100, db_index=True)
    customization_type = models.CharField(max_length=100)
    quantity_min = models.PositiveIntegerField()
    quantity_max = models.PositiveIntegerField(null=True, blank=True)
    base_price = models.DecimalField(max_digits=10, decimal_places=2)
    customization_cost = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    discount_percentage = models.DecimalField(
        max_digits=5, decimal_places=2, default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('100'))]
    )
    active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        upper = self.quantity_max if self.quantity_max is not None else '+'
        return f"{self.product_type}/{self.customization_type} {self.quantity_min}-{upper}"

    def matches_quantity(self, quantity):
        if quantity < self.quantity_min:
            return False
        return self.quantity_max is None or quantity <= self.quantity_max

    class Meta:
        db_table = 'pricing_rules'
        ordering = ['product_type', 'quantity_min']
