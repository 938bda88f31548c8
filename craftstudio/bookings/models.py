from django.db import models
from craftstudio.core.models import User


def empty_list():
    return []


class DesignerBooking(models.Model):
    """Paid consultation with a studio designer"""
    STATUS_CHOICES = [
        ('scheduled', 'Scheduled'),
        ('confirmed', 'Confirmed'),
        ('in_progress', 'In Progress'),
        ('completed', 'Completed'),
        ('cancelled', 'Cancelled'),
        ('rescheduled', 'Rescheduled'),
    ]

    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='bookings')
    company = models.ForeignKey('parties.Company', on_delete=models.SET_NULL, null=True, blank=True,
                                related_name='bookings')
    designer_id = models.CharField(max_length=100)
    consultation_type = models.CharField(max_length=100)
    scheduled_date = models.DateTimeField()
    duration_minutes = models.PositiveIntegerField(default=60)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='scheduled', db_index=True)
    price = models.DecimalField(max_digits=10, decimal_places=2)
    meeting_link = models.URLField(max_length=500, blank=True)
    notes = models.TextField(blank=True)
    project_files = models.JSONField(default=empty_list, blank=True)
    stripe_payment_intent_id = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.consultation_type} with {self.designer_id} on {self.scheduled_date:%Y-%m-%d}"

    class Meta:
        db_table = 'designer_bookings'
        ordering = ['-created_at']
