from django.db import models
from craftstudio.core.models import User


class FileUpload(models.Model):
    """Artwork or reference file attached to an order or booking"""
    PURPOSE_CHOICES = [
        ('artwork', 'Artwork'),
        ('tech_pack', 'Tech Pack'),
        ('reference', 'Reference'),
        ('proof', 'Proof'),
        ('final_design', 'Final Design'),
    ]

    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='uploads')
    order = models.ForeignKey('orders.Order', on_delete=models.CASCADE, null=True, blank=True,
                              related_name='uploads')
    booking = models.ForeignKey('bookings.DesignerBooking', on_delete=models.CASCADE, null=True, blank=True,
                                related_name='uploads')
    file_name = models.CharField(max_length=255)
    file_size = models.PositiveBigIntegerField()
    file_type = models.CharField(max_length=100)
    file_url = models.CharField(max_length=500)
    file_purpose = models.CharField(max_length=20, choices=PURPOSE_CHOICES)
    uploaded_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.file_name

    class Meta:
        db_table = 'file_uploads'
        ordering = ['-uploaded_at']
