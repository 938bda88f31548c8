from django.urls import path
from .views import send_email_view

urlpatterns = [
    path('emails/send/', send_email_view, name='email-send'),
]
