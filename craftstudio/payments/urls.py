from django.urls import path
from .views import create_checkout, create_invoice, reconcile_payment, stripe_webhook

urlpatterns = [
    path('payments/create-checkout/', create_checkout, name='payment-create-checkout'),
    path('payments/create-invoice/', create_invoice, name='payment-create-invoice'),
    path('payments/reconcile/', reconcile_payment, name='payment-reconcile'),
    path('webhooks/stripe/', stripe_webhook, name='stripe-webhook'),
]
