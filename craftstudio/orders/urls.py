from django.urls import path
from .views import (
    order_list_create, order_detail, order_payments, order_timeline,
    order_production_updates, order_eta,
    sample_list_create, sample_detail,
)

urlpatterns = [
    # Order endpoints
    path('orders/', order_list_create, name='order-list-create'),
    path('orders/<int:pk>/', order_detail, name='order-detail'),
    path('orders/<int:pk>/payments/', order_payments, name='order-payments'),
    path('orders/<int:pk>/timeline/', order_timeline, name='order-timeline'),
    path('orders/<int:pk>/production-updates/', order_production_updates, name='order-production-updates'),
    path('orders/<int:pk>/eta/', order_eta, name='order-eta'),

    # Sample endpoints
    path('samples/', sample_list_create, name='sample-list-create'),
    path('samples/<int:pk>/', sample_detail, name='sample-detail'),
]
