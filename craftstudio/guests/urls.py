from django.urls import path
from .views import (
    guest_draft_list_create, guest_draft_detail,
    request_link, verify_link,
    guest_order_list_create, guest_order_detail,
)

urlpatterns = [
    # Guest drafts
    path('guest-drafts/', guest_draft_list_create, name='guest-draft-list-create'),
    path('guest-drafts/<int:pk>/', guest_draft_detail, name='guest-draft-detail'),

    # Magic link auth
    path('guest/auth/request-link/', request_link, name='guest-request-link'),
    path('guest/auth/verify/', verify_link, name='guest-verify-link'),

    # Guest orders
    path('guest/orders/', guest_order_list_create, name='guest-order-list-create'),
    path('guest/orders/<int:pk>/', guest_order_detail, name='guest-order-detail'),
]
