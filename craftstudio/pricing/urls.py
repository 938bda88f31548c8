from django.urls import path
from .views import pricing_rule_list_create, pricing_rule_detail, pricing_quote

urlpatterns = [
    # PricingRule endpoints
    path('pricing/', pricing_rule_list_create, name='pricing-rule-list-create'),
    path('pricing/quote/', pricing_quote, name='pricing-quote'),
    path('pricing/<int:pk>/', pricing_rule_detail, name='pricing-rule-detail'),
]
