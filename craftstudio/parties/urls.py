from django.urls import path
from .views import profile_detail, company_detail

urlpatterns = [
    path('profile/', profile_detail, name='profile-detail'),
    path('company/', company_detail, name='company-detail'),
]
