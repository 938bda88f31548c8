from django.urls import path
from .views import upload_file, order_files

urlpatterns = [
    path('files/upload/', upload_file, name='file-upload'),
    path('files/order/<int:pk>/', order_files, name='order-files'),
]
