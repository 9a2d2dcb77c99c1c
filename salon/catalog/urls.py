from django.urls import path

from . import views

app_name = 'catalog'

urlpatterns = [
    path('services/', views.service_list, name='service-list'),
    path('services/create/', views.service_save, name='service-create'),
    path('services/<int:service_id>/', views.service_detail, name='service-detail'),
    path('services/<int:service_id>/edit/', views.service_save, name='service-edit'),
    path('services/<int:service_id>/delete/', views.service_delete, name='service-delete'),
]
