from django.urls import path

from . import views

app_name = 'staff'

urlpatterns = [
    path('professionals/', views.professional_list, name='professional-list'),
    path('professionals/create/', views.professional_save, name='professional-create'),
    path('professionals/<int:pk>/edit/', views.professional_save, name='professional-edit'),
    path('professionals/<int:pk>/delete/', views.professional_delete, name='professional-delete'),
]
