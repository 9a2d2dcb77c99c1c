from django.urls import path

from . import views

app_name = 'notifications'

urlpatterns = [
    path('history/', views.message_history, name='history'),
    path('history/client/<int:client_id>/', views.client_message_history, name='client-history'),
    path('bulk-send/', views.bulk_message, name='bulk-send'),
    path('automations/run/', views.run_automations, name='run-automations'),
    path('api/stats/', views.message_stats, name='stats-api'),
]
