from django.urls import path

from . import views

app_name = 'analytics'

urlpatterns = [
    path('', views.DashboardView.as_view(), name='dashboard'),
    path('report/', views.PeriodReportView.as_view(), name='period-report'),
    path('alerts/', views.AlertsView.as_view(), name='alerts'),
    path('export/report/', views.ExportPeriodReportView.as_view(), name='export-report'),
]
