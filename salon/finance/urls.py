from django.urls import path

from . import views

app_name = 'finance'

urlpatterns = [
    path('', views.overview, name='overview'),
    path('receivables/', views.receivable_list, name='receivable-list'),
    path('receivables/create/', views.receivable_create, name='receivable-create'),
    path('receivables/<int:pk>/pay/', views.receivable_pay, name='receivable-pay'),
    path('debtors/', views.debtors, name='debtors'),
    path('payables/', views.payable_list, name='payable-list'),
    path('payables/create/', views.payable_create, name='payable-create'),
    path('payables/<int:pk>/pay/', views.payable_pay, name='payable-pay'),
    path('cash/', views.cash_session_current, name='cash-current'),
    path('cash/open/', views.cash_session_open, name='cash-open'),
    path('cash/<int:pk>/close/', views.cash_session_close, name='cash-close'),
]
