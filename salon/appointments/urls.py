from django.urls import path

from . import views

app_name = 'appointments'

urlpatterns = [
    path('', views.appointment_list, name='list'),
    path('create/', views.appointment_create, name='create'),
    path('upcoming/', views.upcoming, name='upcoming'),
    path('api/calendar-events/', views.calendar_events, name='calendar-events'),
    path('<int:pk>/', views.appointment_detail, name='detail'),
    path('<int:pk>/reschedule/', views.appointment_reschedule, name='reschedule'),
    path('<int:pk>/confirm/', views.appointment_confirm, name='confirm'),
    path('<int:pk>/complete/', views.appointment_complete, name='complete'),
    path('<int:pk>/cancel/', views.appointment_cancel, name='cancel'),
    path('<int:pk>/no-show/', views.appointment_no_show, name='no-show'),
    path('<int:pk>/receive-payment/', views.appointment_receive_payment, name='receive-payment'),
]
