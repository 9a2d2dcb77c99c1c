from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path('admin/', admin.site.urls),
    path('clients/', include('salon.clients.urls')),
    path('catalog/', include('salon.catalog.urls')),
    path('staff/', include('salon.staff.urls')),
    path('appointments/', include('salon.appointments.urls')),
    path('finance/', include('salon.finance.urls')),
    path('notifications/', include('salon.notifications.urls')),
    path('analytics/', include('salon.analytics.urls')),
]
