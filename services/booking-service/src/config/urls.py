# services/booking-service/src/config/urls.py
"""
Booking Service URL Configuration
"""

from django.urls import path, include

from shared.common.health import get_health_urlpatterns

urlpatterns = [
    path('api/v1/', include('apps.api.urls', namespace='api')),
] + get_health_urlpatterns()
