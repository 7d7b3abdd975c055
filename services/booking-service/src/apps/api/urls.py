# services/booking-service/src/apps/api/urls.py
"""
Booking API URL Configuration

Defines all API routes for the booking service.
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import (
    BookingViewSet,
    ReviewViewSet,
    ProviderStatsView,
    ProviderStatsRecomputeView,
)

app_name = 'api'

# Create router and register viewsets
router = DefaultRouter()
router.register(r'bookings', BookingViewSet, basename='booking')
router.register(r'reviews', ReviewViewSet, basename='review')

urlpatterns = [
    # Router URLs
    path('', include(router.urls)),

    # Provider aggregates
    path(
        'providers/<str:provider_id>/stats/',
        ProviderStatsView.as_view(),
        name='provider-stats'
    ),
    path(
        'providers/<str:provider_id>/stats/recompute/',
        ProviderStatsRecomputeView.as_view(),
        name='provider-stats-recompute'
    ),
]
