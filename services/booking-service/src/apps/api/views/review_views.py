# services/booking-service/src/apps/api/views/review_views.py
"""
Review and Provider Stats API Views

Review writes trigger the provider rating recomputation; provider stats
are read-only apart from an on-demand recompute.
"""

import logging

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.models import Review
from apps.core.services import (
    NotFoundError,
    RatingService,
    ReviewNotFoundError,
    ReviewService,
)
from apps.api.serializers import (
    ProviderStatsSerializer,
    ReviewCreateSerializer,
    ReviewSerializer,
    ReviewUpdateSerializer,
)
from shared.common.pagination import StandardPagination
from .base import ServiceExceptionMixin, parse_uuid
from .filters import ReviewFilter

logger = logging.getLogger(__name__)


class ReviewViewSet(ServiceExceptionMixin, viewsets.GenericViewSet):
    """ViewSet for reviews."""

    queryset = Review.objects.all()
    serializer_class = ReviewSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = StandardPagination
    filter_backends = [DjangoFilterBackend]
    filterset_class = ReviewFilter
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.review_service = ReviewService()

    def get_queryset(self):
        return self.review_service.list_reviews()

    def get_serializer_class(self):
        """Return appropriate serializer based on action."""
        if self.action == 'create':
            return ReviewCreateSerializer
        elif self.action == 'partial_update':
            return ReviewUpdateSerializer
        return ReviewSerializer

    def list(self, request, *args, **kwargs):
        """List reviews, newest first."""
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        serializer = ReviewSerializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    def create(self, request, *args, **kwargs):
        """Create a review and refresh the provider rating."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        review = self.review_service.create_review(**serializer.validated_data)
        return Response(ReviewSerializer(review).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None, *args, **kwargs):
        review = self.review_service.get_review(parse_uuid(pk, ReviewNotFoundError))
        return Response(ReviewSerializer(review).data)

    def partial_update(self, request, pk=None, *args, **kwargs):
        """Update rating and/or comment."""
        review_id = parse_uuid(pk, ReviewNotFoundError)
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        review = self.review_service.update_review(review_id, dict(serializer.validated_data))
        return Response(ReviewSerializer(review).data)

    def destroy(self, request, pk=None, *args, **kwargs):
        self.review_service.delete_review(parse_uuid(pk, ReviewNotFoundError))
        return Response(status=status.HTTP_204_NO_CONTENT)


class ProviderStatsView(ServiceExceptionMixin, APIView):
    """Current aggregates of a provider."""

    permission_classes = [IsAuthenticated]

    def get(self, request, provider_id):
        stats = RatingService().get_stats(parse_uuid(provider_id, NotFoundError))
        return Response(ProviderStatsSerializer(stats).data)


class ProviderStatsRecomputeView(ServiceExceptionMixin, APIView):
    """Recompute a provider's aggregates from its reviews and bookings."""

    permission_classes = [IsAuthenticated]

    def post(self, request, provider_id):
        provider_id = parse_uuid(provider_id, NotFoundError)
        stats = RatingService().recompute_all(provider_id)

        logger.info(f"Recomputed stats for provider {provider_id} on request")
        return Response(ProviderStatsSerializer(stats).data)
