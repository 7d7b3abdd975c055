# shared/common/pagination.py
"""
Custom Pagination Classes for API responses
"""

import math
from collections import OrderedDict
from typing import Any, Dict, List, Tuple

from rest_framework.exceptions import ValidationError
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class StandardPagination(PageNumberPagination):
    """
    Page number pagination with the list envelope
    {items, page, pageSize, total, totalPages}.

    A page past the end is not an error: it yields no items and the real
    total. `limit` is accepted as an alias of `page_size`.
    """

    page_size = 20
    page_size_query_param = 'page_size'
    page_size_aliases = ('pageSize', 'limit')
    max_page_size = 100
    page_query_param = 'page'

    def get_page_params(self, request) -> Tuple[int, int]:
        """Parse and validate page and page size from the query string."""
        params = request.query_params

        page = self._positive_int(params.get(self.page_query_param), 'page', 1)

        raw_size = params.get(self.page_size_query_param)
        for alias in self.page_size_aliases:
            if raw_size is None:
                raw_size = params.get(alias)
        page_size = self._positive_int(raw_size, 'page_size', self.page_size)

        return page, min(page_size, self.max_page_size)

    def paginate_queryset(self, queryset, request, view=None) -> List[Any]:
        self.request = request
        self.page_number, self.page_size_value = self.get_page_params(request)
        self.total = queryset.count()

        offset = (self.page_number - 1) * self.page_size_value
        if offset >= self.total:
            return []
        return list(queryset[offset:offset + self.page_size_value])

    def get_paginated_response(self, data: Any) -> Response:
        return self.build_response(data, self.total, self.page_number, self.page_size_value)

    @staticmethod
    def build_response(items: Any, total: int, page: int, page_size: int) -> Response:
        return Response(OrderedDict([
            ('items', items),
            ('page', page),
            ('pageSize', page_size),
            ('total', total),
            ('totalPages', math.ceil(total / page_size) if total else 0),
        ]))

    def get_paginated_response_schema(self, schema: Dict) -> Dict:
        return {
            'type': 'object',
            'properties': {
                'items': schema,
                'page': {'type': 'integer', 'example': 1},
                'pageSize': {'type': 'integer', 'example': 20},
                'total': {'type': 'integer', 'example': 100},
                'totalPages': {'type': 'integer', 'example': 5},
            }
        }

    @staticmethod
    def _positive_int(raw, name: str, default: int) -> int:
        if raw in (None, ''):
            return default
        try:
            value = int(raw)
        except (TypeError, ValueError):
            raise ValidationError({name: [f'{name} must be an integer.']})
        if value < 1:
            raise ValidationError({name: [f'{name} must be >= 1.']})
        return value
