"""
Unit tests for ConditionalResult -> HTTP response mapping
"""

import pytest

from src.service.cache.domain.conditional_result import ConditionalResult
from src.service.cache.driving_adapter.http_controller.conditional_response import (
    to_http_response,
)


@pytest.mark.unit
class TestToHttpResponse:
    def test_hit_is_304_without_body(self) -> None:
        response = to_http_response(ConditionalResult.hit(etag='"abc"'))

        assert response.status_code == 304
        assert response.body == b''
        assert response.headers['ETag'] == '"abc"'
        assert response.headers['X-Cache'] == 'HIT'
        assert response.headers['Cache-Control'] == 'no-cache'

    def test_miss_is_200_with_json_body(self) -> None:
        response = to_http_response(ConditionalResult.miss(etag='"abc"', body=b'{"a":1}'))

        assert response.status_code == 200
        assert response.body == b'{"a":1}'
        assert response.media_type == 'application/json'
        assert response.headers['X-Cache'] == 'MISS'
        assert response.headers['ETag'] == '"abc"'

    def test_revalidated_is_304_marked_miss(self) -> None:
        response = to_http_response(ConditionalResult.revalidated(etag='"abc"'))

        assert response.status_code == 304
        assert response.headers['X-Cache'] == 'MISS'
