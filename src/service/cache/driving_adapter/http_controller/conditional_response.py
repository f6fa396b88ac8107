from fastapi import Response, status

from src.service.cache.domain.conditional_result import ConditionalResult


CACHE_STATUS_HEADER = 'X-Cache'


def to_http_response(result: ConditionalResult) -> Response:
    """
    HIT           -> 304, no body
    MISS          -> 200, JSON body with fresh ETag
    MISS (reval.) -> 304 after recompute (content fallback)

    Always no-cache: clients must revalidate, never reuse silently.
    """
    headers = {
        'Cache-Control': 'no-cache',
        CACHE_STATUS_HEADER: result.cache_status.value,
    }
    if result.etag:
        headers['ETag'] = result.etag

    if result.not_modified:
        return Response(status_code=status.HTTP_304_NOT_MODIFIED, headers=headers)

    return Response(
        content=result.body,
        status_code=status.HTTP_200_OK,
        media_type='application/json',
        headers=headers,
    )
