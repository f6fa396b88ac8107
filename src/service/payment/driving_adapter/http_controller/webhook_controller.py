"""
Payment provider webhooks.

Providers retry on anything but 2xx, so the status code is the contract:
401 bad signature, 400 malformed, 200 processed or skipped, 500 retry later.
"""

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from src.service.payment.app.command.process_webhook_use_case import ProcessWebhookUseCase
from src.service.payment.app.dto.webhook_result import WebhookResult
from src.service.payment.app.provider.metatickets_provider import MetaTicketsProvider
from src.service.payment.app.provider.paystack_provider import PaystackProvider
from src.service.payment.domain.enum.payment_provider import PaymentProvider
from src.service.payment.domain.enum.webhook_outcome import WebhookOutcome


router = APIRouter()


def to_webhook_response(result: WebhookResult) -> JSONResponse:
    outcome = result.outcome
    if outcome in (WebhookOutcome.PROCESSED, WebhookOutcome.IGNORED):
        return JSONResponse(status_code=status.HTTP_200_OK, content={'received': True})
    if outcome in (WebhookOutcome.DUPLICATE, WebhookOutcome.ALREADY_PROCESSED):
        return JSONResponse(
            status_code=status.HTTP_200_OK, content={'received': True, 'skipped': True}
        )
    if outcome == WebhookOutcome.INVALID_SIGNATURE:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED, content={'error': 'Invalid signature'}
        )
    if outcome == WebhookOutcome.MALFORMED:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={'error': result.reason or 'Malformed payload'},
        )
    if outcome == WebhookOutcome.HANDLER_FAILED:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={'error': 'Processing failed'},
        )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={'error': 'Webhook processing failed'},
    )


@router.post('/paystack')
async def paystack_webhook(
    request: Request,
    use_case: ProcessWebhookUseCase = Depends(ProcessWebhookUseCase.depends),
) -> JSONResponse:
    result = await use_case.process(
        provider=PaymentProvider.PAYSTACK,
        raw_body=await request.body(),
        signature=request.headers.get(PaystackProvider.SIGNATURE_HEADER),
    )
    return to_webhook_response(result)


@router.post('/metatickets')
async def metatickets_webhook(
    request: Request,
    use_case: ProcessWebhookUseCase = Depends(ProcessWebhookUseCase.depends),
) -> JSONResponse:
    result = await use_case.process(
        provider=PaymentProvider.METATICKETS,
        raw_body=await request.body(),
        signature=request.headers.get(MetaTicketsProvider.SIGNATURE_HEADER),
    )
    return to_webhook_response(result)
