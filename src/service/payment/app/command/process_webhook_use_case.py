from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.exception.exceptions import (
    AlreadyProcessedError,
    BackendUnavailableError,
    HandlerFailureError,
    MalformedPayloadError,
    SignatureInvalidError,
)
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.service.payment.app.dto.webhook_result import WebhookResult
from src.service.payment.app.interface.i_payment_effect_handler import IPaymentEffectHandler
from src.service.payment.app.interface.i_webhook_event_repo import IWebhookEventRepo
from src.service.payment.app.provider.webhook_provider import WebhookProvider
from src.service.payment.app.provider.webhook_provider_registry import WebhookProviderRegistry
from src.service.payment.domain.entity.webhook_event_entity import WebhookEvent
from src.service.payment.domain.enum.payment_provider import PaymentProvider
from src.service.payment.domain.enum.webhook_outcome import ConclusionResult, WebhookOutcome
from src.service.payment.domain.value_object.payment_event import (
    PaymentEvent,
    PaymentFailed,
    PaymentSucceeded,
    RefundProcessed,
    UnknownEvent,
)


ALREADY_PROCESSED_REASON = 'already processed'


class ProcessWebhookUseCase:
    """
    verify -> parse -> persist -> dispatch -> mark processed

    Nothing is persisted before the signature and payload are accepted, and
    nothing is dispatched before the delivery is persisted.
    """

    def __init__(
        self,
        *,
        webhook_event_repo: IWebhookEventRepo,
        payment_effect_handler: IPaymentEffectHandler,
        provider_registry: WebhookProviderRegistry,
    ) -> None:
        self.webhook_event_repo = webhook_event_repo
        self.payment_effect_handler = payment_effect_handler
        self.provider_registry = provider_registry
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        webhook_event_repo: IWebhookEventRepo = Depends(Provide[Container.webhook_event_repo]),
        payment_effect_handler: IPaymentEffectHandler = Depends(
            Provide[Container.payment_effect_handler]
        ),
        provider_registry: WebhookProviderRegistry = Depends(
            Provide[Container.webhook_provider_registry]
        ),
    ) -> Self:
        return cls(
            webhook_event_repo=webhook_event_repo,
            payment_effect_handler=payment_effect_handler,
            provider_registry=provider_registry,
        )

    @Logger.io
    async def process(
        self, *, provider: PaymentProvider, raw_body: bytes, signature: Optional[str]
    ) -> WebhookResult:
        with self.tracer.start_as_current_span(
            'use_case.process_webhook', attributes={'webhook.provider': provider.value}
        ) as span:
            result = await self._process(
                self.provider_registry.get(provider), raw_body=raw_body, signature=signature
            )
            span.set_attribute('webhook.outcome', result.outcome.value)

        metrics.record_webhook(provider=provider.value, outcome=result.outcome.value)
        return result

    async def _process(
        self, webhook_provider: WebhookProvider, *, raw_body: bytes, signature: Optional[str]
    ) -> WebhookResult:
        provider = webhook_provider.PROVIDER

        try:
            webhook_provider.authenticate(raw_body=raw_body, signature=signature)
        except SignatureInvalidError as e:
            Logger.base.warning(f'🔒 [WEBHOOK] {e.message}')
            return WebhookResult(outcome=WebhookOutcome.INVALID_SIGNATURE, reason='Invalid signature')

        try:
            webhook = webhook_provider.parse(raw_body=raw_body, signature=signature or '')
        except MalformedPayloadError as e:
            Logger.base.warning(f'⚠️ [WEBHOOK] Malformed {provider} payload: {e.message}')
            return WebhookResult(outcome=WebhookOutcome.MALFORMED, reason=e.message)

        try:
            stored = await self.webhook_event_repo.store_webhook_event(webhook=webhook)
        except BackendUnavailableError as e:
            Logger.base.error(f'❌ [WEBHOOK] Could not persist {provider} event: {e.message}')
            return WebhookResult(
                outcome=WebhookOutcome.BACKEND_UNAVAILABLE, reason='Webhook processing failed'
            )

        if stored.succeeded:
            Logger.base.info(f'⏭️ [WEBHOOK] Duplicate {provider}:{stored.event_key}, skipping')
            return WebhookResult(outcome=WebhookOutcome.DUPLICATE, event_id=stored.id)

        try:
            await self._apply_effect(webhook.event, provider=provider)
        except AlreadyProcessedError as e:
            Logger.base.info(f'⏭️ [WEBHOOK] {e.message}')
            return await self._conclude(
                stored,
                outcome=WebhookOutcome.ALREADY_PROCESSED,
                success=True,
                failure_reason=ALREADY_PROCESSED_REASON,
            )
        except HandlerFailureError as e:
            return await self._conclude(
                stored,
                outcome=WebhookOutcome.HANDLER_FAILED,
                success=False,
                failure_reason=e.message,
            )

        outcome = (
            WebhookOutcome.IGNORED
            if isinstance(webhook.event, UnknownEvent)
            else WebhookOutcome.PROCESSED
        )
        return await self._conclude(stored, outcome=outcome, success=True)

    async def _apply_effect(self, event: PaymentEvent, *, provider: PaymentProvider) -> None:
        """
        Raises:
            AlreadyProcessedError: Booking already reflects the event
            HandlerFailureError: Any other handler failure, carrying its reason
        """
        try:
            if isinstance(event, PaymentSucceeded):
                await self.payment_effect_handler.process_payment_success(
                    event=event, provider=provider
                )
            elif isinstance(event, PaymentFailed):
                await self.payment_effect_handler.process_payment_failure(event=event)
            elif isinstance(event, RefundProcessed):
                await self.payment_effect_handler.process_refund(event=event)
            else:
                Logger.base.warning(
                    f'❓ [WEBHOOK] Unhandled {provider} event: {event.event_type}, acknowledging'
                )
        except AlreadyProcessedError:
            raise
        except Exception as e:
            Logger.base.exception(f'💥 [WEBHOOK] {provider} handler failed: {e}')
            raise HandlerFailureError(str(e) or type(e).__name__) from e

    async def _conclude(
        self,
        stored: WebhookEvent,
        *,
        outcome: WebhookOutcome,
        success: bool,
        failure_reason: Optional[str] = None,
    ) -> WebhookResult:
        try:
            conclusion = await self.webhook_event_repo.mark_processed(
                event_id=stored.id, success=success, failure_reason=failure_reason
            )
        except BackendUnavailableError as e:
            Logger.base.error(f'❌ [WEBHOOK] Could not mark event {stored.id}: {e.message}')
            return WebhookResult(
                outcome=WebhookOutcome.BACKEND_UNAVAILABLE,
                reason='Webhook processing failed',
                event_id=stored.id,
            )

        if conclusion in (ConclusionResult.RECOVERED, ConclusionResult.CONFLICT):
            Logger.base.error(
                f'🚨 [WEBHOOK] Conflicting outcome for event {stored.id} '
                f'({stored.provider}:{stored.event_key}): {conclusion}, success={success}'
            )
            metrics.record_webhook_anomaly(provider=stored.provider.value)

        return WebhookResult(outcome=outcome, reason=failure_reason, event_id=stored.id)
