from src.platform.config.core_setting import Settings
from src.service.payment.app.provider.metatickets_provider import MetaTicketsProvider
from src.service.payment.app.provider.paystack_provider import PaystackProvider
from src.service.payment.app.provider.webhook_provider import WebhookProvider
from src.service.payment.domain.enum.payment_provider import PaymentProvider


class WebhookProviderRegistry:
    def __init__(self, *, settings: Settings) -> None:
        self._providers: dict[PaymentProvider, WebhookProvider] = {
            PaymentProvider.PAYSTACK: PaystackProvider(settings=settings),
            PaymentProvider.METATICKETS: MetaTicketsProvider(settings=settings),
        }

    def get(self, provider: PaymentProvider) -> WebhookProvider:
        return self._providers[provider]
