"""
Infrastructure configuration system.

Environment-based backend selection with sensible defaults.
"""

from typing import Optional, Literal
from dataclasses import dataclass

import httpx

from config import Config
from relay import DownstreamClient, RetryQueue
from transport.whatsapp.client import GatewayMessagingClient, MessagingClient
from transport.whatsapp.identifiers import IdentifierResolver
from transport.whatsapp.stub import StubMessagingClient


ClientBackendType = Literal["stub", "gateway"]


@dataclass
class InfraConfig:
    """Infrastructure configuration from environment."""

    # Messaging client
    client_backend: ClientBackendType
    gateway_url: str
    gateway_timeout: float

    # Downstream consumer
    webhook_url: str
    webhook_timeout: float

    # Retry queue
    retry_delay: float
    retry_queue_max_items: int

    # Identifier resolution
    home_country_code: str
    trunk_prefix: str

    # Test hook: shared httpx transport for downstream calls
    downstream_transport: Optional[httpx.AsyncBaseTransport] = None

    @classmethod
    def from_env(cls) -> "InfraConfig":
        """
        Load configuration from environment variables (via Config).

        Defaults:
        - client: gateway on localhost
        - webhook: local consumer on port 8001
        - retry: every 10s, unbounded queue
        """
        return cls(
            client_backend=Config.CLIENT_BACKEND,  # type: ignore
            gateway_url=Config.GATEWAY_URL,
            gateway_timeout=Config.GATEWAY_TIMEOUT_SECONDS,
            webhook_url=Config.WEBHOOK_URL,
            webhook_timeout=Config.WEBHOOK_TIMEOUT_SECONDS,
            retry_delay=Config.RETRY_DELAY_SECONDS,
            retry_queue_max_items=Config.RETRY_QUEUE_MAX_ITEMS,
            home_country_code=Config.HOME_COUNTRY_CODE,
            trunk_prefix=Config.TRUNK_PREFIX,
        )

    def create_messaging_client(self) -> MessagingClient:
        """Create messaging client based on configuration."""
        if self.client_backend == "stub":
            return StubMessagingClient()
        return GatewayMessagingClient(
            base_url=self.gateway_url,
            timeout=self.gateway_timeout,
        )

    def create_downstream(self) -> DownstreamClient:
        return DownstreamClient(
            url=self.webhook_url,
            timeout=self.webhook_timeout,
            transport=self.downstream_transport,
        )

    def create_retry_queue(self) -> RetryQueue:
        return RetryQueue(
            retry_delay=self.retry_delay,
            max_items=self.retry_queue_max_items,
        )

    def create_resolver(self) -> IdentifierResolver:
        return IdentifierResolver(
            home_country_code=self.home_country_code,
            trunk_prefix=self.trunk_prefix,
        )


def get_config() -> InfraConfig:
    """Get infrastructure configuration."""
    return InfraConfig.from_env()
