"""
Infrastructure initialization and bootstrap.

Singleton pattern for wiring the bridge components from configuration.
"""

import logging
from typing import Optional

from relay import DeliveryGate, DownstreamClient, RetryQueue
from transport.whatsapp.client import MessagingClient
from transport.whatsapp.events import EventRouter
from transport.whatsapp.identifiers import IdentifierResolver

from .config import InfraConfig, get_config

logger = logging.getLogger(__name__)


class BridgeBootstrap:
    """
    Owns one instance of every bridge component.

    Singleton pattern - single instance per process.
    """

    _instance: Optional["BridgeBootstrap"] = None

    def __init__(self, config: Optional[InfraConfig] = None):
        """Initialize bootstrap with configuration."""
        self.config = config or get_config()
        self.client: MessagingClient = self.config.create_messaging_client()
        self.downstream: DownstreamClient = self.config.create_downstream()
        self.queue: RetryQueue = self.config.create_retry_queue()
        self.gate = DeliveryGate(self.downstream, self.queue)
        self.resolver: IdentifierResolver = self.config.create_resolver()
        self.router = EventRouter(self.client, self.gate)
        logger.info(f"Bridge components ready: {self!r}")

    @classmethod
    def get_instance(cls, config: Optional[InfraConfig] = None) -> "BridgeBootstrap":
        """
        Get singleton instance.

        Args:
            config: Optional custom configuration (only used first time)

        Returns:
            Singleton BridgeBootstrap instance
        """
        if cls._instance is None:
            cls._instance = cls(config)
        return cls._instance

    @classmethod
    def reset(cls):
        """Reset singleton (for testing)."""
        cls._instance = None

    async def shutdown(self) -> None:
        """Stop pending retries and close network clients."""
        logger.info("Shutting down bridge components")
        await self.queue.close()
        await self.downstream.close()
        await self.client.close()

    def __repr__(self) -> str:
        """String representation showing configured backends."""
        return (
            f"BridgeBootstrap(client={self.config.client_backend}, "
            f"webhook={self.config.webhook_url}, "
            f"retry_delay={self.config.retry_delay}s)"
        )

