"""
Downstream Webhook Client

Posts relay payloads to the configured webhook consumer.
One attempt per call. Retrying is the RetryQueue's job.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import httpx

logger = logging.getLogger(__name__)


class DownstreamError(Exception):
    """Webhook consumer unreachable or rejected the payload."""
    pass


@dataclass
class DownstreamResponse:
    """What the consumer answered to a delivered payload."""

    status_code: int
    reaction: Optional[str] = None


class DownstreamClient:
    """
    Thin async client for the webhook consumer.

    Args:
        url: Webhook endpoint receiving relay payloads
        timeout: Per-attempt timeout in seconds
        transport: Optional httpx transport (tests inject a MockTransport)
    """

    def __init__(
        self,
        url: str,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url
        self.timeout = timeout
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def post(self, payload: Mapping[str, Any]) -> DownstreamResponse:
        """
        Deliver one payload.

        Returns:
            DownstreamResponse with the optional reaction instruction

        Raises:
            DownstreamError: Timeout, connection failure or non-2xx status
        """
        # httpx times each phase separately; bound the whole attempt too
        try:
            response = await asyncio.wait_for(
                self._client.post(self.url, json=dict(payload)),
                self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise DownstreamError(f"Webhook did not answer within {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise DownstreamError(f"Webhook request failed: {e!r}") from e

        if not response.is_success:
            raise DownstreamError(
                f"Webhook returned {response.status_code}"
            )

        reaction = None
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("reaction"):
            reaction = str(body["reaction"])

        return DownstreamResponse(status_code=response.status_code, reaction=reaction)

    async def close(self) -> None:
        """Release the underlying connection pool."""
        await self._client.aclose()
