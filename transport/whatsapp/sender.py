"""
WhatsApp Outbound Sender

Sends consumer-requested messages through the messaging client.
One fallback, no retry loop: primary target, then the alternate once.
"""

import logging

from .client import MessagingClient
from .identifiers import ChatTarget, TargetRef

logger = logging.getLogger(__name__)


class WhatsAppSenderError(Exception):
    """Both the primary and the alternate send failed."""
    pass


async def send_with_fallback(
    client: MessagingClient,
    target: ChatTarget,
    message: str,
) -> TargetRef:
    """
    Send `message` to the primary target, falling back to the alternate.

    Args:
        client: Messaging client
        target: Resolved ChatTarget
        message: Text body

    Returns:
        The TargetRef the message was delivered to

    Raises:
        WhatsAppSenderError: Carries the error of the second attempt
    """
    primary = target.primary
    logger.info(f"⏳ [SEND] To: {primary}")

    try:
        await client.send_message(primary.address, message)
        logger.info(f"📤 [SENT] Success", extra={"chat_id": primary.address})
        return primary
    except Exception as e:
        logger.warning(
            f"⚠️ Direct send failed to {primary}, attempting fallback...",
            extra={"chat_id": primary.address, "error": str(e)},
        )

    fallback = target.alternate or primary
    logger.info(f"🔄 Retrying with: {fallback}")
    try:
        await client.send_message(fallback.address, message)
    except Exception as e:
        logger.error(
            f"❌ Send Failed: {e}",
            extra={"chat_id": fallback.address, "error": str(e)},
        )
        raise WhatsAppSenderError(str(e)) from e

    logger.info(f"📤 [SENT] Success via fallback", extra={"chat_id": fallback.address})
    return fallback
