"""
WhatsApp Bridge HTTP Routes

- POST /send-message   consumer → WhatsApp (primary target, alternate once)
- POST /client/events  gateway → bridge → consumer (relayed in background)
- GET  /qr-code        pairing status
- GET  /relay/status   retry queue status
"""

import json
import logging

from fastapi import APIRouter, BackgroundTasks, HTTPException, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from infra import BridgeBootstrap

from .identifiers import InvalidSpecifierError
from .schemas import ClientEvent, SendMessageRequest
from .sender import WhatsAppSenderError, send_with_fallback

logger = logging.getLogger(__name__)

router = APIRouter(tags=["WhatsApp Bridge"])


def get_bridge() -> BridgeBootstrap:
    """Get the process-wide bridge components."""
    return BridgeBootstrap.get_instance()


async def _read_json(request: Request):
    try:
        return json.loads(await request.body())
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None


# ============================================================================
# OUTBOUND SEND
# ============================================================================

@router.post("/send-message")
async def send_message(request: Request):
    """
    Send a text message on behalf of the consumer.

    Expected payload:
    {
        "phone": "0912345678",       # or
        "reply_id": "9639...@c.us",  # wins over phone
        "message": "Hello"
    }

    Returns:
        {"status": "success"}
        400 {"error": ...} on missing fields / invalid phone
        500 {"error": ...} when primary and alternate both fail
    """
    body = await _read_json(request)
    try:
        send_request = SendMessageRequest(**body) if isinstance(body, dict) else None
    except ValidationError:
        send_request = None

    if send_request is None or not send_request.is_complete():
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Missing required fields"},
        )

    bridge = get_bridge()
    try:
        if send_request.reply_id:
            target = bridge.resolver.resolve(send_request.reply_id, explicit=True)
        else:
            target = bridge.resolver.resolve(send_request.phone)
    except InvalidSpecifierError as e:
        logger.warning(f"Rejected send request: {e}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": str(e)},
        )

    try:
        await send_with_fallback(bridge.client, target, send_request.message)
    except WhatsAppSenderError as e:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": str(e)},
        )

    return {"status": "success"}


# ============================================================================
# CLIENT EVENTS
# ============================================================================

@router.post("/client/events")
async def client_events(event: ClientEvent, background_tasks: BackgroundTasks):
    """
    Receive an event from the WhatsApp gateway.

    Acknowledged immediately; relaying to the consumer (which may queue it)
    runs after the response is sent.
    """
    bridge = get_bridge()
    background_tasks.add_task(_dispatch_event, bridge, event)
    return {"status": "ok"}


async def _dispatch_event(bridge: BridgeBootstrap, event: ClientEvent) -> None:
    try:
        await bridge.router.dispatch(event)
    except Exception as e:
        logger.error(f"Error handling client event {event.event}: {e}", exc_info=True)


# ============================================================================
# STATUS
# ============================================================================

@router.get("/qr-code")
async def qr_code():
    """Pairing code while a scan is required, else the connection state."""
    events = get_bridge().router
    if events.state == "scan_required" and events.pairing_code:
        return {"status": "scan_required", "qr": events.pairing_code}
    return {"status": events.state}


@router.get("/relay/status")
async def relay_status():
    """Retry queue status."""
    try:
        queue = get_bridge().queue
        return {
            "pending": len(queue),
            "draining": queue.draining,
            "retry_delay_seconds": queue.retry_delay,
        }
    except Exception as e:
        logger.error(f"Relay status failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))
