import asyncio
import json
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from fastapi.responses import JSONResponse

from app.api.dependencies import get_engine, get_processed_messages, get_sender
from app.constants.event_types import (
    EVENT_WHATSAPP_DUPLICATE_MESSAGE,
    EVENT_WHATSAPP_INBOUND_RECEIVED,
    EVENT_WHATSAPP_MESSAGE,
    EVENT_WHATSAPP_SIGNATURE_VERIFICATION_FAILURE,
    EVENT_WHATSAPP_WEBHOOK_FAILURE,
)
from app.core.config import settings
from app.services.dispatch import (
    DispatchEngine,
    MessageSender,
    RawInboundMessage,
    parse_whatsapp_message,
)
from app.services.messaging import verify_whatsapp_signature
from app.services.processed_messages import ProcessedMessageCache

logger = logging.getLogger(__name__)

router = APIRouter()


def _wa_error_response(status_code: int, error: str, **content_extras) -> JSONResponse:
    """Build JSONResponse for WhatsApp webhook errors: {"received": False, "error": ...}."""
    content: dict = {"received": False, "error": error, **content_extras}
    return JSONResponse(status_code=status_code, content=content)


def _extract_messages(payload: dict) -> list[dict]:
    """Collect value.messages from every entry/change of a webhook payload."""
    messages: list[dict] = []
    for entry in payload.get("entry") or []:
        for change in (entry or {}).get("changes") or []:
            value = (change or {}).get("value") or {}
            messages.extend(m for m in value.get("messages") or [] if isinstance(m, dict))
    return messages


def _parse_messages(messages: list[dict]) -> list[RawInboundMessage]:
    """Parse each message on its own; one unparseable message never drops the rest."""
    raw_messages: list[RawInboundMessage] = []
    for message in messages:
        try:
            raw = parse_whatsapp_message(message)
        except Exception as e:
            logger.error(
                f"Failed to parse WhatsApp message - error_type={type(e).__name__}: {e}",
                exc_info=True,
                extra={"event_type": EVENT_WHATSAPP_WEBHOOK_FAILURE},
            )
            continue
        if raw is not None:
            raw_messages.append(raw)
    return raw_messages


def _arrival_order(raw_messages: list[RawInboundMessage]) -> list[RawInboundMessage]:
    # Oldest first (stable); messages without a timestamp sort ahead of timestamped ones
    return sorted(raw_messages, key=lambda m: m.timestamp if m.timestamp is not None else 0)


async def _handle_one(
    raw: RawInboundMessage,
    engine: DispatchEngine,
    sender: MessageSender,
    processed: ProcessedMessageCache,
) -> dict:
    if raw.message_id:
        first_seen = processed.mark_processed(raw.provider, raw.message_id)
        if first_seen is not None:
            logger.info(
                f"Duplicate WhatsApp message {raw.message_id} from {raw.sender} ignored",
                extra={"event_type": EVENT_WHATSAPP_DUPLICATE_MESSAGE},
            )
            return {
                "type": "duplicate",
                "message_id": raw.message_id,
                "wa_from": raw.sender,
                "processed_at": first_seen.isoformat(),
            }

    try:
        handled = await engine.handle(raw, sender)
    except Exception as e:
        # Acknowledge anyway so WhatsApp does not redeliver; other messages carry on
        logger.error(
            f"Dispatch failed for WhatsApp message - message_id={raw.message_id}, "
            f"wa_from={raw.sender}, error_type={type(e).__name__}: {e}",
            exc_info=True,
            extra={"event_type": EVENT_WHATSAPP_WEBHOOK_FAILURE},
        )
        return {
            "type": "error",
            "message_id": raw.message_id,
            "wa_from": raw.sender,
            "error": "Dispatch failed",
        }

    logger.info(
        f"WhatsApp {raw.message_type} message from {raw.sender} handled: {handled.outcome}",
        extra={"event_type": EVENT_WHATSAPP_MESSAGE, "message_id": raw.message_id},
    )
    return {
        "type": "message",
        "message_id": raw.message_id,
        "wa_from": raw.sender,
        "message_type": raw.message_type,
        "text": raw.body,
        **handled.to_dict(),
    }


@router.get("/whatsapp")
def whatsapp_verify(
    hub_mode: str | None = Query(None, alias="hub.mode"),
    hub_verify_token: str | None = Query(None, alias="hub.verify_token"),
    hub_challenge: str | None = Query(None, alias="hub.challenge"),
):
    if hub_mode == "subscribe" and hub_verify_token == settings.whatsapp_verify_token:
        return Response(content=hub_challenge or "", media_type="text/plain")
    raise HTTPException(status_code=403, detail="Verification failed")


@router.post("/whatsapp")
async def whatsapp_inbound(
    request: Request,
    engine: DispatchEngine = Depends(get_engine),
    sender: MessageSender = Depends(get_sender),
    processed: ProcessedMessageCache = Depends(get_processed_messages),
):
    logger.info(
        "whatsapp.inbound_received",
        extra={"event_type": EVENT_WHATSAPP_INBOUND_RECEIVED},
    )

    raw_body = await request.body()
    signature_header = request.headers.get("X-Hub-Signature-256")
    if not verify_whatsapp_signature(raw_body, signature_header):
        logger.warning(
            "WhatsApp webhook signature verification failed - rejecting request",
            extra={"event_type": EVENT_WHATSAPP_SIGNATURE_VERIFICATION_FAILURE},
        )
        return _wa_error_response(403, "Invalid webhook signature")

    try:
        payload = json.loads(raw_body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning(f"Invalid JSON payload in WhatsApp webhook: {e}")
        return _wa_error_response(400, "Invalid JSON payload")

    if not isinstance(payload, dict):
        return _wa_error_response(400, "Invalid JSON payload")

    if not payload.get("entry"):
        return {"received": True, "type": "empty-entry"}

    try:
        messages = _extract_messages(payload)
    except (AttributeError, TypeError) as e:
        return {"received": True, "type": "malformed-payload", "error": str(e)}

    # Delivery receipts and other status callbacks carry no messages
    raw_messages = _parse_messages(messages)
    if not raw_messages:
        return {"received": True, "type": "non-message-event"}

    # Different contacts proceed concurrently; the engine serializes each contact's
    # events, and tasks queue on a contact's lock in arrival order
    results = await asyncio.gather(
        *(_handle_one(raw, engine, sender, processed) for raw in _arrival_order(raw_messages))
    )

    return {"received": True, "type": "messages", "results": list(results)}
