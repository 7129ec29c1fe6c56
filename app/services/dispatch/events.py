"""
Inbound events and outbound actions.

The transport hands us loosely-shaped messages (a WhatsApp button reply can
arrive as structured interactive data, as a legacy "button" message, or as
plain text). Everything is normalized into a closed set of event types before
the engine sees it; the engine answers with a list of outbound intents and
never touches transport serialization.
"""

import logging
from dataclasses import dataclass
from typing import Any

from app.constants.providers import PROVIDER_WHATSAPP

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RawInboundMessage:
    """What the transport collaborator supplies for each received message."""

    sender: str
    body: str | None = None
    selected_option_id: str | None = None
    message_id: str | None = None
    message_type: str = "text"
    timestamp: int | None = None
    provider: str = PROVIDER_WHATSAPP


# ---- Inbound ----


@dataclass(frozen=True)
class FreeText:
    sender: str
    body: str


@dataclass(frozen=True)
class MenuSelection:
    sender: str
    option_id: str


InboundEvent = FreeText | MenuSelection


# ---- Outbound ----


@dataclass(frozen=True)
class SendText:
    to: str
    text: str


@dataclass(frozen=True)
class SendMenu:
    to: str
    menu_id: str


OutboundAction = SendText | SendMenu


def normalize_event(raw: RawInboundMessage) -> InboundEvent:
    """
    Classify a raw message as a structured selection or free text.

    Anything without a usable selection payload is free text; a missing body
    becomes the empty string.
    """
    option_id = (raw.selected_option_id or "").strip()
    if option_id:
        return MenuSelection(sender=raw.sender, option_id=option_id)
    body = raw.body if isinstance(raw.body, str) else ""
    return FreeText(sender=raw.sender, body=body)


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _parse_timestamp(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def parse_whatsapp_message(message: dict[str, Any]) -> RawInboundMessage | None:
    """
    Map a WhatsApp Cloud API message object to a RawInboundMessage.

    Handles text, interactive button/list replies, legacy quick-reply buttons,
    media with captions and location. Unknown types degrade to a placeholder
    body so they are answered as free text.

    Args:
        message: One entry of value.messages from the webhook payload

    Returns:
        RawInboundMessage, or None if the message has no sender
    """
    if not isinstance(message, dict):
        return None

    sender = message.get("from")
    if not sender or not isinstance(sender, str):
        return None

    message_type = message.get("type") or "text"
    if not isinstance(message_type, str):
        message_type = "unknown"
    body: str | None = None
    selected: str | None = None

    # Nested fields that are not objects degrade to the placeholder body
    placeholder = f"[{message_type} message]"
    if message_type == "text":
        body = _as_dict(message.get("text")).get("body")
    elif message_type == "interactive":
        interactive = _as_dict(message.get("interactive"))
        reply = _as_dict(interactive.get("button_reply")) or _as_dict(interactive.get("list_reply"))
        selected = reply.get("id")
        body = reply.get("title") or (None if reply else placeholder)
    elif message_type == "button":
        # Legacy quick-reply button: payload carries the id, text the title
        button = _as_dict(message.get("button"))
        selected = button.get("payload")
        body = button.get("text") or (None if button else placeholder)
    elif message_type in ["image", "video", "audio", "document"]:
        caption = _as_dict(message.get(message_type)).get("caption")
        body = caption or message.get("caption") or placeholder
    elif message_type == "location":
        location = _as_dict(message.get("location"))
        if location:
            body = f"[Location: {location.get('latitude')}, {location.get('longitude')}]"
        else:
            body = placeholder
    else:
        body = placeholder

    if body is not None and not isinstance(body, str):
        logger.warning(f"Non-string body in WhatsApp {message_type} message from {sender}")
        body = str(body)

    message_id = message.get("id")
    return RawInboundMessage(
        sender=sender,
        body=body,
        selected_option_id=selected if isinstance(selected, str) else None,
        message_id=message_id if isinstance(message_id, str) else None,
        message_type=message_type,
        timestamp=_parse_timestamp(message.get("timestamp")),
    )
