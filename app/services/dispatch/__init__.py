# Dispatch: inbound normalization, contact state, menu state machine, delivery
# Re-export so "from app.services.dispatch import ..." works for callers.

from app.services.dispatch.contacts import Contact, ContactStore
from app.services.dispatch.delivery import (
    DeliveryResult,
    MessageSender,
    TransportSendFailure,
    WhatsAppSender,
    deliver_actions,
)
from app.services.dispatch.engine import DispatchEngine, DispatchResult, HandledEvent
from app.services.dispatch.events import (
    FreeText,
    InboundEvent,
    MenuSelection,
    OutboundAction,
    RawInboundMessage,
    SendMenu,
    SendText,
    normalize_event,
    parse_whatsapp_message,
)

__all__ = [
    "Contact",
    "ContactStore",
    "DeliveryResult",
    "DispatchEngine",
    "DispatchResult",
    "FreeText",
    "HandledEvent",
    "InboundEvent",
    "MenuSelection",
    "MessageSender",
    "OutboundAction",
    "RawInboundMessage",
    "SendMenu",
    "SendText",
    "TransportSendFailure",
    "WhatsAppSender",
    "deliver_actions",
    "normalize_event",
    "parse_whatsapp_message",
]
