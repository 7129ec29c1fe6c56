"""
Outbound delivery - turns engine actions into transport sends.

Every action in a batch is attempted independently: a failed admin
notification never suppresses the user-facing reply and vice versa. Failures
are logged and reported back as results; nothing is retried.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

from app.constants.event_types import EVENT_MENU_SENT, EVENT_WHATSAPP_SEND_FAILURE
from app.services.dispatch.events import OutboundAction, SendMenu, SendText
from app.services.menus import MenuCatalog, MenuDefinition

logger = logging.getLogger(__name__)


class TransportSendFailure(Exception):
    """The transport reported a failure for one outbound action."""

    def __init__(self, action: OutboundAction, cause: BaseException):
        self.action = action
        self.cause = cause
        super().__init__(f"Failed to send to {action.to}: {type(cause).__name__}: {cause}")


class MessageSender(Protocol):
    """Transport send capability used by the dispatch path."""

    async def send_text(self, to: str, text: str) -> dict: ...

    async def send_menu(self, to: str, menu: MenuDefinition) -> dict: ...


@dataclass(frozen=True)
class DeliveryResult:
    action: OutboundAction
    ok: bool
    status: str | None = None  # Provider status ("sent", "dry_run") when ok
    error: str | None = None

    def to_dict(self) -> dict:
        if isinstance(self.action, SendMenu):
            action = {"type": "send_menu", "to": self.action.to, "menu_id": self.action.menu_id}
        else:
            action = {"type": "send_text", "to": self.action.to, "text": self.action.text}
        return {"action": action, "ok": self.ok, "status": self.status, "error": self.error}


async def _deliver_one(
    action: OutboundAction, sender: MessageSender, catalog: MenuCatalog
) -> DeliveryResult:
    try:
        if isinstance(action, SendMenu):
            result = await sender.send_menu(action.to, catalog.get_menu(action.menu_id))
            logger.info(
                f"Menu '{action.menu_id}' sent to {action.to}",
                extra={"event_type": EVENT_MENU_SENT, "menu_id": action.menu_id},
            )
        elif isinstance(action, SendText):
            result = await sender.send_text(action.to, action.text)
        else:
            raise TypeError(f"Unsupported outbound action: {action!r}")
    except Exception as e:
        failure = TransportSendFailure(action, e)
        logger.error(
            str(failure),
            extra={"event_type": EVENT_WHATSAPP_SEND_FAILURE, "to": action.to},
        )
        return DeliveryResult(action=action, ok=False, error=str(failure))

    status = result.get("status") if isinstance(result, dict) else None
    return DeliveryResult(action=action, ok=True, status=status)


async def deliver_actions(
    actions: list[OutboundAction],
    sender: MessageSender,
    catalog: MenuCatalog,
) -> list[DeliveryResult]:
    """
    Send every action, concurrently and independently.

    Args:
        actions: Actions produced by the engine for one event
        sender: Transport collaborator
        catalog: Catalog used to look up menus for SendMenu actions

    Returns:
        One DeliveryResult per action, in the same order
    """
    if not actions:
        return []
    return list(await asyncio.gather(*(_deliver_one(a, sender, catalog) for a in actions)))


class WhatsAppSender:
    """MessageSender backed by the WhatsApp Cloud API."""

    def __init__(self, dry_run: bool = True):
        self.dry_run = dry_run

    async def send_text(self, to: str, text: str) -> dict:
        from app.services.messaging import send_whatsapp_message

        return await send_whatsapp_message(to=to, message=text, dry_run=self.dry_run)

    async def send_menu(self, to: str, menu: MenuDefinition) -> dict:
        from app.services.messaging import send_whatsapp_menu

        return await send_whatsapp_menu(to=to, menu=menu, dry_run=self.dry_run)
