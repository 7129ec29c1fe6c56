"""
Dispatch engine - decides what to send back for every inbound event.

For each event the engine works out whether it is a fresh contact, a
structured menu selection, free text that matches an option label, the menu
keyword, or anything else, and returns the outbound actions for it.

Decision and delivery are split: on_event()/dispatch() are synchronous and
side-effect free apart from the contact store; handle() serializes a
contact's events, dispatches, and delivers through the transport.
"""

import logging
from dataclasses import dataclass, field

from app.constants.event_types import (
    EVENT_ADMIN_NOTIFIED,
    EVENT_DISPATCH_HELP_FALLBACK,
    EVENT_DISPATCH_SELECTION,
    EVENT_DISPATCH_UNKNOWN_SELECTION,
)
from app.constants.outcomes import (
    OUTCOME_GREETING,
    OUTCOME_HELP_FALLBACK,
    OUTCOME_LABEL_SELECTION,
    OUTCOME_MENU_RESEND,
    OUTCOME_SELECTION,
    OUTCOME_UNKNOWN_SELECTION,
)
from app.services.dispatch.contacts import Contact, ContactStore
from app.services.dispatch.delivery import DeliveryResult, MessageSender, deliver_actions
from app.services.dispatch.events import (
    FreeText,
    MenuSelection,
    OutboundAction,
    RawInboundMessage,
    SendMenu,
    SendText,
    normalize_event,
)
from app.services.menus import (
    MenuCatalog,
    MenuDefinitionError,
    MenuOption,
    NotifyAdminAndReply,
    StaticReply,
)
from app.services.text_normalization import fold_text

logger = logging.getLogger(__name__)

DEFAULT_FALLBACK_HELP_TEXT = "Send 'menu' at any time to see the options again."
DEFAULT_UNKNOWN_OPTION_TEXT = "Unknown option. Please try again by sending any message to see the menu."


@dataclass(frozen=True)
class DispatchResult:
    """Classification of one event plus the actions it produced."""

    outcome: str
    actions: list[OutboundAction]
    option_id: str | None = None
    menu_id: str | None = None


@dataclass
class HandledEvent:
    """A dispatched event together with the outcome of delivering its actions."""

    sender: str
    outcome: str
    actions: list[OutboundAction]
    deliveries: list[DeliveryResult] = field(default_factory=list)

    @property
    def delivered(self) -> bool:
        return all(d.ok for d in self.deliveries)

    def to_dict(self) -> dict:
        return {
            "sender": self.sender,
            "outcome": self.outcome,
            "delivered": self.delivered,
            "deliveries": [d.to_dict() for d in self.deliveries],
        }


class DispatchEngine:
    """Menu-selection state machine over the per-contact store."""

    def __init__(
        self,
        catalog: MenuCatalog,
        contacts: ContactStore,
        *,
        default_menu_id: str,
        admin_address: str | None = None,
        admin_menu_id: str | None = None,
        menu_keyword: str = "menu",
        fallback_help_text: str = DEFAULT_FALLBACK_HELP_TEXT,
        unknown_option_text: str = DEFAULT_UNKNOWN_OPTION_TEXT,
        startup_message: str | None = None,
    ):
        # Fail fast on misconfigured menu routing
        default_menu = catalog.get_menu(default_menu_id)
        if admin_menu_id:
            catalog.get_menu(admin_menu_id)
        if not admin_address:
            notify_ids = [
                o.option_id for o in default_menu.options if isinstance(o.action, NotifyAdminAndReply)
            ]
            if notify_ids:
                raise MenuDefinitionError(
                    f"Menu '{default_menu_id}' has admin-notifying options {notify_ids} "
                    "but no admin address is configured"
                )

        self.catalog = catalog
        self.contacts = contacts
        self.default_menu_id = default_menu_id
        self.admin_address = admin_address or None
        self.admin_menu_id = admin_menu_id or None
        self.menu_keyword = fold_text(menu_keyword)
        self.fallback_help_text = fallback_help_text
        self.unknown_option_text = unknown_option_text
        self.startup_message = startup_message

    # ---- Routing ----

    def is_admin(self, address: str) -> bool:
        return self.admin_address is not None and address == self.admin_address

    def menu_for(self, address: str) -> str:
        """Menu a contact is shown when greeted or when asking for the menu."""
        if self.admin_menu_id and self.is_admin(address):
            return self.admin_menu_id
        return self.default_menu_id

    def active_menu_for(self, contact: Contact) -> str:
        """Menu that selections from this contact are resolved against."""
        return contact.last_menu_id or self.menu_for(contact.address)

    # ---- Decision ----

    def on_event(self, raw: RawInboundMessage) -> list[OutboundAction]:
        return self.dispatch(raw).actions

    def dispatch(self, raw: RawInboundMessage) -> DispatchResult:
        event = normalize_event(raw)
        contact = self.contacts.get_or_create(event.sender)
        contact.touch()

        if isinstance(event, MenuSelection):
            return self._handle_selection(contact, event.option_id)
        return self._handle_free_text(contact, event)

    def _handle_selection(self, contact: Contact, option_id: str) -> DispatchResult:
        menu_id = self.active_menu_for(contact)
        option = self.catalog.resolve_option(menu_id, option_id)
        if option is None:
            logger.info(
                f"Unknown option '{option_id}' from {contact.address} on menu '{menu_id}'",
                extra={"event_type": EVENT_DISPATCH_UNKNOWN_SELECTION, "menu_id": menu_id},
            )
            return DispatchResult(
                outcome=OUTCOME_UNKNOWN_SELECTION,
                actions=[SendText(to=contact.address, text=self.unknown_option_text)],
                option_id=option_id,
                menu_id=menu_id,
            )
        return self._apply_option(contact, menu_id, option, OUTCOME_SELECTION)

    def _handle_free_text(self, contact: Contact, event: FreeText) -> DispatchResult:
        menu_id = self.active_menu_for(contact)
        option = self.catalog.match_label(menu_id, event.body)
        if option is not None:
            return self._apply_option(contact, menu_id, option, OUTCOME_LABEL_SELECTION)

        is_keyword = fold_text(event.body) == self.menu_keyword
        if not contact.has_been_greeted or is_keyword:
            outcome = OUTCOME_MENU_RESEND if contact.has_been_greeted else OUTCOME_GREETING
            return self._send_menu(contact, outcome)

        logger.debug(
            f"No menu match for free text from {contact.address}",
            extra={"event_type": EVENT_DISPATCH_HELP_FALLBACK},
        )
        return DispatchResult(
            outcome=OUTCOME_HELP_FALLBACK,
            actions=[SendText(to=contact.address, text=self.fallback_help_text)],
        )

    def _send_menu(self, contact: Contact, outcome: str) -> DispatchResult:
        menu_id = self.menu_for(contact.address)
        contact.mark_menu_sent(menu_id)
        return DispatchResult(
            outcome=outcome,
            actions=[SendMenu(to=contact.address, menu_id=menu_id)],
            menu_id=menu_id,
        )

    def _apply_option(
        self, contact: Contact, menu_id: str, option: MenuOption, outcome: str
    ) -> DispatchResult:
        contact.mark_selection_resolved()
        logger.info(
            f"Contact {contact.address} selected '{option.option_id}' on menu '{menu_id}'",
            extra={"event_type": EVENT_DISPATCH_SELECTION, "menu_id": menu_id},
        )

        action = option.action
        actions: list[OutboundAction]
        if isinstance(action, StaticReply):
            actions = [SendText(to=contact.address, text=action.text)]
        elif isinstance(action, NotifyAdminAndReply):
            actions = [
                SendText(to=contact.address, text=action.user_text),
                SendText(to=self.admin_address, text=action.admin_text(contact.address)),
            ]
            logger.info(
                f"Admin notification queued for {contact.address}",
                extra={"event_type": EVENT_ADMIN_NOTIFIED},
            )
        else:
            raise TypeError(f"Unsupported reply action: {action!r}")

        return DispatchResult(
            outcome=outcome, actions=actions, option_id=option.option_id, menu_id=menu_id
        )

    # ---- Bootstrap ----

    def startup_actions(self) -> list[OutboundAction]:
        """
        Actions to run once after the transport is ready: tell the admin the
        bot is live and send them their menu.

        Returns an empty list when no admin address is configured.
        """
        if not self.admin_address:
            return []

        actions: list[OutboundAction] = []
        if self.startup_message:
            actions.append(SendText(to=self.admin_address, text=self.startup_message))

        admin = self.contacts.get_or_create(self.admin_address)
        menu_id = self.menu_for(self.admin_address)
        admin.mark_menu_sent(menu_id)
        actions.append(SendMenu(to=self.admin_address, menu_id=menu_id))
        return actions

    # ---- Dispatch + delivery ----

    async def handle(self, raw: RawInboundMessage, sender: MessageSender) -> HandledEvent:
        """
        Dispatch one event and deliver its actions.

        Events from the same contact are serialized; other contacts are not
        blocked while this one's sends are in flight.
        """
        async with self.contacts.lock_for(raw.sender):
            result = self.dispatch(raw)
            deliveries = await deliver_actions(result.actions, sender, self.catalog)
        return HandledEvent(
            sender=raw.sender,
            outcome=result.outcome,
            actions=result.actions,
            deliveries=deliveries,
        )

    async def run_startup(self, sender: MessageSender) -> list[DeliveryResult]:
        if not self.admin_address:
            return []
        async with self.contacts.lock_for(self.admin_address):
            actions = self.startup_actions()
            return await deliver_actions(actions, sender, self.catalog)
