"""
Admin API request/response schemas.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel

from app.services.menus import MenuDefinition, NotifyAdminAndReply


class MenuOptionResponse(BaseModel):
    option_id: str
    label: str
    description: str | None = None
    reply_kind: str  # "static" or "notify_admin"
    reply_text: str


class MenuResponse(BaseModel):
    """Response schema for a single menu."""

    menu_id: str
    prompt: str
    render_mode: str
    button_text: str | None = None
    options: list[MenuOptionResponse]

    @classmethod
    def from_menu(cls, menu: MenuDefinition) -> "MenuResponse":
        options = []
        for option in menu.options:
            if isinstance(option.action, NotifyAdminAndReply):
                kind, text = "notify_admin", option.action.user_text
            else:
                kind, text = "static", option.action.text
            options.append(
                MenuOptionResponse(
                    option_id=option.option_id,
                    label=option.label,
                    description=option.description,
                    reply_kind=kind,
                    reply_text=text,
                )
            )
        return cls(
            menu_id=menu.menu_id,
            prompt=menu.prompt,
            render_mode=str(menu.render_mode),
            button_text=menu.button_text,
            options=options,
        )


class MenuListResponse(BaseModel):
    default_menu_id: str
    admin_menu_id: str | None = None
    menus: list[MenuResponse]


class ContactResponse(BaseModel):
    """Response schema for one contact's conversation state."""

    address: str
    has_been_greeted: bool
    last_menu_id: str | None = None
    awaiting_selection: bool
    first_seen_at: datetime
    last_seen_at: datetime | None = None


class StartupNotifyResponse(BaseModel):
    sent: bool
    admin_address: str | None = None
    deliveries: list[dict[str, Any]]
