"""
WhatsApp messaging service with dry-run mode for development.

Sends plain text and interactive menus through the WhatsApp Cloud API.
Menus are rendered here, not in the dispatch engine: button menus become
interactive reply buttons, list menus become a single-section list message.
"""

import logging
import os

from app.core.config import settings
from app.services.integrations.http_client import create_graph_client
from app.services.menus import MenuDefinition, RenderMode

logger = logging.getLogger(__name__)

# WhatsApp interactive message limits
BUTTON_TITLE_MAX = 20
LIST_ROW_TITLE_MAX = 24
LIST_ROW_DESCRIPTION_MAX = 72
LIST_BUTTON_TEXT_MAX = 20
BODY_TEXT_MAX = 1024
DEFAULT_LIST_BUTTON_TEXT = "Options"


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 1].rstrip() + "…"


def _should_dry_run(dry_run: bool) -> bool:
    """Force dry-run in tests or if credentials are placeholders/missing."""
    if dry_run:
        return True
    if os.environ.get("PYTEST_CURRENT_TEST"):
        return True
    if not settings.whatsapp_access_token or settings.whatsapp_access_token in ["test_token", ""]:
        return True
    return False


def _check_credentials() -> None:
    if not settings.whatsapp_access_token or settings.whatsapp_access_token in ["", "test_token"]:
        logger.error("WhatsApp access token missing - cannot send message")
        raise ValueError("WhatsApp access token not configured. Cannot send message.")

    if not settings.whatsapp_phone_number_id or settings.whatsapp_phone_number_id in [
        "",
        "test_id",
    ]:
        logger.error("WhatsApp phone number ID missing - cannot send message")
        raise ValueError("WhatsApp phone number ID not configured. Cannot send message.")


def build_text_payload(to: str, message: str) -> dict:
    return {
        "messaging_product": "whatsapp",
        "to": to,
        "type": "text",
        "text": {"body": message},
    }


def build_menu_payload(to: str, menu: MenuDefinition) -> dict:
    """
    Render a menu as a WhatsApp interactive message payload.

    Args:
        to: WhatsApp phone number (with country code, no +)
        menu: Menu to render; its render_mode picks buttons or list

    Returns:
        JSON-serializable payload for the /messages endpoint
    """
    body = {"text": _truncate(menu.prompt, BODY_TEXT_MAX)}

    if menu.render_mode == RenderMode.BUTTONS:
        interactive = {
            "type": "button",
            "body": body,
            "action": {
                "buttons": [
                    {
                        "type": "reply",
                        "reply": {
                            "id": option.option_id,
                            "title": _truncate(option.label, BUTTON_TITLE_MAX),
                        },
                    }
                    for option in menu.options
                ]
            },
        }
    else:
        rows = []
        for option in menu.options:
            row = {
                "id": option.option_id,
                "title": _truncate(option.label, LIST_ROW_TITLE_MAX),
            }
            if option.description:
                row["description"] = _truncate(option.description, LIST_ROW_DESCRIPTION_MAX)
            rows.append(row)
        interactive = {
            "type": "list",
            "body": body,
            "action": {
                "button": _truncate(
                    menu.button_text or DEFAULT_LIST_BUTTON_TEXT, LIST_BUTTON_TEXT_MAX
                ),
                "sections": [{"title": _truncate(menu.menu_id, LIST_ROW_TITLE_MAX), "rows": rows}],
            },
        }

    return {
        "messaging_product": "whatsapp",
        "recipient_type": "individual",
        "to": to,
        "type": "interactive",
        "interactive": interactive,
    }


async def _post_message(payload: dict) -> dict:
    _check_credentials()
    url = f"/{settings.whatsapp_api_version}/{settings.whatsapp_phone_number_id}/messages"
    try:
        async with create_graph_client() as client:
            response = await client.post(url, json=payload)
            response.raise_for_status()
            result = response.json()
    except Exception as e:
        logger.error(f"Failed to send WhatsApp {payload.get('type')} message: {e}")
        raise

    return {
        "status": "sent",
        "message_id": result.get("messages", [{}])[0].get("id"),
        "to": payload.get("to"),
    }


async def send_whatsapp_message(
    to: str,
    message: str,
    dry_run: bool = True,
) -> dict:
    """
    Send a WhatsApp text message.

    Args:
        to: WhatsApp phone number (with country code, no +)
        message: Message text to send
        dry_run: If True, only log the message (don't actually send)

    Returns:
        dict with status and message_id (or None in dry-run)
    """
    if _should_dry_run(dry_run):
        logger.info(f"[DRY-RUN] Would send WhatsApp message to {to}: {message}")
        return {
            "status": "dry_run",
            "message_id": None,
            "to": to,
            "message": message,
        }

    return await _post_message(build_text_payload(to, message))


async def send_whatsapp_menu(
    to: str,
    menu: MenuDefinition,
    dry_run: bool = True,
) -> dict:
    """
    Send a menu as a WhatsApp interactive message.

    Args:
        to: WhatsApp phone number (with country code, no +)
        menu: Menu definition to render
        dry_run: If True, only log the message (don't actually send)

    Returns:
        dict with status and message_id (or None in dry-run)
    """
    if _should_dry_run(dry_run):
        labels = ", ".join(option.label for option in menu.options)
        logger.info(
            f"[DRY-RUN] Would send WhatsApp {menu.render_mode} menu '{menu.menu_id}' to {to}: "
            f"{menu.prompt} [{labels}]"
        )
        return {
            "status": "dry_run",
            "message_id": None,
            "to": to,
            "menu_id": menu.menu_id,
        }

    return await _post_message(build_menu_payload(to, menu))
