"""
Menu catalog - immutable registry of the menus the bot can present.

Menus are loaded once at startup from a YAML copy file. Each menu carries its
prompt, its ordered options and the rendering mode the transport must use
(reply buttons or a scrollable list). Lookups are pure.
"""

import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml

from app.services.text_normalization import fold_text

logger = logging.getLogger(__name__)


class MenuDefinitionError(ValueError):
    """Raised when a menu definition (or the catalog file) is invalid."""


class MenuNotFoundError(KeyError):
    """Raised when a menu id is not present in the catalog."""


class RenderMode(StrEnum):
    """How the transport should render a menu."""

    BUTTONS = "buttons"  # Inline reply buttons
    LIST = "list"  # Scrollable list message


# WhatsApp limits: 3 reply buttons per message, 10 rows per list message
MAX_OPTIONS: dict[RenderMode, int] = {
    RenderMode.BUTTONS: 3,
    RenderMode.LIST: 10,
}


@dataclass(frozen=True)
class StaticReply:
    """Reply with fixed text."""

    text: str


@dataclass(frozen=True)
class NotifyAdminAndReply:
    """Reply to the user and notify the administrator."""

    user_text: str
    admin_template: str  # str.format template, receives {contact}

    def admin_text(self, contact: str) -> str:
        return self.admin_template.format(contact=contact)


ReplyAction = StaticReply | NotifyAdminAndReply


@dataclass(frozen=True)
class MenuOption:
    """A single selectable choice within a menu."""

    option_id: str
    label: str
    action: ReplyAction
    description: str | None = None


@dataclass(frozen=True)
class MenuDefinition:
    """A named set of options presented to a contact."""

    menu_id: str
    prompt: str
    options: tuple[MenuOption, ...]
    render_mode: RenderMode = RenderMode.BUTTONS
    button_text: str | None = None  # List menus only: label of the button that opens the list

    def __post_init__(self) -> None:
        if not self.options:
            raise MenuDefinitionError(f"Menu '{self.menu_id}' has no options")

        limit = MAX_OPTIONS[self.render_mode]
        if len(self.options) > limit:
            raise MenuDefinitionError(
                f"Menu '{self.menu_id}' has {len(self.options)} options; "
                f"{self.render_mode} menus allow at most {limit}"
            )

        seen_ids: set[str] = set()
        seen_labels: set[str] = set()
        for option in self.options:
            if option.option_id in seen_ids:
                raise MenuDefinitionError(
                    f"Duplicate option id '{option.option_id}' in menu '{self.menu_id}'"
                )
            folded = fold_text(option.label)
            if folded in seen_labels:
                raise MenuDefinitionError(
                    f"Duplicate option label '{option.label}' in menu '{self.menu_id}'"
                )
            seen_ids.add(option.option_id)
            seen_labels.add(folded)

    def option_by_id(self, option_id: str) -> MenuOption | None:
        for option in self.options:
            if option.option_id == option_id:
                return option
        return None

    def option_by_label(self, label: str) -> MenuOption | None:
        folded = fold_text(label)
        if not folded:
            return None
        for option in self.options:
            if fold_text(option.label) == folded:
                return option
        return None


class MenuCatalog(Mapping[str, MenuDefinition]):
    """Read-only mapping of menu_id -> MenuDefinition."""

    def __init__(self, menus: Iterable[MenuDefinition]):
        registry: dict[str, MenuDefinition] = {}
        for menu in menus:
            if menu.menu_id in registry:
                raise MenuDefinitionError(f"Duplicate menu id '{menu.menu_id}'")
            registry[menu.menu_id] = menu
        self._menus = MappingProxyType(registry)

    def __getitem__(self, menu_id: str) -> MenuDefinition:
        return self._menus[menu_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._menus)

    def __len__(self) -> int:
        return len(self._menus)

    def get_menu(self, menu_id: str) -> MenuDefinition:
        """
        Get a menu by id.

        Raises:
            MenuNotFoundError: If the menu is not in the catalog
        """
        menu = self._menus.get(menu_id)
        if menu is None:
            raise MenuNotFoundError(menu_id)
        return menu

    def find_menu(self, menu_id: str | None) -> MenuDefinition | None:
        if menu_id is None:
            return None
        return self._menus.get(menu_id)

    def resolve_option(self, menu_id: str, option_id_or_label: str) -> MenuOption | None:
        """
        Resolve a selection against a menu.

        Exact option_id match wins; otherwise falls back to a case-insensitive
        match on the option label (transports sometimes deliver a button reply
        as its plain-text title).

        Returns:
            The matching MenuOption, or None if the menu or option is unknown
        """
        menu = self.find_menu(menu_id)
        if menu is None or not option_id_or_label:
            return None
        return menu.option_by_id(option_id_or_label) or menu.option_by_label(option_id_or_label)

    def match_label(self, menu_id: str, text: str) -> MenuOption | None:
        """Label-only match, used for free-text messages."""
        menu = self.find_menu(menu_id)
        if menu is None:
            return None
        return menu.option_by_label(text)


def _parse_reply(menu_id: str, option_id: str, data: Any) -> ReplyAction:
    if not isinstance(data, dict):
        raise MenuDefinitionError(f"Option '{menu_id}.{option_id}' is missing its reply")

    kind = data.get("kind", "static")
    text = data.get("text")
    if not isinstance(text, str) or not text:
        raise MenuDefinitionError(f"Option '{menu_id}.{option_id}' reply has no text")

    if kind == "static":
        return StaticReply(text=text)
    if kind == "notify_admin":
        template = data.get("admin_template")
        if not isinstance(template, str) or not template:
            raise MenuDefinitionError(
                f"Option '{menu_id}.{option_id}' notifies the admin but has no admin_template"
            )
        return NotifyAdminAndReply(user_text=text, admin_template=template)
    raise MenuDefinitionError(f"Option '{menu_id}.{option_id}' has unknown reply kind '{kind}'")


def _parse_menu(menu_id: str, data: Any) -> MenuDefinition:
    if not isinstance(data, dict):
        raise MenuDefinitionError(f"Menu '{menu_id}' must be a mapping")

    try:
        render_mode = RenderMode(data.get("render_mode", RenderMode.BUTTONS))
    except ValueError as e:
        raise MenuDefinitionError(
            f"Menu '{menu_id}' has unknown render_mode '{data.get('render_mode')}'"
        ) from e

    options = []
    for raw in data.get("options") or []:
        if not isinstance(raw, dict) or not raw.get("id") or not raw.get("label"):
            raise MenuDefinitionError(f"Menu '{menu_id}' has an option without id/label")
        option_id = str(raw["id"])
        options.append(
            MenuOption(
                option_id=option_id,
                label=str(raw["label"]),
                action=_parse_reply(menu_id, option_id, raw.get("reply")),
                description=raw.get("description"),
            )
        )

    return MenuDefinition(
        menu_id=menu_id,
        prompt=str(data.get("prompt") or ""),
        options=tuple(options),
        render_mode=render_mode,
        button_text=data.get("button_text"),
    )


def catalog_from_dict(data: dict[str, Any]) -> MenuCatalog:
    """
    Build a catalog from parsed copy data.

    Args:
        data: Dict with a "menus" mapping of menu_id -> menu definition

    Returns:
        MenuCatalog
    """
    menus = (data or {}).get("menus")
    if not isinstance(menus, dict) or not menus:
        raise MenuDefinitionError("Catalog defines no menus")
    return MenuCatalog(_parse_menu(str(menu_id), raw) for menu_id, raw in menus.items())


def load_catalog(path: str | Path) -> MenuCatalog:
    """
    Load the menu catalog from a YAML file.

    Raises:
        MenuDefinitionError: If the file is missing or invalid (fail fast at startup)
    """
    catalog_file = Path(path)
    if not catalog_file.exists():
        raise MenuDefinitionError(f"Menu catalog file not found: {catalog_file}")

    try:
        with open(catalog_file, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise MenuDefinitionError(f"Invalid YAML in {catalog_file}: {e}") from e

    catalog = catalog_from_dict(data)
    logger.info(f"Loaded {len(catalog)} menus from {catalog_file}")
    return catalog
