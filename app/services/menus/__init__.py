"""Menu catalog. Re-exports for stable public API."""

from app.services.menus.catalog import (
    MAX_OPTIONS,
    MenuCatalog,
    MenuDefinition,
    MenuDefinitionError,
    MenuNotFoundError,
    MenuOption,
    NotifyAdminAndReply,
    RenderMode,
    ReplyAction,
    StaticReply,
    catalog_from_dict,
    load_catalog,
)

__all__ = [
    "MAX_OPTIONS",
    "MenuCatalog",
    "MenuDefinition",
    "MenuDefinitionError",
    "MenuNotFoundError",
    "MenuOption",
    "NotifyAdminAndReply",
    "RenderMode",
    "ReplyAction",
    "StaticReply",
    "catalog_from_dict",
    "load_catalog",
]
