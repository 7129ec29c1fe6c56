"""
Tests for the menu catalog: loading, validation and option resolution.
"""

import pytest

from app.services.menus import (
    MenuCatalog,
    MenuDefinition,
    MenuDefinitionError,
    MenuNotFoundError,
    MenuOption,
    NotifyAdminAndReply,
    RenderMode,
    StaticReply,
    catalog_from_dict,
    load_catalog,
)


def _option(option_id: str, label: str) -> MenuOption:
    return MenuOption(option_id=option_id, label=label, action=StaticReply(text=f"{label} reply"))


def test_shipped_catalog_has_expected_menus(catalog):
    assert set(catalog) == {"main", "main_list", "admin_test"}

    main = catalog.get_menu("main")
    assert main.render_mode == RenderMode.BUTTONS
    assert [o.label for o in main.options] == ["View Listings", "Buy Property", "Sell Property"]
    assert [o.option_id for o in main.options] == ["view_listings", "buy_property", "sell_property"]

    main_list = catalog.get_menu("main_list")
    assert main_list.render_mode == RenderMode.LIST
    assert "contact_admin" in [o.option_id for o in main_list.options]


def test_shipped_replies_match_original_copy(catalog):
    sell = catalog.resolve_option("main", "sell_property")
    assert "send us the details (address, price, photos)" in sell.action.text

    listings = catalog.resolve_option("main", "view_listings")
    assert "Cozy Apartment - $250,000" in listings.action.text
    assert "Luxury Condo - $500,000" in listings.action.text

    contact_admin = catalog.resolve_option("main_list", "contact_admin")
    assert isinstance(contact_admin.action, NotifyAdminAndReply)
    assert contact_admin.action.admin_text("254722000000").startswith(
        "User 254722000000 wants to contact you"
    )


def test_get_menu_unknown_raises(catalog):
    with pytest.raises(MenuNotFoundError):
        catalog.get_menu("does_not_exist")
    assert catalog.find_menu("does_not_exist") is None
    assert catalog.find_menu(None) is None


def test_resolve_option_prefers_id_then_label(catalog):
    assert catalog.resolve_option("main", "buy_property").option_id == "buy_property"
    assert catalog.resolve_option("main", "Buy Property").option_id == "buy_property"
    assert catalog.resolve_option("main", "  buy   PROPERTY ").option_id == "buy_property"


def test_resolve_option_misses(catalog):
    assert catalog.resolve_option("main", "contact_admin") is None
    assert catalog.resolve_option("main", "") is None
    assert catalog.resolve_option("nope", "buy_property") is None


def test_match_label_ignores_option_ids(catalog):
    assert catalog.match_label("main", "view_listings") is None
    assert catalog.match_label("main", "view listings").option_id == "view_listings"
    assert catalog.match_label("admin_test", "test: sell property").option_id == "test_sell_property"


def test_id_match_wins_over_label_match():
    menu = MenuDefinition(
        menu_id="tricky",
        prompt="Pick",
        options=(_option("a", "b"), _option("b", "Other")),
    )
    catalog = MenuCatalog([menu])
    assert catalog.resolve_option("tricky", "b").option_id == "b"


def test_button_menu_rejects_more_than_three_options():
    with pytest.raises(MenuDefinitionError, match="at most 3"):
        MenuDefinition(
            menu_id="too_many",
            prompt="Pick",
            options=tuple(_option(f"o{i}", f"Option {i}") for i in range(4)),
        )


def test_list_menu_allows_more_options():
    menu = MenuDefinition(
        menu_id="long",
        prompt="Pick",
        options=tuple(_option(f"o{i}", f"Option {i}") for i in range(8)),
        render_mode=RenderMode.LIST,
    )
    assert len(menu.options) == 8


def test_duplicate_option_ids_and_labels_rejected():
    with pytest.raises(MenuDefinitionError, match="Duplicate option id"):
        MenuDefinition(menu_id="m", prompt="p", options=(_option("x", "One"), _option("x", "Two")))
    with pytest.raises(MenuDefinitionError, match="Duplicate option label"):
        MenuDefinition(menu_id="m", prompt="p", options=(_option("x", "One"), _option("y", "ONE")))


def test_empty_menu_rejected():
    with pytest.raises(MenuDefinitionError, match="no options"):
        MenuDefinition(menu_id="m", prompt="p", options=())


def test_duplicate_menu_ids_rejected():
    menu = MenuDefinition(menu_id="m", prompt="p", options=(_option("x", "One"),))
    with pytest.raises(MenuDefinitionError, match="Duplicate menu id"):
        MenuCatalog([menu, menu])


def test_catalog_is_read_only(catalog):
    with pytest.raises(TypeError):
        catalog["main"] = catalog["main_list"]  # type: ignore[index]


def test_catalog_from_dict_parses_reply_kinds():
    catalog = catalog_from_dict(
        {
            "menus": {
                "support": {
                    "prompt": "Need help?",
                    "render_mode": "list",
                    "options": [
                        {"id": "faq", "label": "FAQ", "reply": {"text": "See our FAQ"}},
                        {
                            "id": "human",
                            "label": "Human",
                            "reply": {
                                "kind": "notify_admin",
                                "text": "Hold on",
                                "admin_template": "{contact} needs help",
                            },
                        },
                    ],
                }
            }
        }
    )
    support = catalog.get_menu("support")
    assert support.render_mode == RenderMode.LIST
    assert support.options[0].action == StaticReply(text="See our FAQ")
    assert support.options[1].action.admin_text("123") == "123 needs help"


@pytest.mark.parametrize(
    "data, message",
    [
        ({}, "no menus"),
        ({"menus": {"m": {"render_mode": "carousel", "options": []}}}, "unknown render_mode"),
        ({"menus": {"m": {"options": [{"id": "x", "label": "X"}]}}}, "missing its reply"),
        (
            {"menus": {"m": {"options": [{"id": "x", "label": "X", "reply": {"kind": "shout", "text": "hi"}}]}}},
            "unknown reply kind",
        ),
        (
            {"menus": {"m": {"options": [{"id": "x", "label": "X", "reply": {"kind": "notify_admin", "text": "hi"}}]}}},
            "no admin_template",
        ),
        ({"menus": {"m": {"options": [{"label": "X", "reply": {"text": "hi"}}]}}}, "without id/label"),
    ],
)
def test_catalog_from_dict_rejects_invalid_definitions(data, message):
    with pytest.raises(MenuDefinitionError, match=message):
        catalog_from_dict(data)


def test_load_catalog_missing_file(tmp_path):
    with pytest.raises(MenuDefinitionError, match="not found"):
        load_catalog(tmp_path / "missing.yml")


def test_load_catalog_invalid_yaml(tmp_path):
    bad = tmp_path / "menus.yml"
    bad.write_text("menus: [unclosed", encoding="utf-8")
    with pytest.raises(MenuDefinitionError, match="Invalid YAML"):
        load_catalog(bad)
