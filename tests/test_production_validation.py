"""
Tests for startup settings validation and engine wiring.
"""

import pytest

from app.core.config import Settings
from app.main import build_engine, validate_settings
from app.services.menus import MenuDefinitionError, MenuNotFoundError


def _settings(**overrides) -> Settings:
    values = {
        "whatsapp_verify_token": "verify",
        "whatsapp_access_token": "token",
        "whatsapp_phone_number_id": "12345",
    }
    values.update(overrides)
    return Settings(**values)


def test_dev_settings_pass_validation():
    validate_settings(_settings(app_env="dev"))


def test_production_requires_admin_key_and_app_secret():
    with pytest.raises(RuntimeError) as exc_info:
        validate_settings(_settings(app_env="production", admin_api_key=None, whatsapp_app_secret=None))
    message = str(exc_info.value)
    assert "ADMIN_API_KEY" in message
    assert "WHATSAPP_APP_SECRET" in message


def test_production_rejects_demo_mode():
    with pytest.raises(RuntimeError, match="DEMO_MODE"):
        validate_settings(
            _settings(
                app_env="production",
                admin_api_key="k",
                whatsapp_app_secret="s",
                demo_mode=True,
            )
        )


def test_production_settings_pass_validation():
    validate_settings(
        _settings(app_env="production", admin_api_key="k", whatsapp_app_secret="s", demo_mode=False)
    )


def test_build_engine_from_settings():
    engine = build_engine(
        _settings(admin_whatsapp_number="254700000009", admin_menu_id="admin_test", menu_keyword="Menu")
    )
    assert engine.default_menu_id == "main"
    assert engine.menu_for("254700000009") == "admin_test"
    assert engine.menu_for("254711111111") == "main"


def test_empty_admin_menu_disables_admin_routing():
    engine = build_engine(_settings(admin_whatsapp_number="254700000009", admin_menu_id=""))
    assert engine.admin_menu_id is None
    assert engine.menu_for("254700000009") == "main"


def test_build_engine_unknown_default_menu():
    with pytest.raises(MenuNotFoundError):
        build_engine(_settings(default_menu_id="does_not_exist"))


def test_build_engine_missing_catalog(tmp_path):
    with pytest.raises(MenuDefinitionError):
        build_engine(_settings(menu_catalog_path=str(tmp_path / "missing.yml")))
