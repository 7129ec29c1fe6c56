from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MENU_CATALOG_PATH = Path(__file__).resolve().parent.parent / "copy" / "menus.yml"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        validate_assignment=True,
    )

    app_env: str = "dev"

    whatsapp_verify_token: str
    whatsapp_access_token: str
    whatsapp_phone_number_id: str
    whatsapp_app_secret: str | None = None  # App Secret for webhook signature verification
    whatsapp_dry_run: bool = True  # Set to False in production to enable real sending
    whatsapp_api_version: str = "v18.0"

    # Administrator WhatsApp number (with country code, no +)
    admin_whatsapp_number: str | None = None

    # Menu routing
    menu_catalog_path: str = str(DEFAULT_MENU_CATALOG_PATH)
    default_menu_id: str = "main"
    admin_menu_id: str | None = "admin_test"  # Empty disables admin-specific routing
    menu_keyword: str = "menu"

    fallback_help_text: str = "Send 'menu' at any time to see the options again."
    unknown_option_text: str = (
        "Unknown option. Please try again by sending any message to see the menu."
    )

    # Startup notification to the administrator
    startup_notify_enabled: bool = True
    startup_message: str = "FY'S PROPERTY Bot is LIVE!"

    admin_api_key: str | None = (
        None  # Optional - if not set, admin endpoints are unprotected (dev mode)
    )

    # Demo mode (development/demo only - must be False in production)
    demo_mode: bool = False

    # Number of WhatsApp message ids remembered for duplicate delivery detection
    processed_message_cache_size: int = 1000


# Settings will load from environment variables or .env file
# Required fields will raise ValidationError if missing (fail-fast)
settings = Settings()
