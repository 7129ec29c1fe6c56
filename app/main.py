import logging

from fastapi import FastAPI, Request

from app.api.admin import router as admin_router
from app.api.demo import router as demo_router
from app.api.webhooks import router as webhooks_router
from app.constants.event_types import EVENT_STARTUP_NOTIFY, EVENT_STARTUP_NOTIFY_FAILURE
from app.core.config import Settings, settings
from app.services.dispatch import ContactStore, DispatchEngine, WhatsAppSender
from app.services.menus import load_catalog
from app.services.processed_messages import ProcessedMessageCache

logger = logging.getLogger(__name__)

app = FastAPI(title="FY'S PROPERTY WhatsApp Bot")


def validate_settings(cfg: Settings) -> None:
    """Fail fast on settings that must not reach production."""
    if cfg.app_env != "production":
        return

    production_errors = []
    if not cfg.admin_api_key:
        production_errors.append(
            "ADMIN_API_KEY is required in production. "
            "Set ADMIN_API_KEY environment variable with a strong random key."
        )
    if not cfg.whatsapp_app_secret:
        production_errors.append(
            "WHATSAPP_APP_SECRET is required in production for webhook signature verification."
        )
    if cfg.demo_mode:
        production_errors.append("DEMO_MODE must be False in production.")

    if production_errors:
        error_message = "Production environment validation failed:\n\n" + "\n".join(
            f"  - {error}" for error in production_errors
        )
        logger.error(error_message)
        raise RuntimeError(error_message)


def build_engine(cfg: Settings) -> DispatchEngine:
    """Load the menu catalog and wire up a dispatch engine from settings."""
    catalog = load_catalog(cfg.menu_catalog_path)
    return DispatchEngine(
        catalog,
        ContactStore(),
        default_menu_id=cfg.default_menu_id,
        admin_address=cfg.admin_whatsapp_number,
        admin_menu_id=cfg.admin_menu_id,
        menu_keyword=cfg.menu_keyword,
        fallback_help_text=cfg.fallback_help_text,
        unknown_option_text=cfg.unknown_option_text,
        startup_message=cfg.startup_message,
    )


@app.on_event("startup")
async def startup_event():
    """Validate settings, build the engine, and notify the admin that the bot is live."""
    validate_settings(settings)

    engine = build_engine(settings)
    sender = WhatsAppSender(dry_run=settings.whatsapp_dry_run)
    app.state.engine = engine
    app.state.sender = sender
    app.state.processed_messages = ProcessedMessageCache(settings.processed_message_cache_size)

    logger.info(
        "Startup: Configuration loaded - "
        f"Environment: {settings.app_env}, "
        f"Menus: {len(engine.catalog)}, "
        f"Default menu: {engine.default_menu_id}, "
        f"Admin configured: {engine.admin_address is not None}, "
        f"WhatsApp dry-run: {settings.whatsapp_dry_run}"
    )
    if settings.demo_mode:
        logger.warning("DEMO MODE ENABLED - DO NOT USE IN PROD")

    if not settings.startup_notify_enabled:
        return
    if not engine.admin_address:
        logger.info("Startup: No admin WhatsApp number configured - skipping startup notification")
        return

    deliveries = await engine.run_startup(sender)
    failed = [d for d in deliveries if not d.ok]
    if failed:
        logger.error(
            f"Startup: {len(failed)} of {len(deliveries)} admin notifications failed",
            extra={"event_type": EVENT_STARTUP_NOTIFY_FAILURE},
        )
    else:
        logger.info(
            f"Startup: Admin {engine.admin_address} notified",
            extra={"event_type": EVENT_STARTUP_NOTIFY},
        )


@app.get("/health")
def health(request: Request):
    """
    Health check endpoint with menu routing visibility.

    Returns 200 immediately - used for basic health checks.
    """
    engine = getattr(request.app.state, "engine", None)
    return {
        "ok": engine is not None,
        "menus": sorted(engine.catalog) if engine else [],
        "routing": {
            "default_menu_id": engine.default_menu_id if engine else None,
            "admin_menu_id": engine.admin_menu_id if engine else None,
            "admin_configured": bool(engine and engine.admin_address),
        },
        "whatsapp_dry_run": settings.whatsapp_dry_run,
    }


app.include_router(webhooks_router, prefix="/webhooks")
app.include_router(admin_router, prefix="/admin", tags=["admin"])
app.include_router(demo_router, prefix="/demo", tags=["demo"])
