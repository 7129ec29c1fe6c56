import logging

from fastapi import APIRouter, Depends, HTTPException, Security

from app.api.auth import get_admin_auth
from app.api.dependencies import get_engine, get_sender
from app.constants.event_types import EVENT_STARTUP_NOTIFY
from app.schemas.admin import (
    ContactResponse,
    MenuListResponse,
    MenuResponse,
    StartupNotifyResponse,
)
from app.services.dispatch import DispatchEngine, MessageSender

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/menus", response_model=MenuListResponse)
def list_menus(
    engine: DispatchEngine = Depends(get_engine),
    _auth: bool = Security(get_admin_auth),
):
    """List every menu in the catalog and the current routing."""
    return MenuListResponse(
        default_menu_id=engine.default_menu_id,
        admin_menu_id=engine.admin_menu_id,
        menus=[MenuResponse.from_menu(menu) for menu in engine.catalog.values()],
    )


@router.get("/menus/{menu_id}", response_model=MenuResponse)
def get_menu(
    menu_id: str,
    engine: DispatchEngine = Depends(get_engine),
    _auth: bool = Security(get_admin_auth),
):
    menu = engine.catalog.find_menu(menu_id)
    if menu is None:
        raise HTTPException(status_code=404, detail="Menu not found")
    return MenuResponse.from_menu(menu)


@router.get("/contacts/{address}", response_model=ContactResponse)
def get_contact(
    address: str,
    engine: DispatchEngine = Depends(get_engine),
    _auth: bool = Security(get_admin_auth),
):
    """Conversation state for one contact (in-memory; lost on restart)."""
    contact = engine.contacts.get(address)
    if contact is None:
        raise HTTPException(status_code=404, detail="Contact not found")
    return ContactResponse(**contact.to_dict())


@router.get("/contacts")
def count_contacts(
    engine: DispatchEngine = Depends(get_engine),
    _auth: bool = Security(get_admin_auth),
):
    return {"contacts": len(engine.contacts)}


@router.post("/startup-notify", response_model=StartupNotifyResponse)
async def resend_startup_notification(
    engine: DispatchEngine = Depends(get_engine),
    sender: MessageSender = Depends(get_sender),
    _auth: bool = Security(get_admin_auth),
):
    """Re-run the startup notification (live message + admin menu)."""
    if not engine.admin_address:
        raise HTTPException(status_code=400, detail="Admin WhatsApp number is not configured")

    deliveries = await engine.run_startup(sender)
    logger.info(
        f"Startup notification re-sent to {engine.admin_address}",
        extra={"event_type": EVENT_STARTUP_NOTIFY},
    )
    return StartupNotifyResponse(
        sent=all(d.ok for d in deliveries),
        admin_address=engine.admin_address,
        deliveries=[d.to_dict() for d in deliveries],
    )
