"""
Demo endpoints for local testing and demonstrations.

These endpoints are only available when DEMO_MODE=true.
In production (DEMO_MODE=false), all endpoints return 404.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from app.api.dependencies import get_engine
from app.constants.providers import PROVIDER_DEMO
from app.core.config import settings
from app.schemas.demo import DemoInboundRequest, DemoInboundResponse
from app.services.dispatch import DispatchEngine, RawInboundMessage, SendMenu

logger = logging.getLogger(__name__)

router = APIRouter()


def require_demo_mode():
    """
    Dependency that enforces DEMO_MODE must be enabled.

    Raises:
        HTTPException: 404 if DEMO_MODE is False
    """
    if not settings.demo_mode:
        raise HTTPException(status_code=404, detail="Not found")


def _describe_action(engine: DispatchEngine, action) -> dict:
    if isinstance(action, SendMenu):
        menu = engine.catalog.get_menu(action.menu_id)
        return {
            "type": "send_menu",
            "to": action.to,
            "menu_id": menu.menu_id,
            "render_mode": str(menu.render_mode),
            "prompt": menu.prompt,
            "options": [{"id": o.option_id, "label": o.label} for o in menu.options],
        }
    return {"type": "send_text", "to": action.to, "text": action.text}


@router.post(
    "/inbound",
    response_model=DemoInboundResponse,
    dependencies=[Depends(require_demo_mode)],
)
async def demo_inbound(
    body: DemoInboundRequest,
    engine: DispatchEngine = Depends(get_engine),
):
    """
    Run an inbound message through the engine without touching WhatsApp.

    Contact state is shared with the live webhook path.
    """
    raw = RawInboundMessage(
        sender=body.from_number,
        body=body.text,
        selected_option_id=body.selected_option_id,
        provider=PROVIDER_DEMO,
    )
    async with engine.contacts.lock_for(raw.sender):
        result = engine.dispatch(raw)
        contact = engine.contacts.get_or_create(raw.sender).to_dict()

    logger.info(f"[DEMO] {raw.sender} -> {result.outcome}")
    return DemoInboundResponse(
        outcome=result.outcome,
        actions=[_describe_action(engine, a) for a in result.actions],
        contact=contact,
    )
