"""
Demo endpoint schemas.
"""

from typing import Any

from pydantic import BaseModel


class DemoInboundRequest(BaseModel):
    """Simulated inbound message."""

    from_number: str
    text: str | None = None
    # Set to simulate a structured button/list reply
    selected_option_id: str | None = None


class DemoInboundResponse(BaseModel):
    outcome: str
    actions: list[dict[str, Any]]
    contact: dict[str, Any]
