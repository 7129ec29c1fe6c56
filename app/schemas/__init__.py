"""
Pydantic schemas for API request/response validation.
"""

from app.schemas.admin import (
    ContactResponse,
    MenuListResponse,
    MenuOptionResponse,
    MenuResponse,
    StartupNotifyResponse,
)
from app.schemas.demo import DemoInboundRequest, DemoInboundResponse

__all__ = [
    "ContactResponse",
    "DemoInboundRequest",
    "DemoInboundResponse",
    "MenuListResponse",
    "MenuOptionResponse",
    "MenuResponse",
    "StartupNotifyResponse",
]
