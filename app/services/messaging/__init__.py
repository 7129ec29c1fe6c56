# Messaging: WhatsApp send (text + interactive menus), webhook signatures
# Re-export so "from app.services.messaging import ..." works (CI and callers).

from app.services.messaging.messaging import (
    build_menu_payload,
    build_text_payload,
    send_whatsapp_menu,
    send_whatsapp_message,
)
from app.services.messaging.whatsapp_verification import (
    compute_whatsapp_signature,
    verify_whatsapp_signature,
)

__all__ = [
    "build_menu_payload",
    "build_text_payload",
    "compute_whatsapp_signature",
    "send_whatsapp_menu",
    "send_whatsapp_message",
    "verify_whatsapp_signature",
]
