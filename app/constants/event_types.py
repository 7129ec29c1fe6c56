"""
Event type constants for structured log records.

Use these instead of string literals to ensure consistency.
"""

# ---- WhatsApp ----
EVENT_WHATSAPP_SIGNATURE_VERIFICATION_FAILURE = "whatsapp.signature_verification_failure"
EVENT_WHATSAPP_INBOUND_RECEIVED = "whatsapp.inbound_received"
EVENT_WHATSAPP_MESSAGE = "whatsapp.message"
EVENT_WHATSAPP_DUPLICATE_MESSAGE = "whatsapp.duplicate_message"
EVENT_WHATSAPP_WEBHOOK_FAILURE = "whatsapp.webhook_failure"
EVENT_WHATSAPP_SEND_FAILURE = "whatsapp.send_failure"

# ---- Dispatch ----
EVENT_MENU_SENT = "menu.sent"
EVENT_DISPATCH_SELECTION = "dispatch.selection"
EVENT_DISPATCH_UNKNOWN_SELECTION = "dispatch.unknown_selection"
EVENT_DISPATCH_HELP_FALLBACK = "dispatch.help_fallback"
EVENT_ADMIN_NOTIFIED = "admin.notified"

# ---- Startup ----
EVENT_STARTUP_NOTIFY = "startup.notify"
EVENT_STARTUP_NOTIFY_FAILURE = "startup.notify_failure"
