"""
Provider constants for inbound message sources.

Use these instead of string literals to avoid drift and typos.
"""

PROVIDER_WHATSAPP = "whatsapp"
PROVIDER_DEMO = "demo"
