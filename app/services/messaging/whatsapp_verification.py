"""
WhatsApp webhook signature verification.

Meta signs webhook deliveries with HMAC-SHA256 of the raw body using the
App Secret and sends it as X-Hub-Signature-256: sha256=<hex_digest>.
"""

import hashlib
import hmac
import logging

from app.core.config import settings

logger = logging.getLogger(__name__)

SIGNATURE_PREFIX = "sha256="


def compute_whatsapp_signature(payload: bytes, app_secret: str) -> str:
    """Header value Meta would send for this payload."""
    digest = hmac.new(app_secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()
    return f"{SIGNATURE_PREFIX}{digest}"


def verify_whatsapp_signature(
    payload: bytes,
    signature_header: str | None,
    app_secret: str | None = None,
) -> bool:
    """
    Verify a WhatsApp webhook signature.

    Args:
        payload: Raw request body (bytes)
        signature_header: X-Hub-Signature-256 header value
        app_secret: Override for settings.whatsapp_app_secret

    Returns:
        True if the signature is valid, or if no app secret is configured (dev mode)
    """
    secret = app_secret if app_secret is not None else settings.whatsapp_app_secret
    if not secret:
        logger.warning(
            "WhatsApp app secret not configured - skipping signature verification. "
            "Set WHATSAPP_APP_SECRET in production."
        )
        return True

    if not signature_header:
        logger.warning("Missing X-Hub-Signature-256 header in WhatsApp webhook")
        return False

    if not signature_header.startswith(SIGNATURE_PREFIX):
        logger.warning(f"Invalid signature header format: {signature_header[:32]}")
        return False

    expected = compute_whatsapp_signature(payload, secret)
    # Constant-time comparison
    is_valid = hmac.compare_digest(signature_header, expected)
    if not is_valid:
        logger.warning("Invalid WhatsApp webhook signature - request rejected")
    return is_valid
