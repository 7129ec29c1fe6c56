from app.services.messaging import compute_whatsapp_signature, verify_whatsapp_signature

BODY = b'{"entry": []}'
SECRET = "app_secret_123"


def test_valid_signature():
    header = compute_whatsapp_signature(BODY, SECRET)
    assert header.startswith("sha256=")
    assert verify_whatsapp_signature(BODY, header, app_secret=SECRET) is True


def test_signature_for_other_body_rejected():
    header = compute_whatsapp_signature(b"{}", SECRET)
    assert verify_whatsapp_signature(BODY, header, app_secret=SECRET) is False


def test_missing_or_malformed_header_rejected():
    assert verify_whatsapp_signature(BODY, None, app_secret=SECRET) is False
    assert verify_whatsapp_signature(BODY, "md5=abc", app_secret=SECRET) is False


def test_verification_skipped_without_secret(monkeypatch):
    from app.core.config import settings

    monkeypatch.setattr(settings, "whatsapp_app_secret", None)
    assert verify_whatsapp_signature(BODY, None) is True
