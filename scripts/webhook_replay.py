"""
Replay a WhatsApp webhook to a running bot.

Useful for walking through the menu flow without a phone: send free text, or
simulate tapping a menu button/list row.

Usage:
    python scripts/webhook_replay.py --from 254711111111 --text hi
    python scripts/webhook_replay.py --from 254711111111 --select sell_property
    python scripts/webhook_replay.py --from 254711111111 --select contact_admin --list
"""

import argparse
import json
import sys
import time
import uuid
from pathlib import Path

# Add app directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import httpx

from app.core.config import settings
from app.services.messaging import compute_whatsapp_signature


def build_message(wa_from: str, text: str | None, option_id: str | None, as_list: bool) -> dict:
    message = {
        "from": wa_from,
        "id": f"wamid.replay.{uuid.uuid4().hex[:12]}",
        "timestamp": str(int(time.time())),
    }
    if option_id:
        reply_type = "list_reply" if as_list else "button_reply"
        message["type"] = "interactive"
        message["interactive"] = {
            "type": reply_type,
            reply_type: {"id": option_id, "title": text or option_id},
        }
    else:
        message["type"] = "text"
        message["text"] = {"body": text or ""}
    return message


def build_payload(message: dict) -> dict:
    return {
        "object": "whatsapp_business_account",
        "entry": [
            {
                "id": "WHATSAPP_BUSINESS_ACCOUNT_ID",
                "changes": [
                    {
                        "value": {
                            "messaging_product": "whatsapp",
                            "metadata": {"phone_number_id": settings.whatsapp_phone_number_id},
                            "contacts": [{"profile": {"name": "Replay"}, "wa_id": message["from"]}],
                            "messages": [message],
                        },
                        "field": "messages",
                    }
                ],
            }
        ],
    }


def send_webhook_payload(payload: dict, base_url: str) -> bool:
    webhook_url = f"{base_url.rstrip('/')}/webhooks/whatsapp"
    body = json.dumps(payload).encode("utf-8")

    headers = {"Content-Type": "application/json"}
    if settings.whatsapp_app_secret:
        headers["X-Hub-Signature-256"] = compute_whatsapp_signature(body, settings.whatsapp_app_secret)

    print(f"Sending webhook to {webhook_url}")
    try:
        with httpx.Client(timeout=10.0) as client:
            response = client.post(webhook_url, content=body, headers=headers)
    except httpx.HTTPError as e:
        print(f"Error sending webhook: {e}")
        return False

    print(f"Status: {response.status_code}")
    try:
        data = response.json()
    except ValueError:
        print(response.text)
        return response.status_code == 200

    for result in data.get("results", []):
        print(f"  {result.get('wa_from')}: {result.get('outcome') or result.get('type')}")
        for delivery in result.get("deliveries", []):
            action = delivery["action"]
            target = action.get("menu_id") or action.get("text")
            state = "ok" if delivery["ok"] else f"FAILED ({delivery['error']})"
            print(f"    -> {action['type']} to {action['to']}: {target} [{state}]")
    return response.status_code == 200


def main() -> int:
    parser = argparse.ArgumentParser(description="Replay a WhatsApp webhook to the bot")
    parser.add_argument("--from", dest="wa_from", default="254711111111", help="Sender number")
    parser.add_argument("--text", default=None, help="Message text (or reply title with --select)")
    parser.add_argument("--select", dest="option_id", default=None, help="Menu option id to select")
    parser.add_argument("--list", dest="as_list", action="store_true", help="Send as a list reply")
    parser.add_argument("--base-url", default="http://localhost:8000")
    args = parser.parse_args()

    if not args.text and not args.option_id:
        args.text = "hi"

    message = build_message(args.wa_from, args.text, args.option_id, args.as_list)
    ok = send_webhook_payload(build_payload(message), args.base_url)
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
