"""
Tests for outbound delivery and engine.handle(): failure isolation and
per-contact ordering.
"""

import asyncio

import pytest

from app.constants.outcomes import OUTCOME_GREETING, OUTCOME_SELECTION
from app.services.dispatch import (
    RawInboundMessage,
    SendMenu,
    SendText,
    WhatsAppSender,
    deliver_actions,
)
from tests.helpers.fake_sender import FakeSender
from tests.helpers.whatsapp import ADMIN_NUMBER


@pytest.mark.asyncio
async def test_deliver_actions_sends_text_and_menu(catalog, sender):
    results = await deliver_actions(
        [SendMenu(to="A", menu_id="main"), SendText(to="A", text="hello")], sender, catalog
    )

    assert [r.ok for r in results] == [True, True]
    assert sender.menus_to("A") == ["main"]
    assert sender.texts_to("A") == ["hello"]


@pytest.mark.asyncio
async def test_deliver_actions_empty_batch(catalog, sender):
    assert await deliver_actions([], sender, catalog) == []
    assert sender.sent == []


@pytest.mark.asyncio
async def test_failed_send_is_reported_not_raised(catalog):
    sender = FakeSender(fail_for={"A"})
    results = await deliver_actions([SendText(to="A", text="hello")], sender, catalog)

    assert len(results) == 1
    assert results[0].ok is False
    assert "simulated send failure" in results[0].error
    assert results[0].to_dict()["action"] == {"type": "send_text", "to": "A", "text": "hello"}


@pytest.mark.asyncio
async def test_unknown_menu_is_a_failed_delivery(catalog, sender):
    results = await deliver_actions([SendMenu(to="A", menu_id="missing")], sender, catalog)
    assert results[0].ok is False
    assert sender.sent == []


@pytest.mark.asyncio
async def test_admin_send_failure_does_not_affect_user_reply(list_engine):
    sender = FakeSender(fail_for={ADMIN_NUMBER})
    await list_engine.handle(RawInboundMessage(sender="A", body="hi"), sender)

    handled = await list_engine.handle(
        RawInboundMessage(sender="A", selected_option_id="contact_admin"), sender
    )

    assert handled.outcome == OUTCOME_SELECTION
    assert len(handled.actions) == 2
    user_result, admin_result = handled.deliveries
    assert user_result.ok is True
    assert admin_result.ok is False
    assert handled.delivered is False
    assert sender.texts_to("A")[-1].startswith("Thanks! An administrator")


@pytest.mark.asyncio
async def test_user_send_failure_does_not_suppress_admin_notification(list_engine):
    sender = FakeSender(fail_for={"A"})
    await list_engine.handle(RawInboundMessage(sender="A", body="hi"), sender)

    handled = await list_engine.handle(
        RawInboundMessage(sender="A", selected_option_id="contact_admin"), sender
    )

    assert [d.ok for d in handled.deliveries] == [False, True]
    assert sender.texts_to(ADMIN_NUMBER) == [
        "User A wants to contact you. Reply on WhatsApp: wa.me/A"
    ]


@pytest.mark.asyncio
async def test_failed_greeting_still_marks_contact_greeted(engine):
    # Sends are not retried; the next message is handled as a greeted contact
    sender = FakeSender(fail_for={"A"})
    handled = await engine.handle(RawInboundMessage(sender="A", body="hi"), sender)
    assert handled.outcome == OUTCOME_GREETING
    assert handled.delivered is False
    assert engine.contacts.get("A").has_been_greeted is True


@pytest.mark.asyncio
async def test_same_contact_events_processed_in_order(engine):
    sender = FakeSender(delays={"A": 0.05})

    first = asyncio.create_task(engine.handle(RawInboundMessage(sender="A", body="hi"), sender))
    second = asyncio.create_task(
        engine.handle(RawInboundMessage(sender="A", selected_option_id="buy_property"), sender)
    )
    await asyncio.gather(first, second)

    assert first.result().outcome == OUTCOME_GREETING
    assert second.result().outcome == OUTCOME_SELECTION
    kinds = [kind for kind, to, _ in sender.sent if to == "A"]
    assert kinds == ["menu", "text"]


@pytest.mark.asyncio
async def test_slow_contact_does_not_block_other_contacts(engine):
    sender = FakeSender(delays={"A": 0.2})

    slow = asyncio.create_task(engine.handle(RawInboundMessage(sender="A", body="hi"), sender))
    fast = asyncio.create_task(engine.handle(RawInboundMessage(sender="B", body="hi"), sender))
    await asyncio.gather(slow, fast)

    # B's menu completes before A's delayed send
    assert [to for _, to, _ in sender.sent] == ["B", "A"]


@pytest.mark.asyncio
async def test_run_startup_delivers_to_admin(engine, sender):
    results = await engine.run_startup(sender)

    assert all(r.ok for r in results)
    assert sender.texts_to(ADMIN_NUMBER) == ["FY'S PROPERTY Bot is LIVE!"]
    assert sender.menus_to(ADMIN_NUMBER) == ["admin_test"]


@pytest.mark.asyncio
async def test_whatsapp_sender_dry_run(catalog):
    sender = WhatsAppSender(dry_run=True)
    text_result = await sender.send_text("254711111111", "hello")
    menu_result = await sender.send_menu("254711111111", catalog.get_menu("main"))

    assert text_result["status"] == "dry_run"
    assert menu_result["status"] == "dry_run"
    assert menu_result["menu_id"] == "main"
