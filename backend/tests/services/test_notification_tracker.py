"""Notification Tracker — best-effort delivery, retraction, escalation."""

from porthub.core.notification_content import MessageContent
from porthub.services.notification_tracker import NotificationTracker

NOTICE = MessageContent(text="hello", kind="notice")


async def test_deliver_returns_ref(notifier, channel):
    ref = await notifier.deliver("u-1", NOTICE)
    assert ref == channel.sent[0].ref


async def test_failed_delivery_returns_none(notifier, channel):
    channel.failing_identities.add("u-1")
    assert await notifier.deliver("u-1", NOTICE) is None


async def test_raising_channel_is_absorbed(notifier, channel):
    channel.raising_identities.add("u-1")
    assert await notifier.deliver("u-1", NOTICE) is None


async def test_missing_recipient_skipped(notifier, channel):
    assert await notifier.deliver(None, NOTICE) is None
    assert channel.sent == []


async def test_deliver_many_keeps_order(notifier, channel):
    channel.failing_identities.add("u-2")
    refs = await notifier.deliver_many(("u-1", NOTICE), ("u-2", NOTICE), ("u-3", NOTICE))
    assert refs[0] is not None
    assert refs[1] is None
    assert refs[2] is not None


async def test_retract_counts_successes_and_skips_empty(notifier, channel):
    assert await notifier.retract([None]) == 0
    assert await notifier.retract(["msg-1", None, "msg-2"]) == 2
    assert channel.retracted == ["msg-1", "msg-2"]


async def test_retract_failure_reported(notifier, channel):
    channel.retract_fails = True
    assert await notifier.retract(["msg-1"]) == 0


async def test_escalate_goes_to_ops(notifier, channel):
    await notifier.escalate(NOTICE)
    assert channel.sent[0].identity == "ops-room"


async def test_escalate_without_ops_is_logged_only(channel):
    tracker = NotificationTracker(channel, ops_identity="")
    assert await tracker.escalate(NOTICE) is None
    assert channel.sent == []
