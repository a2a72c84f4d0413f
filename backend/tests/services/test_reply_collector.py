"""Reply Collector — one-shot answers, timeouts, cancellation."""

import asyncio

from porthub.services.reply_collector import CancellationToken, ReplyCollector


async def test_offer_before_wait_is_returned():
    collector = ReplyCollector(timeout_seconds=1.0)
    pending = collector.expect("k")
    assert collector.offer("k", True)
    assert await collector.wait(pending) is True
    assert not collector.is_pending("k")


async def test_offer_during_wait_resolves_waiter():
    collector = ReplyCollector(timeout_seconds=1.0)
    pending = collector.expect("k")
    waiter = asyncio.create_task(collector.wait(pending))
    await asyncio.sleep(0)
    assert collector.offer("k", "like")
    assert await waiter == "like"


async def test_only_first_offer_accepted():
    collector = ReplyCollector(timeout_seconds=1.0)
    collector.expect("k")
    assert collector.offer("k", 1)
    assert not collector.offer("k", 2)


async def test_timeout_returns_none_and_refuses_late_offer():
    collector = ReplyCollector(timeout_seconds=0.01)
    pending = collector.expect("k")
    assert await collector.wait(pending) is None
    assert pending.token.cancelled
    assert not collector.offer("k", True)


async def test_per_reply_timeout_override():
    collector = ReplyCollector(timeout_seconds=60.0)
    pending = collector.expect("k", timeout_seconds=0.01)
    assert await collector.wait(pending) is None


async def test_zero_timeout_override_is_kept():
    collector = ReplyCollector(timeout_seconds=60.0)
    pending = collector.expect("k", timeout_seconds=0)
    assert pending.timeout_seconds == 0
    assert await collector.wait(pending) is None


async def test_cancel_resolves_waiter_with_none():
    collector = ReplyCollector(timeout_seconds=1.0)
    pending = collector.expect("k")
    waiter = asyncio.create_task(collector.wait(pending))
    await asyncio.sleep(0)
    assert collector.cancel("k")
    assert await waiter is None
    assert not collector.cancel("k")


async def test_expect_again_withdraws_previous_wait():
    collector = ReplyCollector(timeout_seconds=1.0)
    old = collector.expect("k")
    new = collector.expect("k")
    assert await collector.wait(old) is None
    assert collector.offer("k", "fresh")
    assert await collector.wait(new) == "fresh"


async def test_offer_for_unknown_key():
    assert not ReplyCollector().offer("nobody", True)


async def test_cancel_all():
    collector = ReplyCollector(timeout_seconds=1.0)
    a, b = collector.expect("a"), collector.expect("b")
    assert collector.cancel_all() == 2
    assert await collector.wait(a) is None
    assert await collector.wait(b) is None


def test_token_callbacks_fire_once():
    calls = []
    token = CancellationToken()
    token.on_cancel(lambda: calls.append(1))
    token.cancel()
    token.cancel()
    token.on_cancel(lambda: calls.append(2))
    assert calls == [1, 2]
