"""Feedback Tally — counters derived from records."""

from porthub.core.domain_types import AccountId, FeedbackId, JobId
from porthub.core.feedback_tally import tally
from porthub.core.records import FeedbackRecord, FeedbackTally


def _record(n: int, liked: bool) -> FeedbackRecord:
    return FeedbackRecord(
        id=FeedbackId(f"f{n}"), job_id=JobId(f"j{n}"),
        reviewer_id=AccountId("c1"), reviewed_id=AccountId("p1"), liked=liked,
    )


def test_empty_tally_is_zero():
    assert tally([]) == FeedbackTally(likes=0, dislikes=0, total=0)


def test_counts_likes_and_dislikes():
    records = [_record(1, True), _record(2, False), _record(3, True)]
    assert tally(records) == FeedbackTally(likes=2, dislikes=1, total=3)


def test_tally_is_order_independent():
    records = [_record(1, True), _record(2, False), _record(3, False)]
    assert tally(records) == tally(list(reversed(records)))


def test_accepts_any_iterable():
    assert tally(_record(n, True) for n in range(4)).likes == 4
