"""Feedback Tally — pure aggregation of like/dislike records.

Invariants:
    - tally() is a full recomputation from source records, never a delta
    - likes + dislikes == total
"""

from collections.abc import Iterable

from porthub.core.records import FeedbackRecord, FeedbackTally


def tally(records: Iterable[FeedbackRecord]) -> FeedbackTally:
    total = 0
    likes = 0
    for record in records:
        total += 1
        if record.liked:
            likes += 1
    return FeedbackTally(likes=likes, dislikes=total - likes, total=total)
