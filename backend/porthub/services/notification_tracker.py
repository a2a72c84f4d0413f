"""Notification Tracker — best-effort delivery, retraction, and escalation over a NotificationChannel.

Invariants:
    - Never raises: a failed delivery is logged and returned as None
    - Delivery outcome never feeds back into job state (the transition already committed)
    - Paired deliveries run concurrently, results returned in request order
    - Escalations go to the configured operations identity; without one they are logged only

Design Decisions:
    - Channel exceptions are wrapped in DeliveryFailure purely for a uniform log
      shape (error_code=DELIVERY_FAILED); they are never re-raised
    - Missing recipient (deleted account) is a skipped delivery, not an error
"""

import asyncio
import logging
from collections.abc import Iterable

from porthub.core.domain_types import JobNumber, MessageRef
from porthub.core.errors import DeliveryFailure
from porthub.core.notification_content import MessageContent
from porthub.core.repository_protocols import NotificationChannel

logger = logging.getLogger(__name__)

Delivery = tuple[str | None, MessageContent]


class NotificationTracker:
    """Sends job notifications and tracks the refs of interactive ones."""

    def __init__(self, channel: NotificationChannel, ops_identity: str = ""):
        self._channel = channel
        self._ops_identity = ops_identity

    async def deliver(
        self,
        identity: str | None,
        content: MessageContent,
        *,
        job_number: JobNumber | None = None,
    ) -> MessageRef | None:
        """Send one message. Returns its ref, or None when nothing was delivered."""
        if not identity:
            logger.info(
                f"Skipping {content.kind} delivery: recipient has no account",
                extra={"job_number": job_number},
            )
            return None
        try:
            ref = await self._channel.send(identity, content)
        except Exception as e:
            failure = DeliveryFailure(str(e), identity)
            logger.warning(
                failure.message,
                extra={"job_number": job_number, "target": identity,
                       "error_code": failure.code},
                exc_info=True,
            )
            return None
        if ref is None:
            logger.warning(
                f"{content.kind} not delivered",
                extra={"job_number": job_number, "target": identity,
                       "error_code": "DELIVERY_FAILED"},
            )
            return None
        logger.info(
            f"{content.kind} delivered",
            extra={"job_number": job_number, "target": identity, "message_ref": ref},
        )
        return ref

    async def deliver_many(
        self, *deliveries: Delivery, job_number: JobNumber | None = None,
    ) -> list[MessageRef | None]:
        """Send several messages concurrently; refs come back in argument order."""
        refs = await asyncio.gather(*(
            self.deliver(identity, content, job_number=job_number)
            for identity, content in deliveries
        ))
        return list(refs)

    async def retract(
        self, refs: Iterable[MessageRef | None], *, job_number: JobNumber | None = None,
    ) -> int:
        """Remove the controls from previously delivered prompts. Returns how many succeeded."""
        live = [ref for ref in refs if ref]
        if not live:
            return 0
        results = await asyncio.gather(
            *(self._retract_one(ref, job_number) for ref in live),
        )
        return sum(1 for retracted in results if retracted)

    async def escalate(
        self, content: MessageContent, *, job_number: JobNumber | None = None,
    ) -> MessageRef | None:
        """Raise a message to the operations channel."""
        if not self._ops_identity:
            logger.warning(
                f"No operations channel configured; {content.kind} logged only: {content.text}",
                extra={"job_number": job_number},
            )
            return None
        return await self.deliver(self._ops_identity, content, job_number=job_number)

    async def _retract_one(self, ref: MessageRef, job_number: JobNumber | None) -> bool:
        try:
            retracted = await self._channel.retract_controls(ref)
        except Exception as e:
            logger.warning(
                f"Control retraction raised: {e}",
                extra={"job_number": job_number, "message_ref": ref,
                       "error_code": "DELIVERY_FAILED"},
                exc_info=True,
            )
            return False
        if not retracted:
            logger.warning(
                "Controls still live on stale prompt",
                extra={"job_number": job_number, "message_ref": ref},
            )
        return retracted
