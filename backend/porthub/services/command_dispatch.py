"""Command Dispatch — routes typed commands and pressed controls to the lifecycle engine.

Invariants:
    - Every Command type has exactly one handler; unknown types are rejected, never ignored
    - Control ids are parsed by core.commands.parse_control; the actor always
      comes from the caller, never from the id
    - Dispatch adds no rules of its own: outcomes come straight from the engine

Design Decisions:
    - Explicit dict of type -> handler over if/elif chains: adding a command is
      one entry, and a missing entry is visible
"""

import logging
from collections.abc import Awaitable, Callable

from porthub.core.commands import (
    ClaimJob, Command, PostJob, ResolveClaim, ResolveCompletion, SubmitFeedback,
    parse_control,
)
from porthub.core.domain_types import AccountId
from porthub.core.errors import ValidationRejection
from porthub.core.outcome import Outcome
from porthub.services.lifecycle_engine import LifecycleEngine

logger = logging.getLogger(__name__)


class CommandDispatch:
    """Maps commands onto LifecycleEngine operations."""

    def __init__(self, engine: LifecycleEngine):
        self._engine = engine
        self._handlers: dict[type, Callable[..., Awaitable[Outcome]]] = {
            PostJob: self._post,
            ClaimJob: self._claim,
            ResolveClaim: self._resolve_claim,
            ResolveCompletion: self._resolve_completion,
            SubmitFeedback: self._submit_feedback,
        }

    async def execute(self, command: Command) -> Outcome:
        handler = self._handlers.get(type(command))
        if handler is None:
            logger.warning(f"No handler for {type(command).__name__}")
            return Outcome.rejected(ValidationRejection(
                f"Unknown command {type(command).__name__}", field="command",
            ))
        return await handler(command)

    async def execute_control(self, action_id: str, actor_id: AccountId) -> Outcome:
        """Run the command behind a pressed notification control."""
        command = parse_control(action_id, actor_id)
        if command is None:
            logger.info(f"Unrecognized control {action_id!r}", extra={"account_id": actor_id})
            return Outcome.rejected(ValidationRejection(
                f"Unrecognized control {action_id!r}", field="action_id",
            ))
        return await self.execute(command)

    async def _post(self, command: PostJob) -> Outcome:
        return await self._engine.post(command.customer_id, command.category, command.draft)

    async def _claim(self, command: ClaimJob) -> Outcome:
        return await self._engine.claim(command.job_number, command.porter_id)

    async def _resolve_claim(self, command: ResolveClaim) -> Outcome:
        return await self._engine.resolve_claim(
            command.job_number, command.customer_id, command.porter_id, command.decision,
        )

    async def _resolve_completion(self, command: ResolveCompletion) -> Outcome:
        return await self._engine.resolve_completion(
            command.job_number, command.account_id, command.outcome,
        )

    async def _submit_feedback(self, command: SubmitFeedback) -> Outcome:
        return await self._engine.submit_feedback(
            command.job_number, command.reviewer_id, command.liked,
        )
