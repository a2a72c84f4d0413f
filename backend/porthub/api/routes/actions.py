"""Action Route — entry point for controls pressed on delivered notifications.

Invariants:
    - The relay posts (actor_id, action_id); the action id is parsed, never trusted
      for identity
    - Responses carry the operation's result type name plus a JSON-safe payload
"""

import logging
from dataclasses import asdict, is_dataclass

from fastapi import APIRouter, Depends
from fastapi.encoders import jsonable_encoder

from porthub.core.domain_types import AccountId
from porthub.api.dependencies import get_dispatch, unwrap_or_raise
from porthub.schemas.actions import ActionRequest
from porthub.services.command_dispatch import CommandDispatch

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/actions", tags=["actions"])


@router.post("")
async def press_control(
    body: ActionRequest, dispatch: CommandDispatch = Depends(get_dispatch),
):
    result = unwrap_or_raise(
        await dispatch.execute_control(body.action_id, AccountId(body.actor_id)),
    )
    payload = asdict(result) if is_dataclass(result) else result
    return {
        "action_id": body.action_id,
        "result_type": type(result).__name__,
        "result": jsonable_encoder(payload),
    }
