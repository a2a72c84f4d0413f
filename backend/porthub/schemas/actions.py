"""Action Schemas — a pressed notification control, relayed back by the chat gateway."""

from pydantic import BaseModel, Field


class ActionRequest(BaseModel):
    actor_id: str = Field(min_length=1)
    action_id: str = Field(min_length=3, max_length=200)
