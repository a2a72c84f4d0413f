"""API Dependencies — service lookups from app.state and Outcome rendering.

Invariants:
    - Services are built once in main.lifespan and stored on app.state
    - A rejected Outcome re-raises its original PortHubError, rendered by
      api/error_handlers like any error raised outside the boundary

Design Decisions:
    - app.state over module globals: tests override services per app instance
"""

from typing import TypeVar

from fastapi import Request

from porthub.core.outcome import Outcome
from porthub.services.account_service import AccountService
from porthub.services.command_dispatch import CommandDispatch
from porthub.services.lifecycle_engine import LifecycleEngine

T = TypeVar("T")


def get_engine(request: Request) -> LifecycleEngine:
    return request.app.state.engine


def get_accounts(request: Request) -> AccountService:
    return request.app.state.accounts


def get_dispatch(request: Request) -> CommandDispatch:
    return request.app.state.dispatch


def unwrap_or_raise(outcome: Outcome[T]) -> T:
    """Success value, or the rejection's PortHubError for the global handler."""
    return outcome.unwrap()
