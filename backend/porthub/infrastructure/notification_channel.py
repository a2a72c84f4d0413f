"""Webhook Notification Channel — delivers messages through an HTTP relay with httpx.

Invariants:
    - send() returns the relay's message_ref on success, None on any failure
    - retract_controls() returns True on success, False on any failure
    - Neither method raises: every httpx / decoding error is logged and absorbed
    - Bounded by notification_timeout_seconds per request

Design Decisions:
    - One AsyncClient per call, like the other outbound HTTP clients: no shared
      connection state between independent deliveries
    - transport injectable: tests use httpx.MockTransport instead of a live relay
"""

import logging

import httpx

from porthub.core.domain_types import MessageRef
from porthub.core.notification_content import MessageContent

logger = logging.getLogger(__name__)


class WebhookNotificationChannel:
    """NotificationChannel over a relay exposing POST /messages and DELETE /messages/{ref}/controls."""

    def __init__(
        self,
        relay_url: str,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.relay_url = relay_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout_seconds, transport=self._transport,
        )

    async def send(self, identity: str, content: MessageContent) -> MessageRef | None:
        payload = {"recipient": identity, **content.to_payload()}
        try:
            async with self._client() as client:
                response = await client.post(f"{self.relay_url}/messages", json=payload)
                response.raise_for_status()
                body = response.json()
                ref = body.get("message_ref") if isinstance(body, dict) else None
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(
                f"Notification delivery failed: {e}",
                extra={"target": identity, "error_code": "DELIVERY_FAILED"},
            )
            return None
        if not ref:
            logger.warning(
                "Relay accepted message without a message_ref",
                extra={"target": identity},
            )
            return None
        return MessageRef(str(ref))

    async def retract_controls(self, message_ref: MessageRef) -> bool:
        try:
            async with self._client() as client:
                response = await client.delete(
                    f"{self.relay_url}/messages/{message_ref}/controls",
                )
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning(
                f"Control retraction failed: {e}",
                extra={"message_ref": message_ref, "error_code": "DELIVERY_FAILED"},
            )
            return False
        return True
