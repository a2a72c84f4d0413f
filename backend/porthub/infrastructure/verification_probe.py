"""Profile Verification Probe — checks a token on a party's public profile page with httpx.

Invariants:
    - check_token never raises: transport errors, timeouts and non-2xx map to False
    - Bounded by verification_timeout_seconds (default 12 s)
    - No side effects on core state: the caller decides what to store

Design Decisions:
    - Plain substring search, case-insensitive: the token is pasted into free-text bio HTML
    - Handle is URL-quoted before interpolation into the profile URL template
"""

import logging
from urllib.parse import quote

import httpx

from porthub.core.verification_tokens import token_appears

logger = logging.getLogger(__name__)


class HttpVerificationProbe:
    """VerificationProbe fetching profile_url_template.format(handle=...)."""

    def __init__(
        self,
        profile_url_template: str,
        timeout_seconds: float = 12.0,
        user_agent: str = "PortHubBot/1.0",
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.profile_url_template = profile_url_template
        self.timeout_seconds = timeout_seconds
        self.user_agent = user_agent
        self._transport = transport

    async def check_token(self, handle: str, token: str) -> bool:
        url = self.profile_url_template.format(handle=quote(handle, safe=""))
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds, transport=self._transport,
                follow_redirects=True,
            ) as client:
                response = await client.get(url, headers={"User-Agent": self.user_agent})
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning(
                f"Profile verification check failed for {handle}: {e}",
                extra={"target": handle},
            )
            return False
        return token_appears(response.text, token)
