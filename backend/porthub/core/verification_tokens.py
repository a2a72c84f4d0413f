"""Verification Tokens — short codes a party pastes on their external profile.

Invariants:
    - Tokens are PORT- followed by 8 upper-case alphanumerics
    - token_appears is case-insensitive substring search (profile pages are HTML)
"""

import random
import secrets
import string

TOKEN_PREFIX = "PORT-"
TOKEN_LENGTH = 8
_ALPHABET = string.ascii_uppercase + string.digits


def generate_verification_token(rng: random.Random | None = None) -> str:
    chooser = rng or secrets.SystemRandom()
    body = "".join(chooser.choice(_ALPHABET) for _ in range(TOKEN_LENGTH))
    return f"{TOKEN_PREFIX}{body}"


def token_appears(page: str | None, token: str | None) -> bool:
    if not page or not token:
        return False
    return token.lower() in page.lower()
