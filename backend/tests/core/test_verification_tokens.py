"""Verification Tokens — token shape and profile matching."""

import random

from porthub.core.verification_tokens import (
    TOKEN_LENGTH, TOKEN_PREFIX, generate_verification_token, token_appears,
)


def test_token_shape():
    token = generate_verification_token()
    assert token.startswith(TOKEN_PREFIX)
    body = token[len(TOKEN_PREFIX):]
    assert len(body) == TOKEN_LENGTH
    assert body.isalnum() and body.upper() == body


def test_seeded_rng_is_deterministic():
    assert generate_verification_token(random.Random(1)) == generate_verification_token(
        random.Random(1),
    )


def test_token_found_case_insensitively():
    page = "<div class='bio'>Hauling since 2950. port-ab12cd34</div>"
    assert token_appears(page, "PORT-AB12CD34")


def test_token_missing_or_empty_inputs():
    assert not token_appears("<html>nothing here</html>", "PORT-AB12CD34")
    assert not token_appears(None, "PORT-AB12CD34")
    assert not token_appears("<html>PORT-</html>", "")
