"""Job Numbers — generation and normalization of the human-facing JOB-#### id.

Invariants:
    - Generated numbers are always JOB- followed by 4 digits in 1000–9999
    - normalize_job_number is idempotent (upper-cased, stripped)
    - Uniqueness is NOT checked here: the store's unique index is the authority,
      the engine retries on collision
"""

import random
import re

from porthub.core.domain_types import JobNumber

JOB_NUMBER_PREFIX = "JOB-"
_JOB_NUMBER_RE = re.compile(r"^JOB-\d{4}$")


def generate_job_number(rng: random.Random) -> JobNumber:
    """Draw a random candidate job number."""
    return JobNumber(f"{JOB_NUMBER_PREFIX}{rng.randint(1000, 9999)}")


def normalize_job_number(raw: str) -> JobNumber:
    """Accept user-typed job numbers like ' job-1234 '."""
    return JobNumber(raw.strip().upper())


def is_valid_job_number(value: str) -> bool:
    return bool(_JOB_NUMBER_RE.match(value))
