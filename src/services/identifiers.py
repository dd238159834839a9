"""Human-readable reference codes (``GR#####``, ``APP#####``, ``PAY<ms>``)."""

from __future__ import annotations

import random
import time
from collections.abc import Awaitable, Callable
from typing import Final

GRIEVANCE_PREFIX: Final[str] = "GR"
APPLICATION_PREFIX: Final[str] = "APP"
PAYMENT_PREFIX: Final[str] = "PAY"

_MAX_DRAWS: Final[int] = 20

_rng = random.SystemRandom()


class IdentifierSpaceExhausted(RuntimeError):
    """No free code was found after the maximum number of draws."""


def random_code(prefix: str) -> str:
    """Return ``prefix`` followed by five digits in 00001-99999."""
    return f"{prefix}{_rng.randint(1, 99_999):05d}"


def payment_reference() -> str:
    return f"{PAYMENT_PREFIX}{int(time.time() * 1000)}"


async def unique_code(prefix: str, is_taken: Callable[[str], Awaitable[bool]]) -> str:
    """Draw random codes until *is_taken* reports a free one.

    The codes are short so collisions are possible; the storage primary
    key is a UUID and this only keeps the citizen-facing code unique.
    """
    for _ in range(_MAX_DRAWS):
        code = random_code(prefix)
        if not await is_taken(code):
            return code
    raise IdentifierSpaceExhausted(f"no free {prefix} code after {_MAX_DRAWS} draws")
