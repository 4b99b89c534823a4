"""Product serial numbers.

A serial is five uppercase letters followed by a three digit number, for
example ``QRSTU482``. Allocation happens on the server so two clients can
never mint the same value for different products.
"""

from __future__ import annotations

import re
import secrets
import string
from typing import Awaitable, Callable

from .errors import StoreError

__all__ = ["SERIAL_PATTERN", "generate_serial", "allocate_serial"]

SERIAL_PATTERN = re.compile(r"^[A-Z]{5}[1-9][0-9]{2}$")


def generate_serial() -> str:
    letters = "".join(secrets.choice(string.ascii_uppercase) for _ in range(5))
    number = 100 + secrets.randbelow(900)
    return f"{letters}{number}"


async def allocate_serial(
    exists: Callable[[str], Awaitable[bool]],
    attempts: int,
    generate: Callable[[], str] = generate_serial,
) -> str:
    """Return a serial ``exists`` reports as unused, retrying on collisions."""

    for _ in range(attempts):
        candidate = generate()
        if not await exists(candidate):
            return candidate
    raise StoreError(f"Could not allocate a free serial number after {attempts} attempts")
