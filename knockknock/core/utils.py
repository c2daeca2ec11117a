"""
Shared utility functions for knockknock.
"""

from __future__ import annotations

import inspect
from typing import Any

# Values that aren't a user object on their own
SCALAR_TYPES = (str, bytes, int, float, bool)


def is_scalar(value: Any) -> bool:
    """Is this a plain value rather than an object?"""
    return isinstance(value, SCALAR_TYPES)


async def maybe_await(value: Any) -> Any:
    """Schema methods and hooks may be sync or async; resolve either."""
    if inspect.isawaitable(value):
        return await value
    return value
