"""Helpers for optimistic concurrency control."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sewflow.core.errors import ConflictError


def ensure_expected_timestamp(
    current: Optional[datetime], expected: Optional[datetime]
) -> None:
    """Raise ``ConflictError`` if the persisted timestamp does not match the expected value.

    ``expected=None`` means the caller did not ask for a version check.
    """

    if expected is None:
        return
    if current == expected:
        return
    raise ConflictError(
        "Order has been updated by someone else. Please reload and try again."
    )
