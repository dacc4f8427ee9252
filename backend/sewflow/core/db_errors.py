"""Classification of driver errors raised through SQLAlchemy."""

from __future__ import annotations

from typing import NamedTuple

from sqlalchemy.exc import DBAPIError

from sewflow.core.errors import ConflictError

# MySQL: 1205 lock wait timeout, 1213 deadlock, 3572 NOWAIT lock refused
LOCK_WAIT_TIMEOUT = 1205
DEADLOCK = 1213
NOWAIT_REFUSED = 3572


class DriverError(NamedTuple):
    code: int | None
    sqlstate: str | None
    message: str


def describe_driver_error(exc: DBAPIError) -> DriverError:
    """Pull the vendor code, SQLSTATE and lower-cased message out of ``exc.orig``."""

    orig = getattr(exc, "orig", None)
    code = None
    if orig is not None and getattr(orig, "args", None):
        try:
            code = int(orig.args[0])
        except (TypeError, ValueError):
            code = None
    return DriverError(
        code=code,
        sqlstate=getattr(orig, "sqlstate", None),
        message=str(orig if orig is not None else exc).lower(),
    )


def is_lock_refused(error: DriverError) -> bool:
    return (
        error.code == NOWAIT_REFUSED
        or "could not obtain lock" in error.message
        or "could not acquire" in error.message
    )


def raise_on_lock_conflict(exc: DBAPIError) -> None:
    """Turn a refused row lock on an order or fabric into ``ConflictError``; re-raise anything else."""

    if is_lock_refused(describe_driver_error(exc)):
        raise ConflictError(
            "Order or fabric is locked by another request. Please retry shortly."
        ) from exc
    raise exc
