"""Loguru setup; every record carries the request id and order id of its request."""

from __future__ import annotations

import logging
from contextvars import ContextVar
from sys import stdout
from typing import Any

from loguru import logger

from sewflow.core.config import settings

request_id_ctx_var: ContextVar[str] = ContextVar("request_id", default="-")
order_id_ctx_var: ContextVar[str] = ContextVar("order_id", default="-")


def _patch_record(record: dict[str, Any]) -> None:
    extra = record["extra"]
    extra.setdefault("request_id", request_id_ctx_var.get())
    # services bind order_id themselves; fall back to the one parsed from the path
    extra.setdefault("order_id", order_id_ctx_var.get())


def setup_logging() -> None:
    """Route stdlib logging through basicConfig and install the Loguru stdout sink."""

    logging.basicConfig(level=settings.LOG_LEVEL)
    for noisy in ("aiomysql", "aiosqlite", "sqlalchemy.engine"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
    logger.remove()
    logger.configure(patcher=_patch_record)
    logger.add(
        stdout,
        level=settings.LOG_LEVEL,
        enqueue=True,
        backtrace=False,
        diagnose=False,
        serialize=settings.LOG_JSON,
    )
