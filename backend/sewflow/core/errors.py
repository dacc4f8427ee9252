"""Domain errors raised by the production services.

Every error is recoverable and per-operation: when one is raised the order and
the fabric ledger are left exactly as they were before the call.  The HTTP
layer translates them through ``status_code`` / ``detail`` in a single
exception handler (see ``sewflow.main``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from fastapi import status


class SewflowError(Exception):
    """Base class for every error the production engine raises on purpose."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @property
    def detail(self) -> Any:
        return self.message


@dataclass(frozen=True, slots=True)
class StockShortfall:
    fabric_name: str
    color: str
    required: float
    available: float

    def describe(self) -> str:
        return (
            f'Insufficient stock of "{self.fabric_name} - {self.color}". '
            f"Required: {self.required:.1f} rolls, available: {self.available:.1f} rolls."
        )


class InsufficientStockError(SewflowError):
    """Fabric debit refused; carries every (fabric, color) key that fell short."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, shortfalls: list[StockShortfall]) -> None:
        super().__init__(" ".join(item.describe() for item in shortfalls))
        self.shortfalls = shortfalls

    @property
    def detail(self) -> Any:
        return {
            "message": self.message,
            "shortfalls": [
                {
                    "fabric_name": item.fabric_name,
                    "color": item.color,
                    "required": item.required,
                    "available": item.available,
                }
                for item in self.shortfalls
            ],
        }


class NotFoundError(SewflowError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, entity: str, entity_id: str) -> None:
        super().__init__(f"{entity.capitalize()} {entity_id!r} not found.")
        self.entity = entity
        self.entity_id = entity_id


class ValidationFailure(SewflowError):
    status_code = status.HTTP_400_BAD_REQUEST


class InvalidTransitionError(SewflowError):
    """The order's current status does not allow the requested operation."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, order_id: str, current_status: str, action: str) -> None:
        super().__init__(
            f"Order {order_id!r} is {current_status} and cannot {action}."
        )
        self.order_id = order_id
        self.current_status = current_status
        self.action = action


@dataclass(frozen=True, slots=True)
class Overdraw:
    color: str
    size: str
    requested: int
    available: int


class OverDistributionError(SewflowError):
    """A distribution asked for more pieces than the cut balance holds."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, overdraws: list[Overdraw]) -> None:
        parts = [
            f"{item.color}/{item.size}: requested {item.requested}, available {item.available}"
            for item in overdraws
        ]
        super().__init__("Distribution exceeds the remaining cut balance (" + "; ".join(parts) + ").")
        self.overdraws = overdraws

    @property
    def detail(self) -> Any:
        return {
            "message": self.message,
            "overdraws": [
                {
                    "color": item.color,
                    "size": item.size,
                    "requested": item.requested,
                    "available": item.available,
                }
                for item in self.overdraws
            ],
        }


class ConflictError(SewflowError):
    status_code = status.HTTP_409_CONFLICT
