"""Order status derivation.

Status is not set by hand in each operation.  It is a function of the order's
contents, re-evaluated after every mutation:

* nothing cut yet                                   -> PLANNED
* cut, but no split yet or pieces left to hand out  -> CUTTING
* every piece handed out, some split still sewing   -> SEWING
* every piece handed out, every split finished      -> FINISHED

Cutting sets ``active_cutting_items``, which is what marks an order as cut.
An order whose cut balance is empty right after cutting stays CUTTING until a
distribution happens.
"""

from __future__ import annotations

from datetime import datetime

from sewflow.core.clock import utcnow
from sewflow.schemas.order import OrderStatus, ProductionOrder


def is_cut(order: ProductionOrder) -> bool:
    return order.status.rank >= OrderStatus.CUTTING.rank or bool(order.active_cutting_items)


def derive_status(order: ProductionOrder) -> OrderStatus:
    if not is_cut(order):
        return OrderStatus.PLANNED
    if not order.splits or order.remaining_pieces > 0:
        return OrderStatus.CUTTING
    if all(split.status == OrderStatus.FINISHED for split in order.splits):
        return OrderStatus.FINISHED
    return OrderStatus.SEWING


def advance_status(order: ProductionOrder, now: datetime | None = None) -> OrderStatus:
    """Move ``order.status`` forward to the derived status; never backwards.

    Stamps ``finished_at`` the first time the order reaches FINISHED.
    """

    derived = derive_status(order)
    if derived.rank > order.status.rank:
        order.status = derived
        if derived == OrderStatus.FINISHED and order.finished_at is None:
            order.finished_at = now or utcnow()
    return order.status
