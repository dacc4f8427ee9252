"""ORM model exports for convenient imports elsewhere in the app."""

from sewflow.models.base import Base
from sewflow.models.prd_fabric import PrdFabric
from sewflow.models.prd_order import PrdOrder
from sewflow.models.prd_product import PrdProduct
from sewflow.models.prd_seamstress import PrdSeamstress

__all__ = [
    "Base",
    "PrdFabric",
    "PrdOrder",
    "PrdProduct",
    "PrdSeamstress",
]
