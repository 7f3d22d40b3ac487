"""Built-in compliance rules"""

from .storage import PublicStorageRule
from .compute import ProductionTagRule

__all__ = [
    "PublicStorageRule",
    "ProductionTagRule",
]
