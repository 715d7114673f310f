"""
ORM models for users, catalog, inventory, sales (cart/orders) and production.

Importing this package ensures model classes are registered with the Base
metadata for Alembic and runtime usage.
"""

from .users import User  # noqa: F401
from .inventory import (  # noqa: F401
    InventoryItem,
    InventoryUsage,
)
from .catalog import (  # noqa: F401
    Product,
    ProductMaterial,
)
from .sales import (  # noqa: F401
    Cart,
    Order,
    OrderItem,
)
from .production import Production  # noqa: F401
