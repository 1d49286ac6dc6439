from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional


@dataclass
class Product:
    id: Optional[int]
    site_id: int

    name: str
    sku: Optional[str] = None
    description: Optional[str] = None

    category: Optional[str] = None
    subcategory: Optional[str] = None

    price: Optional[Decimal] = None
    compare_at_price: Optional[Decimal] = None

    inventory_count: int = 0
    in_stock: bool = True
    stock_status: Optional[str] = None

    is_active: bool = True
    is_featured: bool = False

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


BULK_UPDATABLE_FIELDS = frozenset(
    {
        "is_active",
        "is_featured",
        "category",
        "subcategory",
        "price",
        "compare_at_price",
        "inventory_count",
        "in_stock",
        "stock_status",
    }
)
