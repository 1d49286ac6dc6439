import csv
import io
from typing import Optional

from core.domain.product import Product
from core.exceptions.site_not_found_error import SiteNotFoundError
from core.port.product_repository import ProductRepository
from core.port.site_repository import SiteRepository

EXPORT_COLUMNS = [
    ("ID", "id"),
    ("Name", "name"),
    ("Description", "description"),
    ("SKU", "sku"),
    ("Category", "category"),
    ("Subcategory", "subcategory"),
    ("Price", "price"),
    ("Compare At Price", "compare_at_price"),
    ("Inventory Count", "inventory_count"),
    ("In Stock", "in_stock"),
    ("Active", "is_active"),
    ("Featured", "is_featured"),
    ("Created At", "created_at"),
    ("Updated At", "updated_at"),
]


def _csv_value(product: Product, attribute: str) -> str:
    value = getattr(product, attribute)

    if value is None:
        return "0" if attribute in ("price", "compare_at_price") else ""

    if isinstance(value, bool):
        return "true" if value else "false"

    if hasattr(value, "isoformat"):
        return value.isoformat()

    return str(value)


class ExportProductsUseCase:
    def __init__(self, site_repository: SiteRepository, product_repository: ProductRepository) -> None:
        self.site_repository = site_repository
        self.product_repository = product_repository

    async def execute(self, site_id: int, product_ids: Optional[list[int]] = None) -> str:
        """CSV of the site's products, newest first; empty string when there is nothing to export."""
        site = await self.site_repository.find_by_id(site_id)

        if site is None or not site.is_in_scope():
            raise SiteNotFoundError(site_id)

        products = await self.product_repository.find_all_by_site(site_id, product_ids or None)

        if not products:
            return ""

        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow([header for header, _ in EXPORT_COLUMNS])

        for product in products:
            writer.writerow([_csv_value(product, attribute) for _, attribute in EXPORT_COLUMNS])

        return buffer.getvalue()
