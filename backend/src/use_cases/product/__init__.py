from use_cases.product.bulk_adjust_prices_use_case import BulkAdjustPricesUseCase
from use_cases.product.bulk_delete_products_use_case import BulkDeleteProductsUseCase
from use_cases.product.bulk_duplicate_products_use_case import BulkDuplicateProductsUseCase
from use_cases.product.bulk_set_active_use_case import BulkSetActiveUseCase
from use_cases.product.bulk_set_featured_use_case import BulkSetFeaturedUseCase
from use_cases.product.bulk_update_products_use_case import BulkUpdateProductsUseCase
from use_cases.product.export_products_use_case import ExportProductsUseCase

__all__ = [
    "BulkAdjustPricesUseCase",
    "BulkDeleteProductsUseCase",
    "BulkDuplicateProductsUseCase",
    "BulkSetActiveUseCase",
    "BulkSetFeaturedUseCase",
    "BulkUpdateProductsUseCase",
    "ExportProductsUseCase",
]
