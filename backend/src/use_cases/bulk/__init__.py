from use_cases.bulk.bulk_operation_processor import BulkOperationProcessor

__all__ = ["BulkOperationProcessor"]
