from core.domain.health_check_record import HealthCheckRecord


class HealthCheckPersistenceError(Exception):
    """The check ran but its record was not stored; it will be missing from history queries."""

    def __init__(self, record: HealthCheckRecord, cause: Exception):
        self.record = record
        self.cause = cause
        super().__init__(f"Health check for site {record.site_id} was computed but not persisted: {cause}")
