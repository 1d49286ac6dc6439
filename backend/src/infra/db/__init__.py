from infra.db.models import Base, ContentModel, HealthCheckModel, ProductModel, SiteModel
from infra.db.session import (
    build_database_url,
    close_engine,
    create_database_schema,
    get_engine,
    get_session_factory,
    ping_database,
)

__all__ = [
    "Base",
    "ContentModel",
    "HealthCheckModel",
    "ProductModel",
    "SiteModel",
    "build_database_url",
    "close_engine",
    "create_database_schema",
    "get_engine",
    "get_session_factory",
    "ping_database",
]
