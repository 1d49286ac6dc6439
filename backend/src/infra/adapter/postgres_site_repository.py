from functools import lru_cache
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.domain.site import Site
from core.port.site_repository import SiteRepository
from infra.db.errors import store_operation
from infra.db.models import ContentModel, ProductModel, SiteModel
from infra.db.session import get_session_factory

PUBLISHED_STATUS = "published"


class PostgresSiteRepository(SiteRepository):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def find_by_id(self, site_id: int) -> Optional[Site]:
        async with store_operation("find_site", site_id), self._session_factory() as session:
            model = await session.get(SiteModel, site_id)

            return self._to_domain(model) if model is not None else None

    async def find_all_active(self) -> list[Site]:
        async with store_operation("find_active_sites"), self._session_factory() as session:
            statement = (
                select(SiteModel)
                .where(SiteModel.is_active.is_(True), SiteModel.is_deleted.is_(False))
                .order_by(SiteModel.id.asc())
            )
            models = (await session.execute(statement)).scalars().all()

            return [self._to_domain(model) for model in models]

    async def count_published_content(self, site_id: int) -> int:
        async with store_operation("count_published_content", site_id), self._session_factory() as session:
            statement = select(func.count(ContentModel.id)).where(
                ContentModel.site_id == site_id,
                ContentModel.status == PUBLISHED_STATUS,
            )

            return (await session.execute(statement)).scalar_one()

    async def count_active_products(self, site_id: int) -> int:
        async with store_operation("count_active_products", site_id), self._session_factory() as session:
            statement = select(func.count(ProductModel.id)).where(
                ProductModel.site_id == site_id,
                ProductModel.is_active.is_(True),
            )

            return (await session.execute(statement)).scalar_one()

    def _to_domain(self, model: SiteModel) -> Site:
        return Site(
            id=model.id,
            name=model.name,
            subdomain=model.subdomain,
            custom_domain=model.custom_domain,
            domain_verified=model.domain_verified,
            is_active=model.is_active,
            is_deleted=model.is_deleted,
        )


@lru_cache
def get_site_repository() -> SiteRepository:
    session_factory = get_session_factory()

    return PostgresSiteRepository(session_factory)
