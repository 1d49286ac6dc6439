from datetime import datetime
from functools import lru_cache
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.domain.health_check_record import (
    ComponentStatuses,
    HealthCheckRecord,
    HealthIssue,
    HealthMetrics,
)
from core.domain.health_status import HealthStatus
from core.port.health_check_repository import HealthCheckRepository
from infra.db.errors import store_operation
from infra.db.models import HealthCheckModel
from infra.db.session import get_session_factory
from infra.utils.datetimes import as_utc


class PostgresHealthCheckRepository(HealthCheckRepository):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def add(self, record: HealthCheckRecord) -> HealthCheckRecord:
        async with store_operation("add_health_check", record.site_id), self._session_factory() as session:
            model = self._to_model(record)
            session.add(model)

            await session.commit()
            await session.refresh(model)

            return self._to_domain(model)

    async def find_latest(self, site_id: int) -> Optional[HealthCheckRecord]:
        records = await self.find_recent(site_id, limit=1)

        return records[0] if records else None

    async def find_recent(self, site_id: int, limit: int) -> list[HealthCheckRecord]:
        async with store_operation("find_recent_health_checks", site_id), self._session_factory() as session:
            statement = (
                select(HealthCheckModel)
                .where(HealthCheckModel.site_id == site_id)
                .order_by(HealthCheckModel.checked_at.desc(), HealthCheckModel.id.desc())
                .limit(limit)
            )
            models = (await session.execute(statement)).scalars().all()

            return [self._to_domain(model) for model in models]

    async def find_latest_for_sites(self, site_ids: list[int]) -> dict[int, HealthCheckRecord]:
        if not site_ids:
            return {}

        async with store_operation("find_latest_health_checks"), self._session_factory() as session:
            ranked = (
                select(
                    HealthCheckModel.id,
                    func.row_number()
                    .over(
                        partition_by=HealthCheckModel.site_id,
                        order_by=(HealthCheckModel.checked_at.desc(), HealthCheckModel.id.desc()),
                    )
                    .label("position"),
                )
                .where(HealthCheckModel.site_id.in_(site_ids))
                .subquery()
            )
            statement = select(HealthCheckModel).join(ranked, HealthCheckModel.id == ranked.c.id).where(
                ranked.c.position == 1
            )
            models = (await session.execute(statement)).scalars().all()

            return {model.site_id: self._to_domain(model) for model in models}

    async def find_in_range(
        self,
        site_id: Optional[int],
        start: datetime,
        end: datetime,
    ) -> list[HealthCheckRecord]:
        async with store_operation("find_health_checks_in_range", site_id), self._session_factory() as session:
            statement = select(HealthCheckModel).where(
                HealthCheckModel.checked_at >= as_utc(start),
                HealthCheckModel.checked_at <= as_utc(end),
            )

            if site_id is not None:
                statement = statement.where(HealthCheckModel.site_id == site_id)

            statement = statement.order_by(HealthCheckModel.checked_at.asc(), HealthCheckModel.id.asc())
            models = (await session.execute(statement)).scalars().all()

            return [self._to_domain(model) for model in models]

    async def count_critical_since(self, since: datetime, site_ids: Optional[list[int]] = None) -> int:
        async with store_operation("count_critical_health_checks"), self._session_factory() as session:
            statement = select(func.count(HealthCheckModel.id)).where(
                HealthCheckModel.checked_at >= as_utc(since),
                HealthCheckModel.overall_status == HealthStatus.CRITICAL,
            )

            if site_ids is not None:
                statement = statement.where(HealthCheckModel.site_id.in_(site_ids))

            return (await session.execute(statement)).scalar_one()

    def _to_model(self, record: HealthCheckRecord) -> HealthCheckModel:
        return HealthCheckModel(
            site_id=record.site_id,
            checked_at=as_utc(record.checked_at),
            overall_status=record.overall_status,
            health_score=record.health_score,
            domain_status=record.components.domain,
            ssl_status=record.components.ssl,
            content_status=record.components.content,
            performance_status=record.components.performance,
            response_time_ms=record.response_time_ms,
            uptime_24h=record.uptime_24h,
            issues=[self._issue_to_dict(issue) for issue in record.issues],
            warnings=[self._issue_to_dict(issue) for issue in record.warnings],
            content_count=record.metrics.content_count,
            product_count=record.metrics.product_count,
            error_count_24h=record.metrics.error_count_24h,
            scoring_version=record.scoring_version,
        )

    def _issue_to_dict(self, issue: HealthIssue) -> dict[str, str]:
        return {"type": issue.type, "message": issue.message, "severity": issue.severity}

    def _to_domain(self, model: HealthCheckModel) -> HealthCheckRecord:
        return HealthCheckRecord(
            id=model.id,
            site_id=model.site_id,
            checked_at=as_utc(model.checked_at),
            overall_status=model.overall_status,
            health_score=model.health_score,
            components=ComponentStatuses(
                domain=model.domain_status,
                ssl=model.ssl_status,
                content=model.content_status,
                performance=model.performance_status,
            ),
            response_time_ms=model.response_time_ms,
            uptime_24h=model.uptime_24h,
            issues=[HealthIssue(**issue) for issue in model.issues or []],
            warnings=[HealthIssue(**issue) for issue in model.warnings or []],
            metrics=HealthMetrics(
                content_count=model.content_count,
                product_count=model.product_count,
                error_count_24h=model.error_count_24h,
            ),
            scoring_version=model.scoring_version,
        )


@lru_cache
def get_health_check_repository() -> HealthCheckRepository:
    session_factory = get_session_factory()

    return PostgresHealthCheckRepository(session_factory)
