from collections import Counter
from datetime import datetime, timezone
from functools import lru_cache
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.domain.bulk_operation import (
    AdjustPriceMutation,
    BulkMutationResult,
    DeleteMutation,
    DuplicateMutation,
    ProductMutation,
    UpdateFieldsMutation,
)
from core.domain.product import BULK_UPDATABLE_FIELDS, Product
from core.exceptions.invalid_bulk_request_error import InvalidBulkRequestError
from core.port.product_repository import ProductRepository
from infra.db.errors import store_operation
from infra.db.models import ProductModel
from infra.db.session import get_session_factory
from infra.utils.datetimes import as_utc


def copy_name(name: str, copy_number: int) -> str:
    if copy_number == 1:
        return f"{name} (Copy)"

    return f"{name} (Copy {copy_number})"


class PostgresProductRepository(ProductRepository):
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
    ) -> None:
        self._session_factory = session_factory

    async def save(self, product: Product) -> Product:
        async with store_operation("save_product", product.site_id), self._session_factory() as session:
            model: Optional[ProductModel] = None

            if product.id is not None and product.id > 0:
                model = await session.get(ProductModel, product.id)

            if model is None:
                model = ProductModel(site_id=product.site_id, name=product.name)

                if product.id is not None and product.id > 0:
                    model.id = product.id

                session.add(model)

            self._copy_fields(product, model)

            await session.commit()
            await session.refresh(model)

            return self._to_domain(model)

    async def find_by_ids(self, site_id: int, product_ids: list[int]) -> list[Product]:
        if not product_ids:
            return []

        async with store_operation("find_products", site_id), self._session_factory() as session:
            models = await self._load(session, site_id, product_ids)

            return [self._to_domain(model) for model in models]

    async def find_all_by_site(self, site_id: int, product_ids: Optional[list[int]] = None) -> list[Product]:
        async with store_operation("find_site_products", site_id), self._session_factory() as session:
            statement = select(ProductModel).where(ProductModel.site_id == site_id)

            if product_ids:
                statement = statement.where(ProductModel.id.in_(product_ids))

            statement = statement.order_by(ProductModel.created_at.desc(), ProductModel.id.desc())
            models = (await session.execute(statement)).scalars().all()

            return [self._to_domain(model) for model in models]

    async def apply_bulk_mutation(
        self,
        site_id: int,
        product_ids: list[int],
        mutation: ProductMutation,
    ) -> BulkMutationResult[Product]:
        async with store_operation("apply_bulk_mutation", site_id), self._session_factory() as session:
            models = await self._load(session, site_id, product_ids)
            by_id = {model.id: model for model in models}

            missing = sorted(set(product_ids) - set(by_id))
            # ids already gone are a no-op for delete, as a repeated DELETE ... IN would be
            if missing and not isinstance(mutation, DeleteMutation):
                return BulkMutationResult(
                    success=False,
                    error=f"Products not found in site {site_id}: {missing}",
                )

            unique_models = [by_id[product_id] for product_id in dict.fromkeys(product_ids) if product_id in by_id]

            if isinstance(mutation, DeleteMutation):
                affected = [self._to_domain(model) for model in unique_models]
                await session.execute(
                    delete(ProductModel).where(
                        ProductModel.site_id == site_id,
                        ProductModel.id.in_(list(by_id)),
                    )
                )
            elif isinstance(mutation, DuplicateMutation):
                copies = self._duplicate([by_id[product_id] for product_id in product_ids])
                session.add_all(copies)
                await session.flush()
                affected = [self._to_domain(model) for model in copies]
            elif isinstance(mutation, AdjustPriceMutation):
                for model in unique_models:
                    model.price = mutation.rule.apply(model.price or 0)
                await session.flush()
                affected = [self._to_domain(model) for model in unique_models]
            elif isinstance(mutation, UpdateFieldsMutation):
                unsupported = set(mutation.fields) - BULK_UPDATABLE_FIELDS
                if unsupported:
                    raise InvalidBulkRequestError(f"Fields cannot be bulk updated: {sorted(unsupported)}")

                for model in unique_models:
                    for name, value in mutation.fields.items():
                        setattr(model, name, value)
                await session.flush()
                affected = [self._to_domain(model) for model in unique_models]
            else:
                raise InvalidBulkRequestError(f"Unsupported bulk mutation: {type(mutation).__name__}")

            await session.commit()

            return BulkMutationResult(success=True, affected_rows=affected)

    async def _load(self, session: AsyncSession, site_id: int, product_ids: list[int]) -> list[ProductModel]:
        statement = select(ProductModel).where(
            ProductModel.site_id == site_id,
            ProductModel.id.in_(list(set(product_ids))),
        )

        return list((await session.execute(statement)).scalars().all())

    def _duplicate(self, sources: list[ProductModel]) -> list[ProductModel]:
        stamp = int(datetime.now(timezone.utc).timestamp() * 1_000)
        seen: Counter[int] = Counter()
        copies = []

        for index, source in enumerate(sources):
            seen[source.id] += 1

            copies.append(
                ProductModel(
                    site_id=source.site_id,
                    name=copy_name(source.name, seen[source.id]),
                    sku=f"{source.sku}-copy-{stamp}-{index}" if source.sku else None,
                    description=source.description,
                    category=source.category,
                    subcategory=source.subcategory,
                    price=source.price,
                    compare_at_price=source.compare_at_price,
                    inventory_count=source.inventory_count,
                    in_stock=source.in_stock,
                    stock_status=source.stock_status,
                    is_active=False,
                    is_featured=source.is_featured,
                )
            )

        return copies

    def _copy_fields(self, product: Product, model: ProductModel) -> None:
        model.site_id = product.site_id
        model.name = product.name
        model.sku = product.sku
        model.description = product.description
        model.category = product.category
        model.subcategory = product.subcategory
        model.price = product.price
        model.compare_at_price = product.compare_at_price
        model.inventory_count = product.inventory_count
        model.in_stock = product.in_stock
        model.stock_status = product.stock_status
        model.is_active = product.is_active
        model.is_featured = product.is_featured

    def _to_domain(self, model: ProductModel) -> Product:
        return Product(
            id=model.id,
            site_id=model.site_id,
            name=model.name,
            sku=model.sku,
            description=model.description,
            category=model.category,
            subcategory=model.subcategory,
            price=model.price,
            compare_at_price=model.compare_at_price,
            inventory_count=model.inventory_count,
            in_stock=model.in_stock,
            stock_status=model.stock_status,
            is_active=model.is_active,
            is_featured=model.is_featured,
            created_at=as_utc(model.created_at) if model.created_at else None,
            updated_at=as_utc(model.updated_at) if model.updated_at else None,
        )


@lru_cache
def get_product_repository() -> ProductRepository:
    session_factory = get_session_factory()

    return PostgresProductRepository(session_factory)
