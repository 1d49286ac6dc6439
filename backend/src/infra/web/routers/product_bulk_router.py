from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from core.domain.bulk_operation import BulkOperationResult
from core.domain.price_adjustment import PriceAdjustmentRule
from core.domain.product import Product
from core.exceptions.bulk_operation_error import BulkOperationPartialFailureError
from core.exceptions.data_store_error import DataStoreError
from core.exceptions.invalid_bulk_request_error import InvalidBulkRequestError
from core.exceptions.invalid_price_adjustment_error import InvalidPriceAdjustmentError
from core.exceptions.site_not_found_error import SiteNotFoundError
from core.port.product_repository import ProductRepository
from core.port.site_repository import SiteRepository
from infra.web.deps import get_bulk_processor, get_product_repo, get_site_repo
from infra.web.routers.schemas.product import (
    BulkFeatureDTO,
    BulkIdsDTO,
    BulkOperationResponseDTO,
    BulkPartialFailureDTO,
    BulkPriceDTO,
    BulkUpdateDTO,
    ProductResponseDTO,
)
from use_cases.bulk.bulk_operation_processor import BulkOperationProcessor
from use_cases.product.bulk_adjust_prices_use_case import BulkAdjustPricesUseCase
from use_cases.product.bulk_delete_products_use_case import BulkDeleteProductsUseCase
from use_cases.product.bulk_duplicate_products_use_case import BulkDuplicateProductsUseCase
from use_cases.product.bulk_set_active_use_case import BulkSetActiveUseCase
from use_cases.product.bulk_set_featured_use_case import BulkSetFeaturedUseCase
from use_cases.product.bulk_update_products_use_case import BulkUpdateProductsUseCase
from use_cases.product.export_products_use_case import ExportProductsUseCase

router = APIRouter(prefix="/sites/{site_id}/products", tags=["Product bulk operations"])


class BulkUseCaseProvider:
    def __init__(self, use_case_class: type) -> None:
        self.use_case_class = use_case_class

    def __call__(
        self,
        site_repository: SiteRepository = Depends(get_site_repo),
        product_repository: ProductRepository = Depends(get_product_repo),
        processor: BulkOperationProcessor = Depends(get_bulk_processor),
    ):
        return self.use_case_class(site_repository, product_repository, processor)


def _to_response(result: BulkOperationResult[Product]) -> BulkOperationResponseDTO:
    return BulkOperationResponseDTO(
        operation=result.operation,
        total_items=result.total_items,
        chunk_count=result.chunk_count,
        processed_count=result.processed_count,
        affected=[ProductResponseDTO.model_validate(product) for product in result.items],
    )


async def _run_bulk(operation) -> BulkOperationResponseDTO:
    try:
        return _to_response(await operation)
    except SiteNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Site {e.site_id} not found")
    except (InvalidBulkRequestError, InvalidPriceAdjustmentError) as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    except BulkOperationPartialFailureError as e:
        failure = BulkPartialFailureDTO(
            operation=e.operation,
            message=str(e),
            failed_chunk_index=e.chunk_index,
            failed_ids=e.failed_ids,
            succeeded_chunks=e.succeeded_chunks,
            committed_count=e.committed_count,
            committed_ids=e.committed_ids,
            attempts=e.attempts,
            cause=str(e.cause) if e.cause is not None else None,
        )
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=failure.model_dump(mode="json", by_alias=True),
        )
    except DataStoreError:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Failed to load products")


@router.post("/bulk/update", response_model=BulkOperationResponseDTO, status_code=status.HTTP_200_OK)
async def bulk_update_products(
    site_id: int,
    payload: BulkUpdateDTO,
    use_case: BulkUpdateProductsUseCase = Depends(BulkUseCaseProvider(BulkUpdateProductsUseCase)),
) -> BulkOperationResponseDTO:
    return await _run_bulk(use_case.execute(site_id, payload.ids, payload.update_fields()))


@router.post("/bulk/delete", response_model=BulkOperationResponseDTO, status_code=status.HTTP_200_OK)
async def bulk_delete_products(
    site_id: int,
    payload: BulkIdsDTO,
    use_case: BulkDeleteProductsUseCase = Depends(BulkUseCaseProvider(BulkDeleteProductsUseCase)),
) -> BulkOperationResponseDTO:
    return await _run_bulk(use_case.execute(site_id, payload.ids))


@router.post("/bulk/duplicate", response_model=BulkOperationResponseDTO, status_code=status.HTTP_201_CREATED)
async def bulk_duplicate_products(
    site_id: int,
    payload: BulkIdsDTO,
    use_case: BulkDuplicateProductsUseCase = Depends(BulkUseCaseProvider(BulkDuplicateProductsUseCase)),
) -> BulkOperationResponseDTO:
    return await _run_bulk(use_case.execute(site_id, payload.ids))


@router.post("/bulk/price", response_model=BulkOperationResponseDTO, status_code=status.HTTP_200_OK)
async def bulk_adjust_prices(
    site_id: int,
    payload: BulkPriceDTO,
    use_case: BulkAdjustPricesUseCase = Depends(BulkUseCaseProvider(BulkAdjustPricesUseCase)),
) -> BulkOperationResponseDTO:
    try:
        rule = PriceAdjustmentRule(type=payload.type, value=payload.value, operation=payload.operation)
    except InvalidPriceAdjustmentError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))

    return await _run_bulk(use_case.execute(site_id, payload.ids, rule))


@router.post("/bulk/activate", response_model=BulkOperationResponseDTO, status_code=status.HTTP_200_OK)
async def bulk_activate_products(
    site_id: int,
    payload: BulkIdsDTO,
    use_case: BulkSetActiveUseCase = Depends(BulkUseCaseProvider(BulkSetActiveUseCase)),
) -> BulkOperationResponseDTO:
    return await _run_bulk(use_case.execute(site_id, payload.ids, active=True))


@router.post("/bulk/deactivate", response_model=BulkOperationResponseDTO, status_code=status.HTTP_200_OK)
async def bulk_deactivate_products(
    site_id: int,
    payload: BulkIdsDTO,
    use_case: BulkSetActiveUseCase = Depends(BulkUseCaseProvider(BulkSetActiveUseCase)),
) -> BulkOperationResponseDTO:
    return await _run_bulk(use_case.execute(site_id, payload.ids, active=False))


@router.post("/bulk/feature", response_model=BulkOperationResponseDTO, status_code=status.HTTP_200_OK)
async def bulk_feature_products(
    site_id: int,
    payload: BulkFeatureDTO,
    use_case: BulkSetFeaturedUseCase = Depends(BulkUseCaseProvider(BulkSetFeaturedUseCase)),
) -> BulkOperationResponseDTO:
    return await _run_bulk(use_case.execute(site_id, payload.ids, featured=payload.featured))


@router.get("/export", status_code=status.HTTP_200_OK, response_class=Response)
async def export_products(
    site_id: int,
    ids: Optional[list[int]] = Query(default=None),
    site_repository: SiteRepository = Depends(get_site_repo),
    product_repository: ProductRepository = Depends(get_product_repo),
) -> Response:
    use_case = ExportProductsUseCase(site_repository, product_repository)

    try:
        content = await use_case.execute(site_id, ids)
    except SiteNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Site {e.site_id} not found")
    except DataStoreError:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Failed to load products")

    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="products-site-{site_id}.csv"'},
    )
