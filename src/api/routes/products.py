"""Routes for submitting, editing and moderating catalog products."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Header, HTTPException, Query, status
from pymongo.errors import PyMongoError

from src.models.product import (
    Creator,
    ProductPage,
    ProductRecord,
    ProductSubmission,
    RejectRequest,
)
from src.models.search import ProductListQuery
from src.services.catalog.errors import (
    DuplicateSlug,
    InvalidTransition,
    NotFound,
    PermissionDenied,
    ValidationError,
)
from src.services.catalog.service import CatalogServiceDependency

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["products"])


def get_actor(
    actor_id: Annotated[str, Header(alias="X-Actor-Id", min_length=1)],
    actor_role: Annotated[str, Header(alias="X-Actor-Role")] = "seller",
    actor_name: Annotated[str, Header(alias="X-Actor-Name")] = "",
    actor_email: Annotated[str, Header(alias="X-Actor-Email")] = "",
) -> Creator:
    """Acting user as forwarded by the gateway."""

    return Creator(id=actor_id, role=actor_role, name=actor_name, email=actor_email)


ActorDependency = Annotated[Creator, Depends(get_actor)]


@contextmanager
def catalog_errors() -> Iterator[None]:
    """Translate catalog and store failures into HTTP errors."""

    try:
        yield
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": str(exc), "fields": exc.fields},
        ) from exc
    except NotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except (DuplicateSlug, InvalidTransition) as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except PermissionDenied as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    except PyMongoError as exc:
        logger.exception("Document store request failed")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Document store unavailable",
        ) from exc


def _serialize(record: ProductRecord) -> dict[str, Any]:
    return record.model_dump(by_alias=True, mode="json")


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Submit a new product",
)
async def create_product(
    payload: ProductSubmission,
    service: CatalogServiceDependency,
    actor: ActorDependency,
) -> dict[str, Any]:
    """Normalize the submission and store it as a catalog record."""

    with catalog_errors():
        record = await service.create(payload.raw_fields(), payload.uploaded_assets, actor)
    return _serialize(record)


@router.get("", summary="List products in any status")
async def list_products(
    query: Annotated[ProductListQuery, Query()],
    service: CatalogServiceDependency,
) -> ProductPage:
    with catalog_errors():
        return await service.list_products(query)


@router.get("/creator/{creator_id}", summary="List products submitted by one creator")
async def list_creator_products(
    creator_id: str,
    service: CatalogServiceDependency,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
) -> ProductPage:
    with catalog_errors():
        return await service.list_by_creator(creator_id, page=page, limit=limit)


@router.get("/{product_id}", summary="Fetch one product")
async def get_product(product_id: str, service: CatalogServiceDependency) -> dict[str, Any]:
    with catalog_errors():
        record = await service.get(product_id)
    return _serialize(record)


@router.put("/{product_id}", summary="Update a product")
async def update_product(
    product_id: str,
    payload: ProductSubmission,
    service: CatalogServiceDependency,
    actor: ActorDependency,
) -> dict[str, Any]:
    """Apply the submitted fields; anything omitted keeps its stored value."""

    logger.info("Product %s update requested by %s", product_id, actor.id)
    with catalog_errors():
        record = await service.update(product_id, payload.raw_fields(), payload.uploaded_assets)
    return _serialize(record)


@router.delete("/{product_id}", summary="Delete a product")
async def delete_product(
    product_id: str,
    service: CatalogServiceDependency,
    actor: ActorDependency,
) -> dict[str, str]:
    logger.info("Product %s deletion requested by %s", product_id, actor.id)
    with catalog_errors():
        record = await service.delete(product_id)
    return {"status": "deleted", "id": record.id or product_id}


@router.patch("/{product_id}/approve", summary="Approve a pending product")
async def approve_product(
    product_id: str,
    service: CatalogServiceDependency,
    actor: ActorDependency,
) -> dict[str, Any]:
    with catalog_errors():
        record = await service.approve(product_id, actor)
    return _serialize(record)


@router.patch("/{product_id}/reject", summary="Reject a pending product")
async def reject_product(
    product_id: str,
    payload: RejectRequest,
    service: CatalogServiceDependency,
    actor: ActorDependency,
) -> dict[str, Any]:
    with catalog_errors():
        record = await service.reject(product_id, actor, payload.reason)
    return _serialize(record)
