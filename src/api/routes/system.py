"""System-level routes such as health checks."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from src.config import settings
from src.services.storage.product_store import ProductStore, get_product_store

router = APIRouter(tags=["system"])


@router.get("/")
async def read_root() -> dict[str, str]:
    """Hello World endpoint used by smoke tests."""

    return {"message": "Hello World"}


@router.get("/health")
async def health_check(
    store: Annotated[ProductStore, Depends(get_product_store)],
) -> dict[str, str]:
    """Health check endpoint with document store connectivity check."""

    return {
        "status": "healthy",
        "mongodb": "connected" if await store.ping() else "disconnected",
        "environment": settings.ENVIRONMENT,
    }
