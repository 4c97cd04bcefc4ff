"""Catalog router - public product listing and admin product CRUD"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import AdminUser, get_current_admin
from ...database import get_db
from .schemas import ProductCreate, ProductResponse, ProductUpdate
from .service import CatalogService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/products", tags=["Catalog"])
admin_router = APIRouter(prefix="/api/admin/products", tags=["Admin - Products"])


def get_catalog_service(db: Session = Depends(get_db)) -> CatalogService:
    """Dependency injection for CatalogService"""
    return CatalogService(db)


# ============================================================================
# PUBLIC SHOP
# ============================================================================


@router.get("", response_model=list[ProductResponse])
async def list_products(
    category: Optional[str] = Query(None),
    service: CatalogService = Depends(get_catalog_service),
):
    """List products available in the shop"""
    return service.list_active_products(category)


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str, service: CatalogService = Depends(get_catalog_service)):
    return service.get_active_product(product_id)


# ============================================================================
# ADMIN
# ============================================================================


@admin_router.get("", response_model=list[ProductResponse])
async def admin_list_products(
    _admin: AdminUser = Depends(get_current_admin),
    service: CatalogService = Depends(get_catalog_service),
):
    """List every product, including deactivated ones"""
    return service.list_all_products()


@admin_router.post("", response_model=ProductResponse, status_code=201)
async def admin_create_product(
    body: ProductCreate,
    _admin: AdminUser = Depends(get_current_admin),
    service: CatalogService = Depends(get_catalog_service),
):
    return service.create_product(body)


@admin_router.get("/{product_id}", response_model=ProductResponse)
async def admin_get_product(
    product_id: str,
    _admin: AdminUser = Depends(get_current_admin),
    service: CatalogService = Depends(get_catalog_service),
):
    return service.get_product(product_id)


@admin_router.put("/{product_id}", response_model=ProductResponse)
async def admin_update_product(
    product_id: str,
    body: ProductUpdate,
    _admin: AdminUser = Depends(get_current_admin),
    service: CatalogService = Depends(get_catalog_service),
):
    return service.update_product(product_id, body)


@admin_router.delete("/{product_id}")
async def admin_delete_product(
    product_id: str,
    _admin: AdminUser = Depends(get_current_admin),
    service: CatalogService = Depends(get_catalog_service),
):
    return service.delete_product(product_id)
