"""Order router - admin order console"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import AdminUser, get_current_admin
from ...database import get_db
from ...models import OrderStatus
from .schemas import OrderNotesUpdate, OrderResponse, OrderStatusUpdate
from .service import OrderService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/orders", tags=["Admin - Orders"])


def get_order_service(db: Session = Depends(get_db)) -> OrderService:
    """Dependency injection for OrderService"""
    return OrderService(db)


@router.get("", response_model=list[OrderResponse])
async def list_orders(
    status: Optional[OrderStatus] = Query(None),
    _admin: AdminUser = Depends(get_current_admin),
    service: OrderService = Depends(get_order_service),
):
    """List orders, newest first"""
    return service.list_orders(status)


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: str,
    _admin: AdminUser = Depends(get_current_admin),
    service: OrderService = Depends(get_order_service),
):
    return service.get_order_detail(order_id)


@router.patch("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: str,
    body: OrderStatusUpdate,
    _admin: AdminUser = Depends(get_current_admin),
    service: OrderService = Depends(get_order_service),
):
    """Set the order status directly"""
    return service.update_status(order_id, body.status)


@router.patch("/{order_id}/notes", response_model=OrderResponse)
async def update_order_notes(
    order_id: str,
    body: OrderNotesUpdate,
    _admin: AdminUser = Depends(get_current_admin),
    service: OrderService = Depends(get_order_service),
):
    return service.update_notes(order_id, body.notes)


@router.delete("/{order_id}")
async def delete_order(
    order_id: str,
    _admin: AdminUser = Depends(get_current_admin),
    service: OrderService = Depends(get_order_service),
):
    return service.delete_order(order_id)
