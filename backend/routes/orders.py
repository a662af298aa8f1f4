# backend/routes/orders.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from sqlalchemy.orm import Session

from database import get_db
from services import order_lifecycle
from services.errors import DomainError
from utils.audit import write_log, client_ip
from schemas.order import OrderCreate, OrderCreated, OrderDetail, OrderOut, OrderStatusUpdate, OrderStatus
from schemas.common import Message

router = APIRouter(prefix="/api/orders", tags=["Orders"])
logger = logging.getLogger(__name__)


# Newest first
@router.get("", response_model=List[OrderOut])
def list_orders(status_filter: Optional[OrderStatus] = Query(None, alias="status"), db: Session = Depends(get_db)):
    return order_lifecycle.list_orders(db, status_filter)


@router.get("/{order_id}", response_model=OrderDetail)
def get_order_detail(order_id: int, db: Session = Depends(get_db)):
    try:
        return order_lifecycle.get_order(db, order_id)
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


# Checkout: order and items are stored together, stock is untouched until completion
@router.post("", response_model=OrderCreated, status_code=status.HTTP_201_CREATED)
def create_order(payload: OrderCreate, request: Request, db: Session = Depends(get_db)):
    try:
        order = order_lifecycle.create_order(db, payload)
    except DomainError as e:
        logger.warning("Order rejected: %s", e.message)
        raise HTTPException(status_code=e.status_code, detail=e.message)

    write_log(db, action="ORDER_CREATE", resource="orders", ip=client_ip(request),
              meta={"order_id": order.id, "items": len(payload.items)})
    return {"id": order.id, "message": "Order created successfully"}


# Status transition; completing deducts stock in the same transaction
@router.put("/{order_id}/status", response_model=Message)
def update_order_status(order_id: int, payload: OrderStatusUpdate, request: Request, db: Session = Depends(get_db)):
    try:
        order = order_lifecycle.change_status(db, order_id, payload.status)
    except DomainError as e:
        logger.warning("Status change of order %s to %s failed: %s", order_id, payload.status, e.message)
        write_log(db, action="ORDER_STATUS_CHANGE", resource="orders", status="FAIL", ip=client_ip(request),
                  meta={"order_id": order_id, "new": payload.status, "reason": e.message})
        raise HTTPException(status_code=e.status_code, detail=e.message)

    write_log(db, action="ORDER_STATUS_CHANGE", resource="orders", ip=client_ip(request),
              meta={"order_id": order.id, "new": order.status})
    if order.status == order_lifecycle.COMPLETED:
        return {"message": "Order status updated and stock adjusted"}
    return {"message": "Order status updated"}


@router.delete("/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_order(order_id: int, request: Request, db: Session = Depends(get_db)):
    try:
        order_lifecycle.delete_order(db, order_id)
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    write_log(db, action="ORDER_DELETE", resource="orders", ip=client_ip(request), meta={"order_id": order_id})
    return Response(status_code=status.HTTP_204_NO_CONTENT)
