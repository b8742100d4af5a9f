# backend/tourbooking/routers/orders.py
# PATCH / DELETE are not exposed: orders change state through confirm, cancel and expiration only

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..errors import (
    BookingConflict,
    BookingRejected,
    InsufficientCapacity,
    OrderNotFound,
    SlotUnavailable,
    TourNotFound,
)
from ..schemas.orders import OrderCreate, OrderRead
from ..services.orders import (
    cancel_order,
    confirm_order,
    create_order,
    get_order_by_number,
    list_orders,
    list_orders_by_email,
)
from ..services.pricing import get_pricing_config
from ..services.slots import get_booking_config

router = APIRouter(prefix="/orders", tags=["orders"])


@router.get("/", response_model=list[OrderRead])
def list_orders_endpoint(
    order_status: Optional[str] = Query(None, alias="status"),
    db: Session = Depends(get_db),
):
    return list_orders(db, order_status)


@router.get("/customer/{email}", response_model=list[OrderRead])
def list_customer_orders(email: str, db: Session = Depends(get_db)):
    return list_orders_by_email(db, email)


@router.post("/", response_model=OrderRead, status_code=status.HTTP_201_CREATED)
def create_order_endpoint(
    data: OrderCreate,
    db: Session = Depends(get_db),
):
    try:
        return create_order(
            db,
            data,
            booking_config=get_booking_config(),
            pricing_config=get_pricing_config(),
            skip_payment=settings.skip_payment,
        )
    except TourNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except (BookingRejected, InsufficientCapacity) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except (SlotUnavailable, BookingConflict) as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)


@router.get("/{order_number}", response_model=OrderRead)
def get_order(order_number: str, db: Session = Depends(get_db)):
    try:
        return get_order_by_number(db, order_number)
    except OrderNotFound:
        raise HTTPException(status_code=404, detail="Not found")


@router.post("/{order_number}/confirm", response_model=OrderRead)
def confirm_order_endpoint(order_number: str, db: Session = Depends(get_db)):
    try:
        return confirm_order(db, order_number)
    except OrderNotFound:
        raise HTTPException(status_code=404, detail="Not found")
    except BookingRejected as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)


@router.put("/{order_number}/cancel", response_model=OrderRead)
def cancel_order_endpoint(order_number: str, db: Session = Depends(get_db)):
    try:
        return cancel_order(db, order_number)
    except OrderNotFound:
        raise HTTPException(status_code=404, detail="Not found")
    except BookingRejected as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
