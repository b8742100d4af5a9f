# backend/tourbooking/routers/admin.py

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.orders import ExpireOrdersResponse
from ..services.order_expiration import expire_pending_orders

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/expire-orders", response_model=ExpireOrdersResponse)
def expire_orders(db: Session = Depends(get_db)):
    """Manually trigger pending order expiration."""
    return expire_pending_orders(db)
