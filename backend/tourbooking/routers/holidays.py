# backend/tourbooking/routers/holidays.py
# PATCH = 405, DELETE = ALLOWED (hard)

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.generated import Holidays as DBHolidays
from ..schemas.holidays import HolidayCreate, HolidayRead

router = APIRouter(prefix="/holidays", tags=["holidays"])


@router.get("/", response_model=list[HolidayRead])
def list_holidays(db: Session = Depends(get_db)):
    return db.query(DBHolidays).order_by(DBHolidays.holiday_date).all()


@router.post(
    "/", response_model=HolidayRead, status_code=status.HTTP_201_CREATED
)
def create_holiday(
    data: HolidayCreate,
    db: Session = Depends(get_db),
):
    obj = DBHolidays(
        holiday_date=data.holiday_date.isoformat(),
        description=data.description,
    )
    db.add(obj)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Holiday already exists for this date",
        )
    db.refresh(obj)
    return obj


@router.patch("/{id}")
def patch_not_allowed():
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method not allowed",
    )


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_holiday(id: int, db: Session = Depends(get_db)):
    obj = db.get(DBHolidays, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")
    db.delete(obj)
    db.commit()
