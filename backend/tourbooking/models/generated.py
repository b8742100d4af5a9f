from datetime import datetime

from sqlalchemy import Column, Float, ForeignKey, Index, Integer, Text, UniqueConstraint, text
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()
metadata = Base.metadata


def _utcnow_str() -> str:
    return datetime.utcnow().strftime("%Y-%m-%d %H:%M:%S")


class Tours(Base):
    __tablename__ = 'tours'

    name = Column(Text, nullable=False)
    tour_type = Column(Text, nullable=False, server_default=text("'Standard'"))
    base_price = Column(Float, nullable=False)
    max_attendants = Column(Integer, nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    earliest_hour = Column(Text, nullable=False, server_default=text("'09:00:00'"))
    latest_hour = Column(Text, nullable=False, server_default=text("'18:00:00'"))
    min_attendants = Column(Integer, nullable=False, server_default=text('1'))
    is_active = Column(Integer, nullable=False, server_default=text('1'))
    id = Column(Integer, primary_key=True)
    description = Column(Text)
    location = Column(Text)
    buffer_minutes = Column(Integer)
    created_at = Column(Text, default=_utcnow_str)

    tour_instances = relationship('TourInstances', back_populates='tour')


class TourInstances(Base):
    __tablename__ = 'tour_instances'
    __table_args__ = (
        UniqueConstraint('tour_id', 'instance_date', 'start_time', name='uq_tour_instance_slot'),
        # one active instance per day for exclusive (Special / option_3) tours
        Index(
            "uq_exclusive_daily_instance",
            "tour_id",
            "instance_date",
            unique=True,
            sqlite_where=text("status = 'active' AND is_exclusive = 1"),
            postgresql_where=text("status = 'active' AND is_exclusive = 1"),
        ),
    )

    tour_id = Column(ForeignKey('tours.id', ondelete='CASCADE'), nullable=False)
    instance_date = Column(Text, nullable=False)
    start_time = Column(Text, nullable=False)
    current_attendants = Column(Integer, nullable=False, server_default=text('0'))
    status = Column(Text, nullable=False, server_default=text("'active'"))
    is_exclusive = Column(Integer, nullable=False, server_default=text('0'))
    id = Column(Integer, primary_key=True)
    created_at = Column(Text, default=_utcnow_str)

    tour = relationship('Tours', back_populates='tour_instances')
    orders = relationship('Orders', back_populates='tour_instance')


class Holidays(Base):
    __tablename__ = 'holidays'

    holiday_date = Column(Text, nullable=False, unique=True)
    id = Column(Integer, primary_key=True)
    description = Column(Text)


class Orders(Base):
    __tablename__ = 'orders'

    order_number = Column(Text, nullable=False, unique=True)
    tour_instance_id = Column(ForeignKey('tour_instances.id', ondelete='CASCADE'), nullable=False)
    customer_name = Column(Text, nullable=False)
    customer_email = Column(Text, nullable=False)
    attendees_count = Column(Integer, nullable=False)
    total_amount = Column(Float, nullable=False)
    status = Column(Text, nullable=False, server_default=text("'pending'"))
    id = Column(Integer, primary_key=True)
    customer_phone = Column(Text)
    created_at = Column(Text, default=_utcnow_str)
    updated_at = Column(Text, default=_utcnow_str, onupdate=_utcnow_str)

    tour_instance = relationship('TourInstances', back_populates='orders')
