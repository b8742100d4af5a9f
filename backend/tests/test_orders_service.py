# backend/tests/test_orders_service.py

import json
from datetime import date

import pytest
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError

from tourbooking.errors import (
    BookingConflict,
    BookingRejected,
    InsufficientCapacity,
    OrderNotFound,
    SlotUnavailable,
    TourNotFound,
)
from tourbooking.models.generated import TourInstances
from tourbooking.schemas.orders import OrderCreate
from tourbooking.services import orders as orders_service
from tourbooking.services.orders import (
    cancel_order,
    confirm_order,
    create_order,
    get_order_by_number,
    list_orders,
    list_orders_by_email,
)
from tourbooking.services.pricing import PricingConfig
from tourbooking.services.slots import BookingConfig

MONDAY = date(2024, 1, 1)
SUNDAY = date(2024, 1, 7)
BOOKING = BookingConfig()
PRICING = PricingConfig()


def order_request(tour_id: int, time: str = "11:00", attendees: int = 2, **overrides) -> OrderCreate:
    fields = {
        "tour_id": tour_id,
        "date": MONDAY,
        "time": time,
        "attendees_count": attendees,
        "customer_name": "Ana Rojas",
        "customer_email": "Ana@Example.com",
        "customer_phone": "+56911111111",
    }
    fields.update(overrides)
    return OrderCreate(**fields)


def place(db, data: OrderCreate, **kwargs):
    return create_order(db, data, booking_config=BOOKING, pricing_config=PRICING, **kwargs)


class TestCreateOrder:

    def test_creates_instance_and_pending_order(self, db, make_tour, redis_mock):
        tour = make_tour(base_price=100.0)

        order = place(db, order_request(tour.id, attendees=2))

        instance = db.get(TourInstances, order.tour_instance_id)
        assert order.status == "pending"
        assert order.total_amount == 200.0
        assert order.customer_email == "ana@example.com"
        assert order.order_number.startswith("ORD-")
        assert instance.start_time == "11:00:00"
        assert instance.instance_date == "2024-01-01"
        assert instance.current_attendants == 2

        queue, raw = redis_mock.rpush.call_args.args
        event = json.loads(raw)
        assert queue == "events:p2p"
        assert event["type"] == "order_created"
        assert event["order_number"] == order.order_number

    def test_second_order_joins_existing_instance(self, db, make_tour):
        tour = make_tour()

        first = place(db, order_request(tour.id, attendees=3))
        second = place(db, order_request(tour.id, time="11:00:00", attendees=4))

        assert first.tour_instance_id == second.tour_instance_id
        instance = db.get(TourInstances, first.tour_instance_id)
        assert instance.current_attendants == 7

    def test_discount_from_pricing_config(self, db, make_tour):
        tour = make_tour(base_price=100.0)
        order = place(db, order_request(tour.id, attendees=5))
        assert order.total_amount == 450.0

    def test_skip_payment_confirms_immediately(self, db, make_tour):
        tour = make_tour()
        order = place(db, order_request(tour.id), skip_payment=True)
        assert order.status == "confirmed"

    def test_rejects_over_capacity_and_keeps_counter(self, db, make_tour, make_instance):
        tour = make_tour(max_attendants=10)
        instance = make_instance(tour, "11:00:00", current_attendants=8)

        with pytest.raises(InsufficientCapacity) as exc:
            place(db, order_request(tour.id, attendees=5))

        assert exc.value.available == 2
        db.refresh(instance)
        assert instance.current_attendants == 8

    def test_rejects_full_instance_as_unavailable(self, db, make_tour, make_instance):
        tour = make_tour(max_attendants=10)
        make_instance(tour, "11:00:00", current_attendants=10)

        with pytest.raises(SlotUnavailable):
            place(db, order_request(tour.id, attendees=1))

    def test_rejects_time_inside_another_instance_window(self, db, make_tour, make_instance):
        tour = make_tour(name="Cellar")
        other = make_tour(name="Garden")
        make_instance(other, "11:00:00")

        with pytest.raises(SlotUnavailable):
            place(db, order_request(tour.id, time="11:30"))

    def test_rejects_holiday(self, db, make_tour, make_holiday):
        tour = make_tour()
        make_holiday(MONDAY)

        with pytest.raises(SlotUnavailable):
            place(db, order_request(tour.id))

    def test_rejects_below_minimum_attendants(self, db, make_tour):
        tour = make_tour(min_attendants=2)
        with pytest.raises(BookingRejected, match="Minimum 2"):
            place(db, order_request(tour.id, attendees=1))

    def test_rejects_standard_tour_on_sunday(self, db, make_tour):
        tour = make_tour(tour_type="Standard")
        with pytest.raises(BookingRejected, match="Mon-Sat"):
            place(db, order_request(tour.id, date=SUNDAY))

    def test_special_tour_allowed_on_sunday(self, db, make_tour):
        tour = make_tour(tour_type="Special")
        order = place(db, order_request(tour.id, date=SUNDAY))
        assert order.status == "pending"

    def test_rejects_time_outside_operating_hours(self, db, make_tour):
        tour = make_tour(earliest_hour="09:00:00", latest_hour="17:00:00")
        with pytest.raises(BookingRejected, match="between"):
            place(db, order_request(tour.id, time="18:00"))

    def test_unknown_tour(self, db):
        with pytest.raises(TourNotFound):
            place(db, order_request(404))

    def test_inactive_tour(self, db, make_tour):
        tour = make_tour(is_active=0)
        with pytest.raises(TourNotFound):
            place(db, order_request(tour.id))


class TestExclusiveTours:

    def test_orders_share_the_day_instance(self, db, make_tour):
        special = make_tour(name="Private tasting", tour_type="Special", max_attendants=8)

        first = place(db, order_request(special.id, time="12:00", attendees=3))
        second = place(db, order_request(special.id, time="12:00", attendees=3))

        assert first.tour_instance_id == second.tour_instance_id
        assert db.get(TourInstances, first.tour_instance_id).current_attendants == 6

    def test_other_start_time_is_rejected_once_day_is_locked(self, db, make_tour):
        special = make_tour(name="Private tasting", tour_type="Special")
        place(db, order_request(special.id, time="12:00"))

        with pytest.raises(SlotUnavailable):
            place(db, order_request(special.id, time="15:00"))

    def test_other_tours_are_locked_out(self, db, make_tour):
        special = make_tour(name="Private tasting", tour_type="Special")
        standard = make_tour(name="Cellar")
        place(db, order_request(special.id, time="12:00"))

        with pytest.raises(SlotUnavailable):
            place(db, order_request(standard.id, time="16:00"))

    def test_second_active_instance_on_same_day_is_rejected_by_storage(self, db, make_tour, make_instance):
        special = make_tour(name="Private tasting", tour_type="Special")
        make_instance(special, "10:00:00")

        with pytest.raises(IntegrityError):
            make_instance(special, "14:00:00")
        db.rollback()

    def test_cancelled_instance_does_not_hold_the_day(self, db, make_tour, make_instance):
        special = make_tour(name="Private tasting", tour_type="Special")
        make_instance(special, "10:00:00", status="cancelled")

        replacement = make_instance(special, "14:00:00")

        assert replacement.id is not None

    def test_concurrent_first_bookings_conflict(self, db, make_tour, make_instance, monkeypatch):
        # Another transaction created the day's instance after our lookup ran
        special = make_tour(name="Private tasting", tour_type="Special")
        existing = make_instance(special, "10:00:00", current_attendants=2)
        monkeypatch.setattr(orders_service, "is_slot_available", lambda *args, **kwargs: True)
        monkeypatch.setattr(orders_service, "_find_locked_instance", lambda *args, **kwargs: None)

        with pytest.raises(BookingConflict):
            place(db, order_request(special.id, time="14:00"))

        db.refresh(existing)
        assert existing.current_attendants == 2
        assert db.query(TourInstances).count() == 1

    def test_created_instance_is_flagged_exclusive(self, db, make_tour):
        special = make_tour(name="Private tasting", tour_type="Special")
        standard = make_tour(name="Cellar")

        special_order = place(db, order_request(special.id, time="12:00"))
        standard_order = place(db, order_request(standard.id, date=date(2024, 1, 2)))

        assert db.get(TourInstances, special_order.tour_instance_id).is_exclusive == 1
        assert db.get(TourInstances, standard_order.tour_instance_id).is_exclusive == 0



class TestOrderLookup:

    def test_get_by_number(self, db, make_tour):
        tour = make_tour()
        order = place(db, order_request(tour.id))
        assert get_order_by_number(db, order.order_number).id == order.id

    def test_missing_order(self, db):
        with pytest.raises(OrderNotFound):
            get_order_by_number(db, "ORD-20240101-XXXXXX")

    def test_confirm_pending_order(self, db, make_tour, redis_mock):
        tour = make_tour()
        order = place(db, order_request(tour.id))

        confirmed = confirm_order(db, order.order_number)

        assert confirmed.status == "confirmed"
        event = json.loads(redis_mock.rpush.call_args.args[1])
        assert event["type"] == "order_confirmed"

    def test_confirm_twice_is_rejected(self, db, make_tour):
        tour = make_tour()
        order = place(db, order_request(tour.id))
        confirm_order(db, order.order_number)

        with pytest.raises(BookingRejected):
            confirm_order(db, order.order_number)


class TestCancelOrder:

    def test_cancel_pending_order_releases_places(self, db, make_tour, redis_mock):
        tour = make_tour()
        keep = place(db, order_request(tour.id, attendees=3))
        drop = place(db, order_request(tour.id, attendees=4))

        cancelled = cancel_order(db, drop.order_number)

        assert cancelled.status == "cancelled"
        assert db.get(TourInstances, keep.tour_instance_id).current_attendants == 3
        event = json.loads(redis_mock.rpush.call_args.args[1])
        assert event["type"] == "order_cancelled"
        assert event["attendees_count"] == 4

    def test_cancelled_places_can_be_booked_again(self, db, make_tour):
        tour = make_tour(max_attendants=4)
        order = place(db, order_request(tour.id, attendees=4))
        cancel_order(db, order.order_number)

        again = place(db, order_request(tour.id, attendees=4))

        assert again.tour_instance_id == order.tour_instance_id

    def test_confirmed_order_cannot_be_cancelled(self, db, make_tour):
        tour = make_tour()
        order = place(db, order_request(tour.id))
        confirm_order(db, order.order_number)

        with pytest.raises(BookingRejected, match="confirmed"):
            cancel_order(db, order.order_number)

    def test_cancel_twice_is_rejected(self, db, make_tour):
        tour = make_tour()
        order = place(db, order_request(tour.id))
        cancel_order(db, order.order_number)

        with pytest.raises(BookingRejected, match="already cancelled or expired"):
            cancel_order(db, order.order_number)

    def test_expired_order_cannot_be_cancelled(self, db, make_tour):
        tour = make_tour()
        order = place(db, order_request(tour.id))
        order.status = "expired"
        db.commit()

        with pytest.raises(BookingRejected, match="already cancelled or expired"):
            cancel_order(db, order.order_number)

    def test_unknown_order(self, db):
        with pytest.raises(OrderNotFound):
            cancel_order(db, "ORD-20240101-XXXXXX")


class TestListOrders:

    def test_newest_first(self, db, make_tour):
        tour = make_tour()
        first = place(db, order_request(tour.id))
        second = place(db, order_request(tour.id))

        assert [o.id for o in list_orders(db)] == [second.id, first.id]

    def test_filter_by_status(self, db, make_tour):
        tour = make_tour()
        pending = place(db, order_request(tour.id))
        confirmed = place(db, order_request(tour.id))
        confirm_order(db, confirmed.order_number)

        assert [o.id for o in list_orders(db, "pending")] == [pending.id]
        assert [o.id for o in list_orders(db, "confirmed")] == [confirmed.id]

    def test_by_customer_email_ignores_case(self, db, make_tour):
        tour = make_tour()
        mine = place(db, order_request(tour.id))
        place(db, order_request(tour.id, customer_email="luis@example.com"))

        assert [o.id for o in list_orders_by_email(db, "ANA@example.com")] == [mine.id]
        assert list_orders_by_email(db, "nobody@example.com") == []


class TestOrderCreateSchema:

    def test_single_digit_hour_accepted(self, db, make_tour):
        tour = make_tour()
        order = place(db, order_request(tour.id, time="9:30"))
        assert db.get(TourInstances, order.tour_instance_id).start_time == "09:30:00"

    @pytest.mark.parametrize("time", ["24:00", "9:60", "930", "09:30:61"])
    def test_bad_time_rejected(self, time):
        with pytest.raises(ValidationError):
            order_request(1, time=time)

    @pytest.mark.parametrize("email", ["ana", "ana@", "@example.com", "ana rojas@example.com"])
    def test_bad_email_rejected(self, email):
        with pytest.raises(ValidationError):
            order_request(1, customer_email=email)

    def test_email_lowercased(self):
        assert order_request(1).customer_email == "ana@example.com"
