from datetime import date, datetime
from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from salonbook.models import Services
from salonbook.services.scheduling import (
    ACTIVE_STATUSES,
    Appointment,
    AppointmentFilters,
    AppointmentManager,
    AppointmentStatus,
    LocalStaffLocks,
    ServiceLine,
    SqlAlchemyStore,
)
from salonbook.services.scheduling.errors import PersistenceFailure, SchedulingConflict

from .conftest import NOW


@pytest.fixture
def sql_store(db):
    return SqlAlchemyStore(db)


def make(start, end, *, user_id=10, staff_id=1, status=AppointmentStatus.BOOKED, created_at=NOW):
    minutes = int((end - start).total_seconds() // 60)
    return Appointment(
        salon_id=1,
        staff_id=staff_id,
        user_id=user_id,
        start_at=start,
        end_at=end,
        total_duration=minutes,
        total_price=Decimal("20.00"),
        status=status,
        lines=[ServiceLine(service_id=1, name="Haircut", duration=minutes, price=Decimal("20.00"))],
        created_at=created_at,
    )


class TestLookups:

    def test_salon(self, sql_store):
        salon = sql_store.get_salon(1)
        assert salon.name == "Downtown Studio"
        assert salon.hours["saturday"] == "10:00 AM - 2:00 PM"
        assert sql_store.get_salon(99) is None

    def test_staff(self, sql_store):
        assert sql_store.get_staff(3).salon_id == 2
        assert sql_store.get_staff(99) is None

    def test_services_scoped_to_salon(self, sql_store):
        assert {s.id for s in sql_store.get_services([1, 2, 4])} == {1, 2, 4}
        assert {s.id for s in sql_store.get_services([1, 2, 4], salon_id=1)} == {1, 2}
        assert sql_store.get_services([]) == []

    def test_salon_services_sorted_by_name(self, sql_store):
        assert [s.name for s in sql_store.list_salon_services(1)] == ["Beard Trim", "Color", "Haircut"]


class TestAppointments:

    def test_add_and_reload_with_lines(self, sql_store):
        created = sql_store.add_appointment(make(datetime(2024, 1, 1, 9), datetime(2024, 1, 1, 9, 30)))
        assert created.id is not None
        loaded = sql_store.get_appointment(created.id)
        assert loaded.status == AppointmentStatus.BOOKED
        assert loaded.total_price == Decimal("20.00")
        assert [(l.service_id, l.name, l.duration) for l in loaded.lines] == [(1, "Haircut", 30)]
        assert loaded.created_at == NOW

    def test_missing_appointment(self, sql_store):
        assert sql_store.get_appointment(12345) is None

    def test_staff_range_narrowing(self, sql_store):
        a = sql_store.add_appointment(make(datetime(2024, 1, 1, 9), datetime(2024, 1, 1, 10)))
        sql_store.add_appointment(make(datetime(2024, 1, 1, 10), datetime(2024, 1, 1, 11)))
        sql_store.add_appointment(make(datetime(2024, 1, 1, 9), datetime(2024, 1, 1, 10), staff_id=2))

        found = sql_store.list_staff_appointments(
            1, ACTIVE_STATUSES, datetime(2024, 1, 1, 9, 30), datetime(2024, 1, 1, 10)
        )
        assert [x.id for x in found] == [a.id]

    def test_staff_status_filter(self, sql_store):
        sql_store.add_appointment(make(
            datetime(2024, 1, 1, 9), datetime(2024, 1, 1, 10), status=AppointmentStatus.CANCELLED
        ))
        assert sql_store.list_staff_appointments(1, ACTIVE_STATUSES) == []

    def test_salon_window(self, sql_store):
        inside = sql_store.add_appointment(make(datetime(2024, 1, 2, 9), datetime(2024, 1, 2, 10)))
        sql_store.add_appointment(make(datetime(2024, 1, 8, 9), datetime(2024, 1, 8, 10)))
        found = sql_store.list_salon_appointments(
            1, datetime(2024, 1, 1), datetime(2024, 1, 8), [AppointmentStatus.BOOKED]
        )
        assert [x.id for x in found] == [inside.id]

    def test_save_status(self, sql_store):
        created = sql_store.add_appointment(make(datetime(2024, 1, 1, 9), datetime(2024, 1, 1, 10)))
        created.status = AppointmentStatus.CANCELLED
        created.cancelled_at = NOW
        created.cancelled_by = 10
        created.cancellation_reason = "Sick"
        saved = sql_store.save_status(created, AppointmentStatus.BOOKED)
        assert saved.status == AppointmentStatus.CANCELLED
        assert saved.cancellation_reason == "Sick"
        assert sql_store.get_appointment(created.id).cancelled_by == 10

    def test_save_status_skips_when_status_moved_on(self, sql_store):
        created = sql_store.add_appointment(make(datetime(2024, 1, 1, 9), datetime(2024, 1, 1, 10)))
        completed = sql_store.get_appointment(created.id)
        completed.status = AppointmentStatus.COMPLETED
        sql_store.save_status(completed, AppointmentStatus.BOOKED)

        # Stale copy still believes the appointment is booked
        created.status = AppointmentStatus.CANCELLED
        created.cancelled_at = NOW
        assert sql_store.save_status(created, AppointmentStatus.BOOKED) is None

        stored = sql_store.get_appointment(created.id)
        assert stored.status == AppointmentStatus.COMPLETED
        assert stored.cancelled_at is None

    def test_save_status_missing_row(self, sql_store):
        ghost = make(datetime(2024, 1, 1, 9), datetime(2024, 1, 1, 10))
        ghost.id = 4040
        assert sql_store.save_status(ghost, AppointmentStatus.BOOKED) is None


class TestUserQueries:

    @pytest.fixture
    def three(self, sql_store):
        return [
            sql_store.add_appointment(make(datetime(2024, 1, d, 9), datetime(2024, 1, d, 10),
                                           created_at=datetime(2023, 12, 31 - d, 8)))
            for d in (1, 2, 3)
        ]

    def test_default_sort_is_newest_start_first(self, sql_store, three):
        items, total = sql_store.list_user_appointments(10, AppointmentFilters())
        assert total == 3
        assert [x.start_at.day for x in items] == [3, 2, 1]

    def test_sort_by_created_at(self, sql_store, three):
        items, _ = sql_store.list_user_appointments(10, AppointmentFilters(sort="created_at", order="asc"))
        assert [x.start_at.day for x in items] == [3, 2, 1]

    def test_date_range_is_inclusive(self, sql_store, three):
        filters = AppointmentFilters(date_from=date(2024, 1, 2), date_to=date(2024, 1, 3))
        items, total = sql_store.list_user_appointments(10, filters)
        assert total == 2
        assert {x.start_at.day for x in items} == {2, 3}

    def test_offset_limit_with_total(self, sql_store, three):
        items, total = sql_store.list_user_appointments(
            10, AppointmentFilters(order="asc"), offset=1, limit=1
        )
        assert total == 3
        assert [x.start_at.day for x in items] == [2]

    def test_other_user_sees_nothing(self, sql_store, three):
        assert sql_store.list_user_appointments(11, AppointmentFilters()) == ([], 0)

    def test_counts(self, sql_store, three):
        three[0].status = AppointmentStatus.COMPLETED
        sql_store.save_status(three[0], AppointmentStatus.BOOKED)
        assert sql_store.status_counts(10) == {
            AppointmentStatus.BOOKED: 2,
            AppointmentStatus.COMPLETED: 1,
        }
        assert sql_store.count_upcoming(10, datetime(2024, 1, 2, 12)) == 1


class TestServiceConstraints:

    @pytest.mark.parametrize("duration, price", [(0, "10.00"), (-15, "10.00"), (30, "-0.01")])
    def test_rejects_invalid_service(self, db, duration, price):
        db.add(Services(id=50, name="Broken", duration=duration, price=Decimal(price)))
        with pytest.raises(IntegrityError):
            db.commit()
        db.rollback()

    def test_accepts_free_service(self, db, sql_store):
        db.add(Services(id=51, name="Consultation", duration=15, price=Decimal("0.00")))
        db.commit()
        assert sql_store.get_services([51])[0].price == Decimal("0")


class TestFailures:

    def test_commit_error_becomes_persistence_failure(self, sql_store, db, monkeypatch):
        def boom():
            raise OperationalError("INSERT", {}, Exception("disk full"))

        monkeypatch.setattr(db, "commit", boom)
        with pytest.raises(PersistenceFailure) as exc:
            sql_store.add_appointment(make(datetime(2024, 1, 1, 9), datetime(2024, 1, 1, 10)))
        assert exc.value.details == {"action": "create appointment"}


class TestManagerOverSql:

    def test_book_conflict_and_cancel(self, sql_store):
        manager = AppointmentManager(sql_store, LocalStaffLocks(), notify=lambda *_: None, clock=lambda: NOW)
        appt = manager.book(
            user_id=10, salon_id=1, staff_id=1,
            start_at=datetime(2024, 1, 1, 9), service_ids=[1, 2],
        )
        assert appt.end_at == datetime(2024, 1, 1, 10, 15)
        assert appt.total_price == Decimal("55.00")
        assert [line.name for line in appt.lines] == ["Haircut", "Color"]

        with pytest.raises(SchedulingConflict):
            manager.book(
                user_id=11, salon_id=1, staff_id=1,
                start_at=datetime(2024, 1, 1, 10), service_ids=[3],
            )

        manager.cancel(appt.id, 10)
        again = manager.book(
            user_id=11, salon_id=1, staff_id=1,
            start_at=datetime(2024, 1, 1, 10), service_ids=[3],
        )
        assert again.status == AppointmentStatus.BOOKED
