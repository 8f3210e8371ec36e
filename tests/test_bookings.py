# tests/test_bookings.py

import uuid
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.core.caller import Caller
from app.core.exceptions import NotFound, PermissionDenied, StateError, ValidationError
from app.db.base_class import Base
from app.models.booking import Booking
from app.models.lesson import Lesson, Subject
from app.models.profile import Profile
from app.models.review import Review
from app.models.transaction import Transaction
from app.services import booking_service, ledger_service, review_service
from app.services.booking_service import ALLOWED_TRANSITIONS, can_transition
from tests.conftest import caller_for, in_days


def _book(db, student, lesson, **kwargs):
    return booking_service.create_booking(
        db,
        caller_for(student),
        lesson_id=lesson.id,
        student_id=student.id,
        scheduled_at=kwargs.pop("scheduled_at", in_days(3)),
        **kwargs,
    )


class TestTransitionGraph:
    @pytest.mark.parametrize(
        "current,new",
        [
            ("pending", "confirmed"),
            ("pending", "cancelled"),
            ("confirmed", "completed"),
            ("confirmed", "cancelled"),
        ],
    )
    def test_allowed(self, current, new):
        assert can_transition(current, new)

    @pytest.mark.parametrize(
        "current,new",
        [
            ("pending", "completed"),
            ("completed", "pending"),
            ("completed", "cancelled"),
            ("cancelled", "pending"),
            ("confirmed", "pending"),
        ],
    )
    def test_rejected(self, current, new):
        assert not can_transition(current, new)

    def test_terminal_states_have_no_exit(self):
        assert ALLOWED_TRANSITIONS["completed"] == frozenset()
        assert ALLOWED_TRANSITIONS["cancelled"] == frozenset()


class TestCreateBooking:
    def test_student_books_active_lesson(self, db, student, teacher, lesson):
        booking = _book(db, student, lesson, notes="Chapter 3 please")
        assert booking.status == "pending"
        assert booking.student_id == student.id
        assert booking.teacher_id == teacher.id
        assert booking.notes == "Chapter 3 please"

    def test_cannot_book_for_someone_else(self, db, student, make_profile, lesson):
        other = make_profile("student")
        with pytest.raises(PermissionDenied):
            booking_service.create_booking(
                db, caller_for(other), lesson.id, student.id, in_days(1)
            )

    def test_unknown_lesson(self, db, student, lesson):
        with pytest.raises(NotFound):
            booking_service.create_booking(
                db, caller_for(student), uuid.uuid4(), student.id, in_days(1)
            )

    def test_inactive_lesson(self, db, student, teacher, make_lesson):
        lesson = make_lesson(teacher, is_active=False)
        with pytest.raises(StateError):
            _book(db, student, lesson)

    def test_teacher_cannot_book_own_lesson(self, db, teacher, lesson):
        with pytest.raises(ValidationError):
            _book(db, teacher, lesson)


class TestUpdateStatus:
    def test_full_lifecycle_updates_teacher_totals(self, db, student, teacher, lesson):
        booking = _book(db, student, lesson)
        booking_service.update_status(db, caller_for(teacher), booking.id, "confirmed")
        booking_service.update_status(db, caller_for(student), booking.id, "completed")

        assert booking.status == "completed"
        db.refresh(teacher)
        assert teacher.total_lessons == 1
        assert teacher.total_students == 1

    def test_totals_count_distinct_students(self, db, student, make_profile, teacher, lesson):
        second = make_profile("student")
        for who in (student, student, second):
            booking = _book(db, who, lesson)
            booking_service.update_status(db, caller_for(teacher), booking.id, "confirmed")
            booking_service.update_status(db, caller_for(teacher), booking.id, "completed")

        db.refresh(teacher)
        assert teacher.total_lessons == 3
        assert teacher.total_students == 2

    def test_completed_cannot_go_back_to_pending(self, db, student, teacher, lesson):
        booking = _book(db, student, lesson)
        booking_service.update_status(db, caller_for(teacher), booking.id, "confirmed")
        booking_service.update_status(db, caller_for(teacher), booking.id, "completed")

        with pytest.raises(StateError) as exc:
            booking_service.update_status(db, caller_for(teacher), booking.id, "pending")
        assert exc.value.details["current"] == "completed"
        assert exc.value.details["allowed"] == []

    def test_pending_cannot_skip_to_completed(self, db, student, teacher, lesson):
        booking = _book(db, student, lesson)
        with pytest.raises(StateError):
            booking_service.update_status(db, caller_for(teacher), booking.id, "completed")

    def test_cancelled_is_terminal(self, db, student, teacher, lesson):
        booking = _book(db, student, lesson)
        booking_service.update_status(db, caller_for(student), booking.id, "cancelled")
        with pytest.raises(StateError):
            booking_service.update_status(db, caller_for(teacher), booking.id, "confirmed")

    def test_unknown_status(self, db, student, teacher, lesson):
        booking = _book(db, student, lesson)
        with pytest.raises(ValidationError):
            booking_service.update_status(db, caller_for(teacher), booking.id, "archived")

    def test_outsider_cannot_change_status(self, db, student, make_profile, lesson):
        booking = _book(db, student, lesson)
        with pytest.raises(PermissionDenied):
            booking_service.update_status(
                db, caller_for(make_profile("teacher")), booking.id, "confirmed"
            )


class TestReadsAndDetails:
    def test_list_scoped_to_participant(self, db, student, make_profile, teacher, admin, lesson):
        mine = _book(db, student, lesson)
        _book(db, make_profile("student"), lesson)

        assert [b.id for b in booking_service.list_bookings(db, caller_for(student))] == [mine.id]
        assert len(booking_service.list_bookings(db, caller_for(teacher))) == 2
        assert len(booking_service.list_bookings(db, caller_for(admin))) == 2

    def test_list_filters_by_status(self, db, student, teacher, lesson):
        first = _book(db, student, lesson)
        _book(db, student, lesson)
        booking_service.update_status(db, caller_for(teacher), first.id, "confirmed")

        confirmed = booking_service.list_bookings(db, caller_for(student), status="confirmed")
        assert [b.id for b in confirmed] == [first.id]

    def test_outsider_cannot_read(self, db, student, make_profile, lesson):
        booking = _book(db, student, lesson)
        with pytest.raises(PermissionDenied):
            booking_service.get_booking(db, caller_for(make_profile("student")), booking.id)

    def test_teacher_sets_meeting_link(self, db, student, teacher, lesson):
        booking = _book(db, student, lesson)
        booking_service.update_booking_details(
            db, caller_for(teacher), booking.id, meeting_link="https://meet.example.com/abc"
        )
        assert booking.meeting_link == "https://meet.example.com/abc"

    def test_terminal_booking_details_frozen(self, db, student, teacher, lesson):
        booking = _book(db, student, lesson)
        booking_service.update_status(db, caller_for(student), booking.id, "cancelled")
        with pytest.raises(StateError):
            booking_service.update_booking_details(db, caller_for(teacher), booking.id, notes="late")


# ============================================================================
# Concurrent writers -- two sessions on one file database
# ============================================================================


@pytest.fixture
def session_factory(tmp_path):
    engine = create_engine(f"sqlite+pysqlite:///{tmp_path / 'bookings.db'}")
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    engine.dispose()


def _seed_confirmed_booking(factory):
    with factory() as session:
        teacher = Profile(id=uuid.uuid4(), email="t@example.com", full_name="T", user_type="teacher")
        student = Profile(id=uuid.uuid4(), email="s@example.com", full_name="S", user_type="student")
        subject = Subject(name="Chemistry")
        session.add_all([teacher, student, subject])
        session.flush()
        lesson = Lesson(
            teacher_id=teacher.id,
            subject_id=subject.id,
            title="Titration",
            description="Acids and bases",
            price=Decimal("25.00"),
        )
        session.add(lesson)
        session.flush()
        booking = Booking(
            lesson_id=lesson.id,
            student_id=student.id,
            teacher_id=teacher.id,
            scheduled_at=in_days(1),
            status="confirmed",
        )
        session.add(booking)
        session.commit()
        return Caller(teacher.id, "teacher"), Caller(student.id, "student"), booking.id


class TestConcurrentTransitions:
    def test_completed_is_not_overwritten_by_stale_cancel(self, session_factory):
        teacher, student, booking_id = _seed_confirmed_booking(session_factory)
        first, second = session_factory(), session_factory()
        try:
            assert first.get(Booking, booking_id).status == "confirmed"
            assert second.get(Booking, booking_id).status == "confirmed"

            booking_service.update_status(first, teacher, booking_id, "completed")
            first.commit()

            with pytest.raises(StateError):
                booking_service.update_status(second, student, booking_id, "cancelled")
            second.rollback()
        finally:
            first.close()
            second.close()

        with session_factory() as check:
            assert check.get(Booking, booking_id).status == "completed"
            assert check.get(Profile, teacher.id).total_lessons == 1

    def test_conditional_write_refuses_stale_status(self, session_factory, monkeypatch):
        teacher, student, booking_id = _seed_confirmed_booking(session_factory)
        first, second = session_factory(), session_factory()
        try:
            stale = second.get(Booking, booking_id)

            booking_service.update_status(first, teacher, booking_id, "completed")
            first.commit()

            # Row lock bypassed: the decision is made against the stale read
            monkeypatch.setattr(booking_service, "lock_booking", lambda db, _id: stale)
            with pytest.raises(StateError) as exc:
                booking_service.update_status(second, student, booking_id, "cancelled")
            assert exc.value.details["expected"] == "confirmed"
            second.rollback()
        finally:
            first.close()
            second.close()

        with session_factory() as check:
            assert check.get(Booking, booking_id).status == "completed"


class TestCascades:
    def test_deleting_booking_removes_transaction_and_review(
        self, db, student, teacher, lesson
    ):
        booking = _book(db, student, lesson)
        booking_service.update_status(db, caller_for(teacher), booking.id, "confirmed")
        booking_service.update_status(db, caller_for(teacher), booking.id, "completed")
        ledger_service.record_payment(db, Caller.system(), booking.id, Decimal("100"))
        review_service.submit_review(db, caller_for(student), booking.id, student.id, 5)

        db.delete(booking)
        db.flush()

        assert db.query(Transaction).count() == 0
        assert db.query(Review).count() == 0

    def test_deleting_teacher_removes_lessons_and_bookings(self, db, student, teacher, lesson):
        _book(db, student, lesson)

        db.delete(teacher)
        db.flush()
        db.expunge_all()

        assert db.query(Lesson).count() == 0
        assert db.query(Booking).count() == 0

    def test_deleting_student_removes_their_bookings(self, db, student, make_profile, lesson):
        other = make_profile("student")
        _book(db, student, lesson)
        kept = _book(db, other, lesson)

        db.delete(student)
        db.flush()
        db.expunge_all()

        assert [b.id for b in db.query(Booking).all()] == [kept.id]
        assert db.query(Lesson).count() == 1
