from datetime import timedelta

import pytest
from sqlalchemy import text

from seatlock.core.exceptions import InvalidSeats, SeatsLocked, SeatsUnavailable
from seatlock.db.session import SessionLocal
from seatlock.models.seat import SeatStatus
from seatlock.services import reservations
from seatlock.services.seat_locks import hold_seats, release_seats
from seatlock.utils.clock import as_utc, utcnow
from tests.helpers import expire_seats, seat_state


def test_hold_marks_seats_pending_until_expiry(db, make_show):
    show_id, seat_ids = make_show(total_seats=3)

    hold = hold_seats(db, show_id, seat_ids[:2], ttl_seconds=60)

    assert hold.seat_ids == seat_ids[:2]
    assert hold.ttl_seconds == 60
    assert hold.locked_until > utcnow() + timedelta(seconds=50)

    show, seats = seat_state(show_id)
    for seat_id in seat_ids[:2]:
        assert seats[seat_id].status == SeatStatus.PENDING
        assert seats[seat_id].lock_token == hold.hold_token
        assert as_utc(seats[seat_id].locked_until) == hold.locked_until
    assert seats[seat_ids[2]].status == SeatStatus.AVAILABLE
    # Holding does not consume availability
    assert show.available_seats == 3


def test_hold_on_held_seat_is_unavailable(db, make_show):
    show_id, seat_ids = make_show(total_seats=3)
    hold_seats(db, show_id, seat_ids[:2])

    with pytest.raises(SeatsUnavailable) as excinfo:
        hold_seats(db, show_id, seat_ids[1:])

    assert excinfo.value.seat_ids == [seat_ids[1]]
    # No partial hold on the free seat
    _, seats = seat_state(show_id)
    assert seats[seat_ids[2]].status == SeatStatus.AVAILABLE
    assert seats[seat_ids[2]].locked_until is None


def test_expired_hold_can_be_taken_over(db, make_show):
    show_id, seat_ids = make_show(total_seats=2)
    first = hold_seats(db, show_id, seat_ids)
    expire_seats(seat_ids)

    second = hold_seats(db, show_id, seat_ids)

    assert second.hold_token != first.hold_token
    _, seats = seat_state(show_id)
    assert {seats[s].lock_token for s in seat_ids} == {second.hold_token}


def test_hold_rejects_seats_of_another_show(db, make_show):
    show_id, seat_ids = make_show(total_seats=2)
    _, other_seats = make_show(total_seats=2, name="Other")

    with pytest.raises(InvalidSeats):
        hold_seats(db, show_id, [seat_ids[0], other_seats[0]])


@pytest.mark.parametrize("bad", [[], ["dup", "dup"]])
def test_hold_rejects_empty_or_duplicate_selection(db, make_show, bad):
    show_id, _ = make_show()
    with pytest.raises(InvalidSeats):
        hold_seats(db, show_id, bad)


@pytest.mark.parametrize("ttl", [0, -1, 24 * 3600])
def test_hold_rejects_ttl_out_of_range(db, make_show, ttl):
    show_id, seat_ids = make_show()
    with pytest.raises(InvalidSeats):
        hold_seats(db, show_id, seat_ids[:1], ttl_seconds=ttl)


def test_hold_fails_fast_while_another_writer_is_in_flight(db, make_show):
    show_id, seat_ids = make_show(total_seats=2)

    blocker = SessionLocal()
    try:
        # An uncommitted write keeps the store locked
        blocker.execute(text("UPDATE seats SET seat_number = seat_number WHERE id = :id"), {"id": seat_ids[0]})

        with pytest.raises(SeatsLocked):
            hold_seats(db, show_id, seat_ids)
    finally:
        blocker.rollback()
        blocker.close()

    # Nothing was left behind, and the seats can be held once the writer is gone
    _, seats = seat_state(show_id)
    assert all(seat.status == SeatStatus.AVAILABLE for seat in seats.values())
    hold_seats(db, show_id, seat_ids)


def test_release_returns_held_seats(db, make_show):
    show_id, seat_ids = make_show(total_seats=2)
    hold = hold_seats(db, show_id, seat_ids)

    released = release_seats(db, show_id, seat_ids, hold_token=hold.hold_token)

    assert released == seat_ids
    _, seats = seat_state(show_id)
    for seat in seats.values():
        assert seat.status == SeatStatus.AVAILABLE
        assert seat.locked_until is None
        assert seat.lock_token is None


def test_release_is_idempotent_and_never_frees_booked_seats(db, make_show):
    show_id, seat_ids = make_show(total_seats=3)
    reservations.create_booking(db, show_id, seat_ids[:1])

    assert release_seats(db, show_id, seat_ids) == []
    assert release_seats(db, show_id, seat_ids) == []

    show, seats = seat_state(show_id)
    assert seats[seat_ids[0]].status == SeatStatus.BOOKED
    assert seats[seat_ids[1]].status == SeatStatus.AVAILABLE
    assert show.available_seats == 2


def test_release_with_foreign_token_keeps_the_hold(db, make_show):
    show_id, seat_ids = make_show(total_seats=2)
    hold = hold_seats(db, show_id, seat_ids)

    assert release_seats(db, show_id, seat_ids, hold_token="not-the-holder") == []

    _, seats = seat_state(show_id)
    assert all(seat.lock_token == hold.hold_token for seat in seats.values())
