
from seatlock.models.show import Show
from seatlock.models.seat import Seat, SeatStatus
from seatlock.models.booking import Booking, BookingSeat, BookingStatus
