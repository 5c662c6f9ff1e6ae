from seatlock.db.session import Base
from seatlock.models.show import Show
from seatlock.models.seat import Seat
from seatlock.models.booking import Booking, BookingSeat
