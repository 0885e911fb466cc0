from gymbook.schemas.common import PaginatedResponse, ErrorResponse
from gymbook.schemas.user import User, UserCreate, AdminCreate, UserUpdate, UserSummary, Token
from gymbook.schemas.gym import (
    Gym, GymCreate, GymUpdate, GymListItem, PendingGym, GymReviewDecision,
    Interval, Schedule, ScheduleUpdate, AvailabilityResponse, GymCity, GymStats, WeeklyStat,
)
from gymbook.schemas.booking import (
    Booking, BookingCreate, BookingListItem, UpcomingBooking,
    RatingRequest, RatingResponse, BookingGymImages,
)
from gymbook.schemas.extension import (
    Extension, ExtensionCreate, ExtensionDecision, OwnerPendingExtension,
)
