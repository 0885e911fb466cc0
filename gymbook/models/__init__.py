from gymbook.models.user import User, UserRole
from gymbook.models.gym import Gym, GymStatus, ScheduleFrequency
from gymbook.models.booking import Booking, BookingStatus
from gymbook.models.extension import Extension, ExtensionStatus
