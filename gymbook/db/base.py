from gymbook.db.session import Base
from gymbook.models.user import User
from gymbook.models.gym import Gym
from gymbook.models.booking import Booking
from gymbook.models.extension import Extension
