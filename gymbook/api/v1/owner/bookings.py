from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from gymbook.db.session import get_db
from gymbook.api.deps import get_owner_gym
from gymbook.core.clock import Clock, get_clock
from gymbook.models.gym import Gym
from gymbook.services.bookings import list_upcoming_gym_bookings
from gymbook.schemas.booking import UpcomingBooking

router = APIRouter(prefix="/owner/bookings", tags=["Owner - Bookings"])


@router.get("/upcoming", response_model=List[UpcomingBooking])
def upcoming_bookings(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    gym: Gym = Depends(get_owner_gym),
):
    """Bookings at the owner's gym from today onwards, in slot order."""
    return [
        UpcomingBooking(
            booking_id=b.id,
            date=b.date,
            customer=b.user.full_name,
            mobile=b.user.phone,
            slot=f"{b.from_time}-{b.to_time}",
            status=b.status,
        )
        for b in list_upcoming_gym_bookings(db, clock, gym)
    ]
