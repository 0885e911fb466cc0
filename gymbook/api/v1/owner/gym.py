import logging
from typing import List

from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from gymbook.db.session import get_db
from gymbook.api.deps import (
    get_current_owner,
    get_owner_gym,
    get_geocoder,
    get_image_storage,
    get_pincode_lookup,
)
from gymbook.core.clock import Clock, get_clock
from gymbook.core.config import settings
from gymbook.core.exceptions import ConflictError, ValidationError
from gymbook.integrations.geocoding import Geocoder
from gymbook.integrations.pincode import PincodeLookup
from gymbook.integrations.storage import ImageStorage, MAX_IMAGES_PER_UPLOAD, validate_image
from gymbook.models.gym import Gym, GymStatus
from gymbook.models.user import User
from gymbook.schemas.gym import Gym as GymSchema, GymCreate, GymUpdate, GymStats, ScheduleUpdate
from gymbook.services.stats import gym_stats
from gymbook.utils.schedule import normalize_schedule_slots

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/owner/gym", tags=["Owner - Gym"])

# GymCreate/GymUpdate field -> Gym column
GYM_FIELDS = {
    "gym_name": "gym_name",
    "gst_number": "gst_number",
    "price": "price",
    "description": "description",
    "address_line_1": "address_line_1",
    "address_line_2": "address_line_2",
    "city": "city",
    "state": "state",
    "pincode": "pincode",
    "facilities": "facilities",
    "max_occupants": "total_occupancy",
}

# GymCreate/GymUpdate field -> User column
OWNER_FIELDS = {
    "full_name": "full_name",
    "contact_info": "phone",
    "upi_id": "upi_id",
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _apply_gym_details(
    gym: Gym,
    owner: User,
    values: dict,
    geocoder: Geocoder,
    pincode_lookup: PincodeLookup,
) -> None:
    """
    Copy submitted values onto the gym and its owner. A resolvable pincode
    overrides city/state; a map link is geocoded to latitude/longitude.
    """
    if values.get("pincode"):
        details = pincode_lookup.lookup(values["pincode"])
        if details:
            values["city"] = details.city
            values["state"] = details.state

    if values.get("google_maps_link"):
        coordinates = geocoder.resolve(str(values["google_maps_link"]))
        gym.latitude = coordinates.latitude
        gym.longitude = coordinates.longitude

    for field, column in GYM_FIELDS.items():
        if field in values and values[field] is not None:
            setattr(gym, column, values[field])

    for field, column in OWNER_FIELDS.items():
        if field in values and values[field] is not None:
            setattr(owner, column, values[field])


# ---------------------------------------------------------------------------
# Onboarding
# ---------------------------------------------------------------------------


@router.post("/", response_model=GymSchema, status_code=status.HTTP_201_CREATED)
def create_gym(
    data: GymCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_owner),
    geocoder: Geocoder = Depends(get_geocoder),
    pincode_lookup: PincodeLookup = Depends(get_pincode_lookup),
):
    """Submit a gym for review. It stays `inactive` until an admin approves it."""
    if not data.agreement:
        raise ValidationError("Agreement must be signed", field="agreement")
    if db.query(Gym).filter(Gym.owner_id == current_user.id).first():
        raise ConflictError("You already own a gym. Only one gym per owner is allowed.", field="owner_id")

    gym = Gym(owner_id=current_user.id, status=GymStatus.INACTIVE, images=[])
    _apply_gym_details(gym, current_user, data.model_dump(), geocoder, pincode_lookup)

    db.add(gym)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("You already own a gym. Only one gym per owner is allowed.", field="owner_id")
    db.refresh(gym)

    logger.info("Gym %s submitted for review by owner %s", gym.id, current_user.id)
    return gym


@router.get("/", response_model=GymSchema)
def get_my_gym(gym: Gym = Depends(get_owner_gym)):
    return gym


@router.get("/stats", response_model=GymStats)
def get_my_gym_stats(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    gym: Gym = Depends(get_owner_gym),
):
    """Bookings, revenue, booked hours and distinct customers: this week vs last week."""
    return gym_stats(db, clock, gym)


@router.patch("/", response_model=GymSchema)
def update_gym(
    data: GymUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_owner),
    gym: Gym = Depends(get_owner_gym),
    geocoder: Geocoder = Depends(get_geocoder),
    pincode_lookup: PincodeLookup = Depends(get_pincode_lookup),
):
    _apply_gym_details(gym, current_user, data.model_dump(exclude_unset=True), geocoder, pincode_lookup)
    db.commit()
    db.refresh(gym)
    return gym


@router.patch("/resubmit", response_model=GymSchema)
def resubmit_gym(
    data: GymUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_owner),
    gym: Gym = Depends(get_owner_gym),
    geocoder: Geocoder = Depends(get_geocoder),
    pincode_lookup: PincodeLookup = Depends(get_pincode_lookup),
):
    """Apply corrections and send the gym back to the review queue."""
    _apply_gym_details(gym, current_user, data.model_dump(exclude_unset=True), geocoder, pincode_lookup)
    gym.status = GymStatus.INACTIVE
    db.commit()
    db.refresh(gym)

    logger.info("Gym %s resubmitted for review", gym.id)
    return gym


@router.post("/images", response_model=GymSchema)
def upload_gym_images(
    images: List[UploadFile] = File(...),
    db: Session = Depends(get_db),
    gym: Gym = Depends(get_owner_gym),
    storage: ImageStorage = Depends(get_image_storage),
):
    """Upload 1-10 images. All are validated before any is stored."""
    if not images:
        raise ValidationError("At least one image is required", field="images")
    if len(images) > MAX_IMAGES_PER_UPLOAD:
        raise ValidationError(f"At most {MAX_IMAGES_PER_UPLOAD} images can be uploaded at once", field="images")

    payloads = []
    for upload in images:
        data = upload.file.read()
        validate_image(upload.content_type, len(data))
        payloads.append((upload, data))

    urls = []
    try:
        for upload, data in payloads:
            urls.append(
                storage.upload(data, upload.filename or "image", upload.content_type, folder=f"gyms/{gym.id}")
            )
    except Exception:
        # Nothing is recorded on the gym, so drop what this request already stored
        logger.warning("Image upload for gym %s failed after %d file(s); removing them", gym.id, len(urls))
        for url in urls:
            storage.delete(url)
        raise

    gym.images = list(gym.images or []) + urls
    db.commit()
    db.refresh(gym)
    return gym


# ---------------------------------------------------------------------------
# Schedule
# ---------------------------------------------------------------------------


@router.put("/schedule", response_model=GymSchema)
def replace_schedule(
    data: ScheduleUpdate,
    db: Session = Depends(get_db),
    gym: Gym = Depends(get_owner_gym),
):
    """
    Replace the whole weekly schedule. Every day is validated first; if any
    day fails, nothing is stored and the errors for each day are returned.
    """
    submitted = {
        day: [interval.model_dump(by_alias=True) for interval in intervals]
        for day, intervals in data.slots.items()
    }
    slots = normalize_schedule_slots(submitted, min_minutes=settings.MIN_SLOT_MINUTES)

    gym.schedule = {"frequency": data.frequency.value, "slots": slots}
    db.commit()
    db.refresh(gym)

    logger.info("Schedule replaced for gym %s (%d day(s))", gym.id, len(slots))
    return gym
