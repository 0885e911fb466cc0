import logging
from uuid import UUID
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session, joinedload

from gymbook.db.session import get_db
from gymbook.api.deps import get_current_admin_user, get_email_sender
from gymbook.core.exceptions import ConflictError
from gymbook.integrations.email import EmailSender
from gymbook.models.gym import Gym, GymStatus
from gymbook.models.user import User
from gymbook.services.ratings import recompute_gym_rating
from gymbook.schemas.gym import (
    PendingGym,
    GymReviewDecision,
    GymStatusResponse,
    GymRatingSummary,
)
from gymbook.schemas.common import PaginatedResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/gyms", tags=["Admin - Gyms"])


def _get_gym_or_404(gym_id: UUID, db: Session) -> Gym:
    gym = db.query(Gym).options(joinedload(Gym.owner)).filter(Gym.id == gym_id).first()
    if not gym:
        raise HTTPException(status_code=404, detail="Gym not found")
    return gym


def split_reasons(reason: Optional[str]) -> List[str]:
    """'Blurry photos. Missing GST.' -> ['Blurry photos', 'Missing GST']"""
    if not reason:
        return []
    return [sentence.strip() for sentence in reason.split(".") if sentence.strip()]


# ---------------------------------------------------------------------------
# Review queue
# ---------------------------------------------------------------------------


@router.get("/pending", response_model=PaginatedResponse[PendingGym])
def list_pending_gyms(
    search: Optional[str] = Query(None, description="Case-insensitive gym name search"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user),
):
    """Gyms awaiting review, oldest request first."""
    query = db.query(Gym).options(joinedload(Gym.owner)).filter(Gym.status == GymStatus.INACTIVE)
    if search:
        query = query.filter(Gym.gym_name.ilike(f"%{search.strip()}%"))

    total = query.count()
    gyms = (
        query.order_by(Gym.req_creation_date.asc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    return PaginatedResponse(
        data=[PendingGym.model_validate(g) for g in gyms],
        total=total,
        page=page,
        limit=limit,
        total_pages=-(-total // limit) if total else 0,
    )


@router.patch("/{gym_id}/response", response_model=GymStatusResponse)
def respond_to_gym(
    gym_id: UUID,
    data: GymReviewDecision,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user),
    email_sender: EmailSender = Depends(get_email_sender),
):
    """Approve (gym goes live) or reject (owner is asked to resubmit)."""
    gym = _get_gym_or_404(gym_id, db)
    if gym.status != GymStatus.INACTIVE:
        raise ConflictError(f"Gym is {gym.status.value}, not awaiting review", field="status")
    gym.status = GymStatus.ACTIVE if data.status == "approve" else GymStatus.REJECTED
    db.commit()
    db.refresh(gym)

    logger.info("Gym %s %sd by %s", gym.id, data.status, current_user.id)

    recipient = gym.owner.email
    if gym.status == GymStatus.ACTIVE:
        email_sender.send_templated(recipient, "approval", {"userName": gym.owner.full_name or recipient})
    else:
        email_sender.send_templated(
            recipient,
            "resubmission",
            {"userName": gym.owner.full_name or recipient, "reason": split_reasons(data.reason)},
        )

    return GymStatusResponse(gym_id=gym.id, status=gym.status)


@router.patch("/{gym_id}/deactivate", response_model=GymStatusResponse)
def deactivate_gym(
    gym_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user),
):
    gym = _get_gym_or_404(gym_id, db)
    gym.status = GymStatus.INACTIVE
    db.commit()
    db.refresh(gym)
    return GymStatusResponse(gym_id=gym.id, status=gym.status)


# ---------------------------------------------------------------------------
# Ratings
# ---------------------------------------------------------------------------


@router.post("/{gym_id}/ratings/recompute", response_model=GymRatingSummary)
def recompute_ratings(
    gym_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user),
):
    """Rebuild average_rating/total_ratings from the ratings stored on bookings."""
    gym = _get_gym_or_404(gym_id, db)
    recompute_gym_rating(db, gym.id)
    db.commit()
    db.refresh(gym)
    return GymRatingSummary(gym_id=gym.id, average_rating=gym.average_rating, total_ratings=gym.total_ratings)
