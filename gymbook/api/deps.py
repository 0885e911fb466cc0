import uuid

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from gymbook.core.config import settings
from gymbook.core.security import decode_token
from gymbook.db.session import get_db
from gymbook.integrations.email import EmailSender
from gymbook.integrations.geocoding import Geocoder
from gymbook.integrations.pincode import PincodeLookup
from gymbook.integrations.storage import ImageStorage
from gymbook.models.gym import Gym
from gymbook.models.user import User, UserRole

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/login")


# ---------------------------------------------------------------------------
# Authentication & roles
# ---------------------------------------------------------------------------


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    payload = decode_token(token)
    if payload is None or payload.get("type") == "refresh":
        raise credentials_exception

    user = db.query(User).filter(User.id == _parse_subject(payload["sub"])).first()
    if user is None:
        raise credentials_exception
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is inactive")
    return user


def _parse_subject(sub: str) -> uuid.UUID:
    try:
        return uuid.UUID(sub)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )


def get_current_customer(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role != UserRole.CUSTOMER:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only customers can perform this action",
        )
    return current_user


def get_current_owner(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role != UserRole.OWNER:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only gym owners can perform this action",
        )
    return current_user


def get_current_admin_user(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role not in (UserRole.ADMIN, UserRole.MODERATOR):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not enough permissions",
        )
    return current_user


def get_owner_gym(
    current_user: User = Depends(get_current_owner),
    db: Session = Depends(get_db),
) -> Gym:
    gym = db.query(Gym).filter(Gym.owner_id == current_user.id).first()
    if not gym:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="You have not registered a gym yet")
    return gym


# ---------------------------------------------------------------------------
# External collaborators (overridden in tests)
# ---------------------------------------------------------------------------


def get_email_sender() -> EmailSender:
    return EmailSender()


def get_image_storage() -> ImageStorage:
    return ImageStorage()


def get_geocoder() -> Geocoder:
    return Geocoder()


def get_pincode_lookup() -> PincodeLookup:
    return PincodeLookup()
