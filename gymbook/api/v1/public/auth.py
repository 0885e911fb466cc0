import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from gymbook.db.session import get_db
from gymbook.core.config import settings
from gymbook.core.security import create_access_token, create_refresh_token, get_password_hash, verify_password

from gymbook.api.deps import get_email_sender
from gymbook.integrations.email import EmailSender
from gymbook.models.user import User, UserRole
from gymbook.schemas.user import UserCreate, AdminCreate, Token, User as UserSchema

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _build_token_response(user: User) -> Token:
    access_token = create_access_token(subject=str(user.id), role=user.role.value)
    refresh_token = create_refresh_token(subject=str(user.id), role=user.role.value)
    return Token(
        access_token=access_token,
        refresh_token=refresh_token,
        token_type="bearer",
        user=UserSchema.model_validate(user),
    )


def _ensure_email_free(db: Session, email: str) -> None:
    if db.query(User).filter(User.email == email).first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered",
        )


@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
def register(
    body: UserCreate,
    db: Session = Depends(get_db),
    email_sender: EmailSender = Depends(get_email_sender),
):
    _ensure_email_free(db, body.email)
    user = User(
        email=body.email,
        password_hash=get_password_hash(body.password),
        full_name=body.full_name,
        phone=body.phone,
        avatar_url=body.avatar_url,
        role=UserRole(body.role),
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info("Registered %s %s", user.role.value, user.id)
    email_sender.send_templated(user.email, "welcome", {"userName": user.full_name or user.email})
    return _build_token_response(user)


@router.post("/admin/register", response_model=Token, status_code=status.HTTP_201_CREATED)
def admin_register(body: AdminCreate, db: Session = Depends(get_db)):
    if body.admin_secret != settings.ADMIN_SECRET_KEY:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid admin secret",
        )
    _ensure_email_free(db, body.email)
    user = User(
        email=body.email,
        password_hash=get_password_hash(body.password),
        full_name=body.full_name,
        phone=body.phone,
        avatar_url=body.avatar_url,
        role=UserRole.ADMIN,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return _build_token_response(user)


@router.post("/login", response_model=Token)
def login(form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == form_data.username.strip().lower()).first()
    if not user or not verify_password(form_data.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive",
        )
    return _build_token_response(user)
