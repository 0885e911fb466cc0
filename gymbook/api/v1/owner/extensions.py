from uuid import UUID
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from gymbook.db.session import get_db
from gymbook.api.deps import get_current_owner
from gymbook.models.user import User
from gymbook.services import extensions as extension_service
from gymbook.schemas.extension import Extension as ExtensionSchema, ExtensionDecision, OwnerPendingExtension

router = APIRouter(prefix="/owner/extensions", tags=["Owner - Extensions"])


@router.get("/", response_model=List[OwnerPendingExtension])
def list_pending_extensions(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_owner),
):
    """Pending extension requests on the owner's gym, latest booking date first."""
    return extension_service.list_owner_pending_extensions(db, current_user.id)


@router.patch("/{extension_id}", response_model=ExtensionSchema)
def respond_to_extension(
    extension_id: UUID,
    data: ExtensionDecision,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_owner),
):
    return extension_service.respond_to_extension(db, current_user, extension_id, data.status)
