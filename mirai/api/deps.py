from typing import Optional

from fastapi import Depends, HTTPException
from sqlalchemy.orm import Session

from mirai.core.auth import get_external_identity
from mirai.db.session import get_db
from mirai.models.user import User
from mirai.schemas.user import ExternalIdentity
from mirai.services.resume_builder import BuilderRegistry, ResumeBuilder, get_builder_registry
from mirai.services.user_service import reconcile_user


def get_current_user(
    identity: Optional[ExternalIdentity] = Depends(get_external_identity),
    db: Session = Depends(get_db),
) -> User:
    if identity is None:
        raise HTTPException(status_code=401, detail="Unauthorized")

    user = reconcile_user(db, identity)
    if user is None:
        # Signed in, but the local record could not be resolved
        raise HTTPException(status_code=503, detail="Could not resolve user record")
    return user


def get_builder(
    user: User = Depends(get_current_user),
    registry: BuilderRegistry = Depends(get_builder_registry),
) -> ResumeBuilder:
    return registry.get(user.id, user.name or "")
