"""
User Service

Maps the identity provider's signed-in principal onto exactly one local
``User`` row.
"""

from typing import Optional
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from mirai.models.user import User
from mirai.schemas.user import ExternalIdentity

logger = logging.getLogger(__name__)


def get_user_by_clerk_id(db: Session, clerk_user_id: str) -> Optional[User]:
    return db.query(User).filter(User.clerkUserId == clerk_user_id).first()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email).first()


def reconcile_user(db: Session, identity: Optional[ExternalIdentity]) -> Optional[User]:
    """
    Find or create the local user for ``identity``.

    Lookup order is fixed so neither unique column is ever violated:
    by identity id, then by primary email (relinking the row to the new id),
    then create.

    Args:
        db: Database session
        identity: The signed-in principal, or None when nobody is signed in

    Returns:
        The local user, or None. None also covers database errors, so it does
        not by itself mean "not signed in".
    """
    if identity is None:
        return None

    email = identity.primary_email
    try:
        user = get_user_by_clerk_id(db, identity.id)
        if user:
            return user

        if not email:
            logger.warning(f"Identity {identity.id} has no email address; cannot provision user")
            return None

        # Same person, rotated provider id: keep the row and its resume
        user = get_user_by_email(db, email)
        if user:
            user.clerkUserId = identity.id
            db.commit()
            db.refresh(user)
            logger.info(f"Relinked user {user.id} to identity {identity.id}")
            return user

        user = User(
            clerkUserId=identity.id,
            name=identity.display_name,
            imageUrl=identity.imageUrl,
            email=email,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        logger.info(f"Created user {user.id} for identity {identity.id}")
        return user

    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"checkUser error: {e}")
        return None
