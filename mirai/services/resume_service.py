from typing import Callable, Optional
import asyncio
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from mirai.core.errors import ResumeSaveError
from mirai.db.session import SessionLocal
from mirai.models.resume import Resume
from mirai.models.user import User
from mirai.schemas.resume import ResumeRead

logger = logging.getLogger(__name__)


def get_resume(db: Session, user_id: str) -> Optional[Resume]:
    return db.query(Resume).filter(Resume.userId == user_id).first()


def save_resume(db: Session, user_id: str, content: str) -> Resume:
    """Create or replace the user's single resume.

    Raises:
        ResumeSaveError: if the user is unknown or the write fails.
    """
    if db.get(User, user_id) is None:
        raise ResumeSaveError("User not found")

    try:
        resume = get_resume(db, user_id)
        if resume is None:
            resume = Resume(userId=user_id, content=content)
            db.add(resume)
        else:
            resume.content = content
        db.commit()
        db.refresh(resume)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error saving resume for user {user_id}: {e}")
        raise ResumeSaveError("Failed to save resume") from e

    logger.info(f"Resume saved with id: {resume.id}, userId: {user_id}")
    return resume


def save_resume_sync(
    user_id: str,
    content: str,
    session_factory: Callable[[], Session] = SessionLocal,
) -> ResumeRead:
    """Save using a session this function owns; returns a detached copy."""
    db = session_factory()
    try:
        return ResumeRead.model_validate(save_resume(db, user_id, content))
    finally:
        db.close()


async def async_save_resume(
    user_id: str,
    content: str,
    session_factory: Callable[[], Session] = SessionLocal,
) -> ResumeRead:
    """Async wrapper around save_resume_sync."""
    return await asyncio.to_thread(save_resume_sync, user_id, content, session_factory)
