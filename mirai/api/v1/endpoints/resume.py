"""
Resume API Endpoints

Builder operations for the signed-in user's single resume.
"""

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import HTMLResponse, Response
from pydantic import BaseModel
from sqlalchemy.orm import Session
from typing import Any, Dict, Optional

from mirai.api.deps import get_builder, get_current_user
from mirai.core.errors import (
    ExportInProgressError,
    ExportPreconditionError,
    PdfConversionError,
    SaveInProgressError,
)
from mirai.db.session import get_db
from mirai.models.user import User
from mirai.schemas.resume import ResumeFormState, ResumeRead
from mirai.services.preview_page import View
from mirai.services.resume_builder import BuilderRegistry, BuilderSnapshot, ResumeBuilder, get_builder_registry
from mirai.services.resume_service import get_resume

router = APIRouter()


class MarkdownOverrideRequest(BaseModel):
    markdown: str


class ViewRequest(BaseModel):
    view: View


class ResumeData(BaseModel):
    resume: Optional[ResumeRead] = None
    builder: BuilderSnapshot


class ResumeSingleResponse(BaseModel):
    status: int
    message: str
    data: ResumeData


class BuilderResponse(BaseModel):
    status: int
    message: str
    data: BuilderSnapshot


async def _ensure_loaded(builder: ResumeBuilder, db: Session) -> Optional[ResumeRead]:
    resume = get_resume(db, builder.user_id)
    if not builder.loaded:
        await builder.load(resume.content if resume else None)
    return ResumeRead.model_validate(resume) if resume else None


def _builder_response(builder: ResumeBuilder, message: str) -> Dict[str, Any]:
    return {"status": 200, "message": message, "data": builder.snapshot()}


@router.get("/", response_model=ResumeSingleResponse)
async def read_resume(builder: ResumeBuilder = Depends(get_builder), db: Session = Depends(get_db)):
    """Return the saved resume (if any) and the builder state seeded from it."""
    resume = await _ensure_loaded(builder, db)
    return {
        "status": 200,
        "message": "Resume returned successfully" if resume else "No saved resume",
        "data": {"resume": resume, "builder": builder.snapshot()},
    }


@router.put("/form", response_model=BuilderResponse)
async def update_form(
    state: ResumeFormState,
    builder: ResumeBuilder = Depends(get_builder),
    db: Session = Depends(get_db),
):
    """Apply a form edit; the markdown is re-projected unless it was overridden."""
    await _ensure_loaded(builder, db)
    await builder.update_form(state)
    return _builder_response(builder, "Form updated")


@router.put("/markdown", response_model=BuilderResponse)
async def override_markdown(
    request: MarkdownOverrideRequest,
    builder: ResumeBuilder = Depends(get_builder),
    db: Session = Depends(get_db),
):
    await _ensure_loaded(builder, db)
    await builder.override_markdown(request.markdown)
    return _builder_response(builder, "Markdown overridden")


@router.post("/markdown/revert", response_model=BuilderResponse)
async def revert_markdown(builder: ResumeBuilder = Depends(get_builder), db: Session = Depends(get_db)):
    await _ensure_loaded(builder, db)
    await builder.revert_to_form()
    return _builder_response(builder, "Markdown reverted to form")


@router.put("/view", response_model=BuilderResponse)
async def switch_view(
    request: ViewRequest,
    builder: ResumeBuilder = Depends(get_builder),
    db: Session = Depends(get_db),
):
    await _ensure_loaded(builder, db)
    await builder.show(request.view)
    return _builder_response(builder, f"Showing {request.view.value}")


@router.get("/preview", response_class=HTMLResponse)
async def preview_page(builder: ResumeBuilder = Depends(get_builder), db: Session = Depends(get_db)):
    """The rendered builder page for the current view."""
    await _ensure_loaded(builder, db)
    return HTMLResponse(builder.page.html())


@router.post("/save", response_model=ResumeSingleResponse)
async def save_resume(builder: ResumeBuilder = Depends(get_builder), db: Session = Depends(get_db)):
    """Persist the current markdown. Failures are reported, never retried."""
    await _ensure_loaded(builder, db)
    try:
        result = await builder.save()
    except SaveInProgressError as e:
        raise HTTPException(status_code=409, detail=str(e))

    if not result.ok:
        if result.errors:
            raise HTTPException(status_code=422, detail={"message": result.error, "errors": result.errors})
        raise HTTPException(status_code=500, detail=result.error)

    return {
        "status": 200,
        "message": "Resume saved successfully!",
        "data": {"resume": result.resume, "builder": builder.snapshot()},
    }


@router.get("/pdf")
async def download_pdf(builder: ResumeBuilder = Depends(get_builder), db: Session = Depends(get_db)):
    """Render the preview to ``resume.pdf`` (A4 portrait, 15mm margins)."""
    await _ensure_loaded(builder, db)
    try:
        pdf = await builder.export_pdf()
    except (ExportInProgressError, ExportPreconditionError) as e:
        raise HTTPException(status_code=409, detail=str(e))
    except PdfConversionError as e:
        raise HTTPException(status_code=500, detail=str(e))

    filename = builder.exporter.options.filename
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.delete("/session", status_code=204)
def close_builder(
    user: User = Depends(get_current_user),
    registry: BuilderRegistry = Depends(get_builder_registry),
):
    """Forget the in-memory builder; the next request starts from the saved resume."""
    registry.discard(user.id)
    return Response(status_code=204)
