from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.rbac import READ_ROLES, require_roles
from app.core.exceptions import ServiceError
from app.db.session import get_db

from . import service

router = APIRouter(prefix="/api/export", tags=["export"])


@router.get(
    "/csv/{export_type}",
    dependencies=[Depends(require_roles(*READ_ROLES))],
)
async def export_csv(export_type: str, db: AsyncSession = Depends(get_db)):
    """Download students, courses, attendance or enrollments as CSV."""
    try:
        kind = service.parse_export_type(export_type)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    content = await service.export_csv(db, kind)
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f"attachment; filename={kind.value}.csv"},
    )


@router.get(
    "/pdf/transcript/{student_id}",
    dependencies=[Depends(require_roles(*READ_ROLES))],
)
async def export_transcript_pdf(student_id: int, db: AsyncSession = Depends(get_db)):
    """Download a student's transcript (enrollments and final grades) as PDF."""
    try:
        filename, content = await service.export_transcript_pdf(db, student_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
