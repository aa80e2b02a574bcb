"""CSV export of the main tables and per-student PDF transcripts."""

import csv
import io
import logging
import re
import unicodedata
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List, Optional, Sequence, Tuple
from xml.sax.saxutils import escape

from fastapi import status
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.students import service as student_service
from app.core.enums import ExportType
from app.core.exceptions import ServiceError
from app.core.models import AttendanceRecord, Course, Enrollment, Student

logger = logging.getLogger(__name__)

STUDENT_HEADER = ["ID", "Last Name", "First Name", "Email", "Phone", "Study Year"]
COURSE_HEADER = ["ID", "Name", "Professor", "Credits", "Semester"]
ATTENDANCE_HEADER = ["ID", "Date", "Semester", "Student ID", "Student", "Course ID", "Course", "Status"]
ENROLLMENT_HEADER = ["Student ID", "Student", "Course ID", "Course", "Final Grade"]


def _render(header: Sequence[str], rows: Iterable[Sequence]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(header)
    for row in rows:
        writer.writerow(["" if v is None else v for v in row])
    return buffer.getvalue()


async def _student_rows(db: AsyncSession) -> List[list]:
    result = await db.execute(select(Student).order_by(Student.id))
    return [
        [s.id, s.last_name, s.first_name, s.email, s.phone, s.study_year]
        for s in result.scalars().all()
    ]


async def _course_rows(db: AsyncSession) -> List[list]:
    result = await db.execute(select(Course).order_by(Course.id))
    return [[c.id, c.name, c.professor, c.credits, c.semester] for c in result.scalars().all()]


async def _attendance_rows(db: AsyncSession) -> List[list]:
    result = await db.execute(select(AttendanceRecord).order_by(AttendanceRecord.id))
    return [
        [
            a.id,
            a.date.isoformat(),
            a.semester,
            a.student_id,
            a.student.full_name,
            a.course_id,
            a.course.name,
            a.status,
        ]
        for a in result.unique().scalars().all()
    ]


async def _enrollment_rows(db: AsyncSession) -> List[list]:
    result = await db.execute(select(Enrollment).order_by(Enrollment.student_id, Enrollment.course_id))
    return [
        [e.student_id, e.student.full_name, e.course_id, e.course.name, e.final_grade]
        for e in result.unique().scalars().all()
    ]


_EXPORTS = {
    ExportType.STUDENTS: (STUDENT_HEADER, _student_rows),
    ExportType.COURSES: (COURSE_HEADER, _course_rows),
    ExportType.ATTENDANCE: (ATTENDANCE_HEADER, _attendance_rows),
    ExportType.ENROLLMENTS: (ENROLLMENT_HEADER, _enrollment_rows),
}


def parse_export_type(raw: str) -> ExportType:
    try:
        return ExportType(raw.strip().lower())
    except ValueError:
        raise ServiceError(f"Unknown export type: {raw}", status.HTTP_404_NOT_FOUND)


async def export_csv(db: AsyncSession, export_type: ExportType) -> str:
    header, load_rows = _EXPORTS[export_type]
    return _render(header, await load_rows(db))


TRANSCRIPT_TITLE = "FOAIE MATRICOLA"
TRANSCRIPT_HEADER = ["Materie", "Semestru", "Credite", "Nota Finala"]
TRANSCRIPT_COLUMN_WIDTHS = [68 * mm, 25 * mm, 25 * mm, 34 * mm]


def strip_diacritics(text: str) -> str:
    """ASCII rendition of ``text``; the PDF base fonts have no glyphs for ș, ț, ă."""
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def transcript_filename(student: Student) -> str:
    name = strip_diacritics(f"{student.last_name}_{student.first_name}")
    return "Matricola_" + re.sub(r"[^A-Za-z0-9_-]+", "_", name) + ".pdf"


def grade_average(grades: Iterable[Optional[Decimal]]) -> Optional[Decimal]:
    """Mean of the graded courses, rounded to two decimals; None when nothing is graded yet."""
    graded = [g for g in grades if g is not None]
    if not graded:
        return None
    return (sum(graded) / len(graded)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def _render_transcript(student: Student, enrollments: Sequence[Enrollment], generated_on: date) -> bytes:
    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        "TranscriptTitle", parent=styles["Title"], fontSize=18, textColor=colors.blue, alignment=TA_CENTER
    )
    info_style = ParagraphStyle("TranscriptInfo", parent=styles["Normal"], fontSize=12, leading=16)
    average_style = ParagraphStyle("TranscriptAverage", parent=title_style, alignment=TA_RIGHT)

    story = [
        Paragraph(TRANSCRIPT_TITLE, title_style),
        Spacer(1, 6 * mm),
        Paragraph("Student: " + escape(strip_diacritics(student.full_name)), info_style),
        Paragraph("Email: " + escape(student.email), info_style),
        Paragraph(f"An Studiu: {student.study_year}", info_style),
        Paragraph(f"Data generarii: {generated_on.isoformat()}", info_style),
        Spacer(1, 6 * mm),
    ]

    rows = [TRANSCRIPT_HEADER]
    for e in enrollments:
        rows.append(
            [
                strip_diacritics(e.course.name),
                str(e.course.semester),
                str(e.course.credits),
                str(e.final_grade) if e.final_grade is not None else "-",
            ]
        )
    table = Table(rows, colWidths=TRANSCRIPT_COLUMN_WIDTHS, repeatRows=1)
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 12),
                ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ]
        )
    )
    story.append(table)

    average = grade_average(e.final_grade for e in enrollments)
    if average is not None:
        story.append(Spacer(1, 6 * mm))
        story.append(Paragraph(f"Media Generala: {average}", average_style))

    buffer = io.BytesIO()
    document = SimpleDocTemplate(
        buffer, pagesize=A4, title=f"{TRANSCRIPT_TITLE} - {strip_diacritics(student.full_name)}"
    )
    document.build(story)
    return buffer.getvalue()


async def export_transcript_pdf(db: AsyncSession, student_id: int) -> Tuple[str, bytes]:
    """Transcript of one student's enrollments and final grades. Returns (filename, pdf bytes)."""
    student = await student_service.get_student_by_id(db, student_id)
    result = await db.execute(
        select(Enrollment)
        .join(Course, Enrollment.course_id == Course.id)
        .where(Enrollment.student_id == student.id)
        .order_by(Course.semester, Course.name)
    )
    enrollments = result.unique().scalars().all()
    content = _render_transcript(student, enrollments, date.today())
    logger.info("Generated transcript for student %s (%d courses)", student.id, len(enrollments))
    return transcript_filename(student), content
