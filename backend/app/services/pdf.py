# app/services/pdf.py
"""
Implant passport PDF rendering.

Pure function of a PassportSnapshot: no database access, no side effects.
Layout is flowing (reportlab platypus), so long notes wrap inside the margins
and continue on new pages.
"""
from __future__ import annotations

import io
import logging
from datetime import date, datetime
from xml.sax.saxutils import escape

from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer
from reportlab.platypus.flowables import HRFlowable

from app.core.errors import RenderError
from app.services.passports import PassportSnapshot

logger = logging.getLogger(__name__)

MARGIN = 50
FOOTER_TEXT = "This document was generated digitally by Implant Passport."

_base = getSampleStyleSheet()
STYLES = {
    "title": ParagraphStyle("PassportTitle", parent=_base["Title"], fontSize=24, leading=30),
    "subtitle": ParagraphStyle("PassportSubtitle", parent=_base["Normal"], alignment=TA_CENTER, fontSize=12),
    "heading": ParagraphStyle("PassportHeading", parent=_base["Heading2"], fontSize=16, spaceBefore=10),
    "body": ParagraphStyle("PassportBody", parent=_base["Normal"], fontSize=12, leading=16),
    "label": ParagraphStyle("PassportLabel", parent=_base["Normal"], fontName="Helvetica-Oblique", fontSize=12, leading=16),
}


def _fmt_date(value: date | datetime | None) -> str:
    if value is None:
        return "-"
    return value.strftime("%d/%m/%Y")


def _fmt_mm(value: float) -> str:
    return f"{value:g} mm"


def _p(text: str, style: str = "body") -> Paragraph:
    # Paragraph parses inline markup; user text must not be read as tags.
    return Paragraph(escape(text), STYLES[style])


def _rule() -> HRFlowable:
    return HRFlowable(width="100%", thickness=0.5, spaceBefore=6, spaceAfter=10)


def build_story(snapshot: PassportSnapshot) -> list:
    """Flowables for one passport, top to bottom."""
    details = snapshot.implant_details
    age = "-" if snapshot.patient_age is None else f"{snapshot.patient_age} years"

    story: list = [
        _p("IMPLANT PASSPORT", "title"),
        _p("Digital document", "subtitle"),
        _rule(),
        _p("PATIENT INFORMATION", "heading"),
        _p(f"Name: {snapshot.patient_name}"),
        _p(f"Date of birth: {_fmt_date(snapshot.date_of_birth)}"),
        _p(f"Age: {age}"),
        _p("IMPLANT DETAILS", "heading"),
        _p(f"Type: {snapshot.implant_type.value}"),
        _p(f"Brand: {details.brand}"),
        _p(f"Lot number: {details.lot_number}"),
        _p(f"Implant date: {_fmt_date(details.implant_date)}"),
        _p(f"Position: {details.position}"),
        _p(f"Diameter: {_fmt_mm(details.diameter)}"),
        _p(f"Length: {_fmt_mm(details.length)}"),
    ]
    if details.notes:
        story.append(Spacer(1, 4))
        story.append(_p("Notes:", "label"))
        story.extend(_p(line) if line.strip() else Spacer(1, 8) for line in details.notes.splitlines())
    story += [
        _rule(),
        _p("DENTIST INFORMATION", "heading"),
        _p(f"Dentist: {snapshot.dentist_email or '-'}"),
        _p(f"Created: {_fmt_date(snapshot.created_at)}"),
    ]
    return story


def _draw_footer(c, doc) -> None:
    width, _ = A4
    c.saveState()
    c.setFont("Helvetica", 10)
    c.drawCentredString(width / 2, MARGIN / 2, FOOTER_TEXT)
    c.restoreState()


def render_passport_pdf(snapshot: PassportSnapshot) -> bytes:
    """
    Render the passport as an A4 PDF and return the raw bytes.

    Raises:
        RenderError: reportlab failed for any reason
    """
    try:
        buf = io.BytesIO()
        doc = SimpleDocTemplate(
            buf,
            pagesize=A4,
            leftMargin=MARGIN,
            rightMargin=MARGIN,
            topMargin=MARGIN,
            bottomMargin=MARGIN,
            title="Implant Passport",
            author="Implant Passport",
            subject=f"Implant passport for {snapshot.patient_name}",
        )
        doc.build(build_story(snapshot), onFirstPage=_draw_footer, onLaterPages=_draw_footer)
        logger.debug("Rendered passport PDF: id=%s pages=%s", snapshot.id, doc.page)
        return buf.getvalue()
    except Exception as e:
        logger.exception("PDF rendering failed for passport id=%s", snapshot.id)
        raise RenderError(f"Error generating PDF: {e}") from e
