"""
Word (.docx) renderer.

Writes headings and paragraphs straight from the CV record; Word paginates
the result itself, so no layout engine is involved. An optional logo sits
right-aligned in the page header.
"""

import logging
from io import BytesIO
from typing import Optional

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Mm, Pt, RGBColor

from cv_export.common.error_handling import RenderError, fatal_operation
from cv_export.formatting import date_range, join_nonempty, languages_line
from cv_export.layout.block_html import EXPERIENCE_HEADING, SECTION_TITLES
from cv_export.logo import LogoImage
from cv_export.models import CVRecord

logger = logging.getLogger(__name__)

MUTED = RGBColor(0x66, 0x66, 0x66)
HEADING = RGBColor(0x33, 0x33, 0x33)
RULE = RGBColor(0x99, 0x99, 0x99)

DEFAULT_LOGO_HEIGHT_MM = 12.0


class WordRenderer:
    """Renders CV records and profile descriptions to .docx bytes."""

    def __init__(self, logo_height_mm: float = DEFAULT_LOGO_HEIGHT_MM, margin_mm: float = 15.0):
        self.logo_height_mm = logo_height_mm
        self.margin_mm = margin_mm

    # ----- public -----

    @fatal_operation("Word render", stage="render", error_cls=RenderError)
    def render(self, record: CVRecord, logo: Optional[LogoImage] = None) -> bytes:
        document = self._new_document(logo)
        candidate = record.candidate

        if candidate.full_name.strip():
            self._paragraph(document, candidate.full_name, size=24, bold=True,
                            align=WD_ALIGN_PARAGRAPH.CENTER, after=10)
        if candidate.title.strip():
            self._paragraph(document, candidate.title, size=13, color=MUTED,
                            align=WD_ALIGN_PARAGRAPH.CENTER, after=6)

        contact = join_nonempty([candidate.email, candidate.phone, candidate.location], " | ")
        if contact:
            self._paragraph(document, contact, size=11, color=MUTED,
                            align=WD_ALIGN_PARAGRAPH.CENTER, after=4)
        links = join_nonempty([link.url or link.label for link in candidate.links], " | ")
        if links:
            self._paragraph(document, links, size=10, color=MUTED,
                            align=WD_ALIGN_PARAGRAPH.CENTER, after=4)

        if record.summary.strip():
            self._heading(document, SECTION_TITLES["summary"])
            for line in record.summary.splitlines():
                if line.strip():
                    self._paragraph(document, line.strip(), size=11, after=6)

        skills = [group for group in record.skills if not group.is_empty()]
        if skills:
            self._heading(document, SECTION_TITLES["skills"])
            for group in skills:
                paragraph = document.add_paragraph()
                paragraph.paragraph_format.space_after = Pt(5)
                if group.category.strip():
                    self._run(paragraph, f"{group.category}: ", size=11, bold=True)
                self._run(paragraph, ", ".join(i for i in group.items if i.strip()), size=11)

        experience = [entry for entry in record.experience if not entry.is_empty()]
        if experience:
            self._heading(document, EXPERIENCE_HEADING)
            for entry in experience:
                self._paragraph(document, entry.title, size=12, bold=True, before=10, after=2)
                dates = date_range(entry.start_date, entry.end_date, separator=" - ")
                meta = join_nonempty([entry.company, entry.location, dates], " | ")
                if meta:
                    self._paragraph(document, meta, size=11, color=MUTED, after=5)
                if entry.description.strip():
                    self._paragraph(document, entry.description.strip(), size=11, after=5)
                for highlight in entry.highlights:
                    if highlight.strip():
                        bullet = document.add_paragraph(style="List Bullet")
                        self._run(bullet, highlight.strip(), size=11)
                if entry.tech:
                    paragraph = document.add_paragraph()
                    self._run(paragraph, "Tech: ", size=10, bold=True)
                    self._run(paragraph, ", ".join(entry.tech), size=10, color=MUTED)

        education = [entry for entry in record.education if not entry.is_empty()]
        if education:
            self._heading(document, SECTION_TITLES["education"])
            for entry in education:
                self._paragraph(document, join_nonempty([entry.degree, entry.field], ", "),
                                size=12, bold=True, before=5, after=2)
                meta = join_nonempty([entry.institution, entry.location, entry.display_year], " | ")
                if meta:
                    self._paragraph(document, meta, size=11, color=MUTED, after=7)

        certifications = [entry for entry in record.certifications if not entry.is_empty()]
        if certifications:
            self._heading(document, SECTION_TITLES["certifications"])
            for entry in certifications:
                paragraph = document.add_paragraph()
                self._run(paragraph, entry.name, size=11, bold=True)
                meta = join_nonempty([entry.issuer, entry.date], " • ")
                if meta:
                    self._run(paragraph, f"  {meta}", size=11, color=MUTED)

        languages = languages_line(record.languages, separator=", ")
        if languages:
            self._heading(document, SECTION_TITLES["languages"])
            self._paragraph(document, languages, size=11)

        projects = [entry for entry in record.projects if not entry.is_empty()]
        if projects:
            self._heading(document, SECTION_TITLES["projects"])
            for entry in projects:
                self._paragraph(document, entry.name, size=12, bold=True, before=5, after=2)
                if entry.description.strip():
                    self._paragraph(document, entry.description.strip(), size=11, after=3)
                if entry.tech:
                    self._paragraph(document, ", ".join(entry.tech), size=10, color=MUTED, after=5)

        extras = [entry for entry in record.extras if not entry.is_empty()]
        if extras:
            self._heading(document, SECTION_TITLES["extras"])
            for entry in extras:
                paragraph = document.add_paragraph()
                if entry.label.strip():
                    self._run(paragraph, f"{entry.label}: ", size=11, bold=True)
                self._run(paragraph, entry.value, size=11)

        return self._to_bytes(document)

    @fatal_operation("Word profile render", stage="render", error_cls=RenderError)
    def render_profile(
        self,
        description: str,
        candidate_name: str,
        logo: Optional[LogoImage] = None,
    ) -> bytes:
        document = self._new_document(logo)
        self._paragraph(document, "Profile Description", size=16, bold=True,
                        align=WD_ALIGN_PARAGRAPH.CENTER, after=20)
        if candidate_name.strip():
            self._paragraph(document, candidate_name, size=14, bold=True,
                            align=WD_ALIGN_PARAGRAPH.CENTER, after=20)
        self._paragraph(document, "─" * 40, color=RULE, align=WD_ALIGN_PARAGRAPH.CENTER, after=20)
        for line in description.splitlines():
            if line.strip():
                self._paragraph(document, line.strip(), size=12,
                                align=WD_ALIGN_PARAGRAPH.CENTER, after=10)
        return self._to_bytes(document)

    # ----- building blocks -----

    def _new_document(self, logo: Optional[LogoImage]):
        document = Document()
        for section in document.sections:
            section.top_margin = Mm(self.margin_mm)
            section.bottom_margin = Mm(self.margin_mm)
            section.left_margin = Mm(self.margin_mm)
            section.right_margin = Mm(self.margin_mm)
        if logo is not None:
            header = document.sections[0].header
            paragraph = header.paragraphs[0] if header.paragraphs else header.add_paragraph()
            paragraph.alignment = WD_ALIGN_PARAGRAPH.RIGHT
            paragraph.add_run().add_picture(BytesIO(logo.data), height=Mm(self.logo_height_mm))
        return document

    def _heading(self, document, title: str) -> None:
        self._paragraph(document, title.upper(), size=14, bold=True, color=HEADING, before=20, after=10)

    def _paragraph(
        self,
        document,
        text: str,
        size: Optional[float] = None,
        bold: bool = False,
        color: Optional[RGBColor] = None,
        align=None,
        before: Optional[float] = None,
        after: Optional[float] = None,
    ):
        paragraph = document.add_paragraph()
        if align is not None:
            paragraph.alignment = align
        if before is not None:
            paragraph.paragraph_format.space_before = Pt(before)
        if after is not None:
            paragraph.paragraph_format.space_after = Pt(after)
        self._run(paragraph, text, size=size, bold=bold, color=color)
        return paragraph

    @staticmethod
    def _run(paragraph, text: str, size: Optional[float] = None, bold: bool = False,
             color: Optional[RGBColor] = None):
        run = paragraph.add_run(text)
        run.bold = bold
        if size is not None:
            run.font.size = Pt(size)
        if color is not None:
            run.font.color.rgb = color
        return run

    @staticmethod
    def _to_bytes(document) -> bytes:
        buffer = BytesIO()
        document.save(buffer)
        output = buffer.getvalue()
        logger.info(f"Rendered Word document: {len(document.paragraphs)} paragraph(s), {len(output)} bytes")
        return output

