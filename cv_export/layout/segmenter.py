"""
Section segmenter: splits a CV record into atomic layout blocks.

Segmentation policy, in order:
    header -> summary -> skills -> one block per experience entry ->
    education -> certifications -> languages -> projects -> extras

Whole sections (skills, education, ...) are single blocks. Experience is the
exception: every entry is its own block so only a whole job moves to the
next page. The "Professional Experience" heading is rendered inside the
first experience block so it can never be stranded at the bottom of a page.
Empty sections produce no block at all.
"""

import logging
from typing import List, Optional

from cv_export.layout.block_html import BlockHtmlRenderer
from cv_export.layout.types import BlockDescriptor, BlockKind
from cv_export.models import CVRecord

logger = logging.getLogger(__name__)


class SectionSegmenter:
    """Turns a CVRecord into ordered block descriptors (pre-measurement)."""

    def __init__(self, html_renderer: Optional[BlockHtmlRenderer] = None):
        self.html = html_renderer or BlockHtmlRenderer()

    def segment(self, record: CVRecord) -> List[BlockDescriptor]:
        blocks: List[BlockDescriptor] = []

        if not record.candidate.is_empty():
            blocks.append(BlockDescriptor(
                BlockKind.HEADER, 0, self.html.header(record.candidate), "header"
            ))

        if record.summary.strip():
            blocks.append(BlockDescriptor(
                BlockKind.SUMMARY, 0, self.html.summary(record.summary), "summary"
            ))

        skills = [group for group in record.skills if not group.is_empty()]
        if skills:
            blocks.append(BlockDescriptor(
                BlockKind.SKILLS, 0, self.html.skills(skills), "skills"
            ))

        first_experience = True
        for index, entry in enumerate(record.experience):
            if entry.is_empty():
                continue
            blocks.append(BlockDescriptor(
                BlockKind.EXPERIENCE_ITEM,
                index,
                self.html.experience_item(entry, with_heading=first_experience),
                entry.title or entry.company,
            ))
            first_experience = False

        education = [entry for entry in record.education if not entry.is_empty()]
        if education:
            blocks.append(BlockDescriptor(
                BlockKind.EDUCATION, 0, self.html.education(education), "education"
            ))

        certifications = [entry for entry in record.certifications if not entry.is_empty()]
        if certifications:
            blocks.append(BlockDescriptor(
                BlockKind.CERTIFICATIONS, 0, self.html.certifications(certifications), "certifications"
            ))

        languages = [entry for entry in record.languages if not entry.is_empty()]
        if languages:
            blocks.append(BlockDescriptor(
                BlockKind.LANGUAGES, 0, self.html.languages(languages), "languages"
            ))

        projects = [entry for entry in record.projects if not entry.is_empty()]
        if projects:
            blocks.append(BlockDescriptor(
                BlockKind.PROJECTS, 0, self.html.projects(projects), "projects"
            ))

        extras = [entry for entry in record.extras if not entry.is_empty()]
        if extras:
            blocks.append(BlockDescriptor(
                BlockKind.EXTRAS, 0, self.html.extras(extras), "extras"
            ))

        logger.debug(f"Segmented CV into {len(blocks)} blocks: {[b.key for b in blocks]}")
        return blocks

    def segment_profile(self, description: str, candidate_name: str) -> List[BlockDescriptor]:
        """Blocks for the standalone profile description document."""
        blocks = [BlockDescriptor(
            BlockKind.PROFILE_HEADING, 0, self.html.profile_heading(candidate_name), "profile heading"
        )]
        lines = [line.strip() for line in description.splitlines()]
        for index, line in enumerate(lines):
            if line:
                blocks.append(BlockDescriptor(
                    BlockKind.PARAGRAPH, index, self.html.paragraph(line), f"paragraph {index}"
                ))
        return blocks
