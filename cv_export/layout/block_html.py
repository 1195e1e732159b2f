"""
HTML rendering of individual CV blocks.

Each atomic block is rendered as a standalone HTML fragment; the fragment is
wrapped in a full document pinned to the page content width before it is
rasterized. Rendering blocks one at a time keeps every block's height
independent of its neighbours and of pagination.
"""

from html import escape
from typing import Iterable, List, Optional

from cv_export.formatting import (
    contact_parts,
    date_range,
    experience_subtitle,
    join_nonempty,
    languages_line,
)
from cv_export.layout.geometry import PageGeometry
from cv_export.models import (
    CandidateProfile,
    CertificationEntry,
    EducationEntry,
    ExperienceEntry,
    ExtraField,
    ProjectEntry,
    SkillGroup,
)

BLOCK_ELEMENT_ID = "cv-block"

EXPERIENCE_HEADING = "Professional Experience"

SECTION_TITLES = {
    "summary": "Professional Summary",
    "skills": "Technical Skills",
    "education": "Education",
    "certifications": "Certifications",
    "languages": "Languages",
    "projects": "Projects",
    "extras": "Additional Information",
}


def _e(text: str) -> str:
    return escape(text or "", quote=True)


def _section_heading(title: str) -> str:
    return f'<h2 class="section-title">{_e(title)}</h2>'


def _paragraphs(text: str) -> str:
    """One <p> per non-blank line."""
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    return "".join(f"<p>{_e(line)}</p>" for line in lines)


class BlockHtmlRenderer:
    """
    Builds the HTML fragment for each block kind.

    Subclass and override individual methods to restyle a section; the
    segmenter only depends on the method names.
    """

    def __init__(self, font_family: str = "Inter", font_size_pt: float = 10.0):
        self.font_family = font_family
        self.font_size_pt = font_size_pt

    # ----- CV sections -----

    def header(self, candidate: CandidateProfile) -> str:
        parts = ['<header class="cv-header">']
        if candidate.full_name.strip():
            parts.append(f"<h1>{_e(candidate.full_name)}</h1>")
        if candidate.title.strip():
            parts.append(f'<p class="headline">{_e(candidate.title)}</p>')
        contacts = contact_parts(candidate)
        if contacts:
            parts.append(
                '<p class="contact">'
                + '<span class="sep">•</span>'.join(f"<span>{_e(c)}</span>" for c in contacts)
                + "</p>"
            )
        links = [link.url or link.label for link in candidate.links if (link.url or link.label).strip()]
        if links:
            parts.append(
                '<p class="links">'
                + '<span class="sep">|</span>'.join(f"<span>{_e(link)}</span>" for link in links)
                + "</p>"
            )
        parts.append("</header>")
        return "".join(parts)

    def summary(self, summary: str) -> str:
        return (
            f'<section class="summary">{_section_heading(SECTION_TITLES["summary"])}'
            f"{_paragraphs(summary)}</section>"
        )

    def skills(self, groups: Iterable[SkillGroup]) -> str:
        rows = []
        for group in groups:
            items = ", ".join(item for item in group.items if item.strip())
            label = f'<strong>{_e(group.category)}:</strong> ' if group.category.strip() else ""
            rows.append(f'<p class="skill-row">{label}<span class="muted">{_e(items)}</span></p>')
        return (
            f'<section class="skills">{_section_heading(SECTION_TITLES["skills"])}'
            f'{"".join(rows)}</section>'
        )

    def experience_item(self, entry: ExperienceEntry, with_heading: bool = False) -> str:
        parts = ['<section class="experience">']
        if with_heading:
            parts.append(_section_heading(EXPERIENCE_HEADING))
        dates = date_range(entry.start_date, entry.end_date)
        parts.append('<div class="entry-head">')
        parts.append(f'<h3>{_e(entry.title)}</h3>')
        if dates:
            parts.append(f'<span class="meta">{_e(dates)}</span>')
        parts.append("</div>")
        subtitle = experience_subtitle(entry)
        if subtitle:
            parts.append(f'<p class="accent">{_e(subtitle)}</p>')
        if entry.description.strip():
            parts.append(f'<div class="description">{_paragraphs(entry.description)}</div>')
        highlights = [h for h in entry.highlights if h.strip()]
        if highlights:
            parts.append("<ul>" + "".join(f"<li>{_e(h)}</li>" for h in highlights) + "</ul>")
        if entry.tech:
            parts.append(f'<p class="tech"><strong>Tech:</strong> {_e(", ".join(entry.tech))}</p>')
        parts.append("</section>")
        return "".join(parts)

    def education(self, entries: Iterable[EducationEntry]) -> str:
        rows = []
        for entry in entries:
            degree = join_nonempty([entry.degree, entry.field], ", ")
            year = entry.display_year
            rows.append(
                '<div class="entry">'
                f'<div class="entry-head"><h3>{_e(degree)}</h3>'
                + (f'<span class="meta">{_e(year)}</span>' if year else "")
                + "</div>"
                + f'<p class="muted">{_e(join_nonempty([entry.institution, entry.location], " • "))}</p>'
                "</div>"
            )
        return (
            f'<section class="education">{_section_heading(SECTION_TITLES["education"])}'
            f'{"".join(rows)}</section>'
        )

    def certifications(self, entries: Iterable[CertificationEntry]) -> str:
        rows = []
        for entry in entries:
            meta = join_nonempty([entry.issuer, entry.date], " • ")
            rows.append(
                f'<div class="entry-head"><strong>{_e(entry.name)}</strong>'
                + (f'<span class="meta">{_e(meta)}</span>' if meta else "")
                + "</div>"
            )
        return (
            f'<section class="certifications">{_section_heading(SECTION_TITLES["certifications"])}'
            f'{"".join(rows)}</section>'
        )

    def languages(self, entries) -> str:
        return (
            f'<section class="languages">{_section_heading(SECTION_TITLES["languages"])}'
            f"<p>{_e(languages_line(entries))}</p></section>"
        )

    def projects(self, entries: Iterable[ProjectEntry]) -> str:
        rows = []
        for entry in entries:
            rows.append(f'<div class="entry"><h3>{_e(entry.name)}</h3>')
            if entry.description.strip():
                rows.append(_paragraphs(entry.description))
            if entry.tech:
                rows.append(f'<p class="tech"><strong>Tech:</strong> {_e(", ".join(entry.tech))}</p>')
            rows.append("</div>")
        return (
            f'<section class="projects">{_section_heading(SECTION_TITLES["projects"])}'
            f'{"".join(rows)}</section>'
        )

    def extras(self, entries: Iterable[ExtraField]) -> str:
        rows = []
        for entry in entries:
            label = f"<strong>{_e(entry.label)}:</strong> " if entry.label.strip() else ""
            rows.append(f"<p>{label}{_e(entry.value)}</p>")
        return (
            f'<section class="extras">{_section_heading(SECTION_TITLES["extras"])}'
            f'{"".join(rows)}</section>'
        )

    # ----- Profile description document -----

    def profile_heading(self, candidate_name: str) -> str:
        name = f'<p class="profile-name">{_e(candidate_name)}</p>' if candidate_name.strip() else ""
        return (
            '<header class="profile-heading">'
            "<h1>Profile Description</h1>"
            f'{name}<hr class="profile-rule"></header>'
        )

    def paragraph(self, text: str) -> str:
        return f'<p class="profile-paragraph">{_e(text)}</p>'

    # ----- Document wrapper -----

    def document(self, fragment: str, geometry: PageGeometry) -> str:
        """Wrap a block fragment in a full HTML page pinned to the content width."""
        return build_block_document(
            fragment,
            geometry,
            font_family=self.font_family,
            font_size_pt=self.font_size_pt,
        )


def _google_fonts_url(font_family: str) -> str:
    essential_fonts: List[tuple] = [
        ("Playfair Display", "400;600;700"),
        ("Inter", "400;600;700"),
    ]
    if font_family and font_family not in ("Playfair Display", "Inter"):
        essential_fonts.append((font_family, "400;600;700"))
    font_params = "&".join(
        f"family={font.replace(' ', '+')}:wght@{weights}" for font, weights in essential_fonts
    )
    return f"https://fonts.googleapis.com/css2?{font_params}&display=swap"


def build_block_document(
    fragment: str,
    geometry: PageGeometry,
    font_family: str = "Inter",
    font_size_pt: float = 10.0,
    extra_css: Optional[str] = None,
) -> str:
    """
    Build a complete HTML page holding one block.

    The block element is exactly the content width wide, has an opaque white
    background and no outer margin, so its bounding box is the bitmap that
    gets placed on the page.
    """
    width_px = geometry.content_width_css_px
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <link href="{_google_fonts_url(font_family)}" rel="stylesheet">
    <style>
        :root {{
            --font-heading: 'Playfair Display', Georgia, serif;
            --font-body: '{_e(font_family)}', 'Source Sans 3', system-ui, sans-serif;
            --color-text: #1e1e1e;
            --color-muted: #646464;
            --color-accent: #3b82f6;
            --color-rule: #b4b4b4;
        }}
        * {{ margin: 0; padding: 0; box-sizing: border-box; }}
        html, body {{ background: #ffffff; }}
        body {{
            font-family: var(--font-body);
            font-size: {font_size_pt}pt;
            line-height: 1.35;
            color: var(--color-text);
        }}
        #{BLOCK_ELEMENT_ID} {{
            width: {width_px}px;
            background: #ffffff;
            padding: 2px 0 4px 0;
            overflow: hidden;
        }}
        h1 {{ font-size: 22pt; font-weight: 700; letter-spacing: 0.02em; }}
        h2.section-title {{
            font-size: 12pt;
            font-weight: 700;
            text-transform: uppercase;
            letter-spacing: 0.04em;
            border-bottom: 1px solid var(--color-rule);
            padding-bottom: 3px;
            margin-bottom: 6px;
        }}
        h3 {{ font-size: 10.5pt; font-weight: 700; }}
        p {{ margin: 0.2em 0; }}
        ul {{ padding-left: 1.4em; margin: 0.3em 0; }}
        li {{ margin: 0.15em 0; }}
        .cv-header {{ border-bottom: 2px solid var(--color-accent); padding-bottom: 8px; }}
        .headline {{ font-size: 12pt; color: var(--color-muted); }}
        .contact {{ font-size: 9pt; color: var(--color-muted); margin-top: 6px; }}
        .links {{ font-size: 8.5pt; color: var(--color-accent); }}
        .sep {{ margin: 0 0.6em; }}
        .entry-head {{ display: flex; justify-content: space-between; align-items: baseline; gap: 12px; }}
        .entry {{ margin-bottom: 6px; }}
        .meta {{ font-size: 9pt; color: var(--color-muted); white-space: nowrap; }}
        .muted {{ color: var(--color-muted); }}
        .accent {{ color: var(--color-accent); font-size: 9.5pt; }}
        .description {{ margin-top: 3px; padding-left: 2mm; }}
        .tech {{ font-size: 9pt; color: var(--color-muted); }}
        .profile-heading {{ text-align: center; }}
        .profile-name {{ font-size: 14pt; font-weight: 700; margin-top: 8px; }}
        .profile-rule {{ border: none; border-top: 1px solid #969696; width: 60%; margin: 12px auto 6px; }}
        .profile-paragraph {{ text-align: center; font-size: 11pt; }}
        {extra_css or ""}
    </style>
</head>
<body>
    <div id="{BLOCK_ELEMENT_ID}">{fragment}</div>
</body>
</html>
"""
