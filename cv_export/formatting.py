"""
Display formatting shared by the PDF block HTML and the Word renderer.
"""

import re
from typing import Iterable, List

from cv_export.models import CandidateProfile, ExperienceEntry, LanguageEntry

MONTH_NAMES = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
               "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

_ISO_MONTH = re.compile(r"^(\d{4})-(\d{1,2})(?:-\d{1,2})?$")


def format_display_date(value: str) -> str:
    """
    Human-friendly date for CV display.

    ``"2020-03"`` -> ``"Mar 2020"``, ``"present"`` -> ``"Present"``; anything
    else (``"2019"``, ``"Spring 2018"``) is returned unchanged.
    """
    text = value.strip()
    if text.lower() == "present":
        return "Present"
    match = _ISO_MONTH.match(text)
    if match:
        year, month = match.group(1), int(match.group(2))
        if 1 <= month <= 12:
            return f"{MONTH_NAMES[month - 1]} {year}"
    return text


def date_range(start: str, end: str, separator: str = " – ") -> str:
    """Join start/end dates, dropping whichever side is blank."""
    parts = [format_display_date(p) for p in (start, end) if p and p.strip()]
    return separator.join(parts)


def join_nonempty(parts: Iterable[str], separator: str) -> str:
    return separator.join(p.strip() for p in parts if p and p.strip())


def contact_parts(candidate: CandidateProfile) -> List[str]:
    """Location, email, phone in display order; blanks dropped."""
    return [p for p in (candidate.location, candidate.email, candidate.phone) if p.strip()]


def experience_subtitle(entry: ExperienceEntry) -> str:
    return join_nonempty([entry.company, entry.location, entry.employment_type], " • ")


def languages_line(languages: Iterable[LanguageEntry], separator: str = "  •  ") -> str:
    rendered = []
    for language in languages:
        if language.is_empty():
            continue
        if language.level.strip():
            rendered.append(f"{language.name} ({language.level})")
        else:
            rendered.append(language.name)
    return separator.join(rendered)


def sanitize_for_path(text: str) -> str:
    """
    Sanitize text for use in filenames.

    Removes special characters (except word chars, spaces, hyphens)
    and replaces spaces with underscores.

    Example:
        >>> sanitize_for_path("Jane Doe (Senior)")
        'Jane_Doe__Senior_'
    """
    cleaned = re.sub(r"[^\w\s-]", "_", text.strip())
    return cleaned.replace(" ", "_")


def export_filename(stem: str, candidate_name: str, extension: str, name_first: bool = False) -> str:
    """
    ``CV_Jane_Doe.pdf`` (or ``Jane_Doe_Profile.pdf`` with ``name_first``).

    Falls back to the bare stem when the name is blank.
    """
    name = sanitize_for_path(candidate_name) if candidate_name.strip() else ""
    if not name:
        return f"{stem}.{extension}"
    base = f"{name}_{stem}" if name_first else f"{stem}_{name}"
    return f"{base}.{extension}"
