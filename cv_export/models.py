"""
CV record models.

The CVRecord is the single unit passed between parsing, editing and every
export format. Records usually originate from an AI extraction step, so each
model coerces its input field by field instead of trusting the payload shape:
missing or malformed values fall back to empty strings and empty lists.

Serialization uses the camelCase wire format (``fullName``, ``startDate``);
both camelCase and snake_case are accepted on input.
"""

import logging
from typing import Any, List, get_args, get_origin

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)

from cv_export.common.json_utils import load_cv_payload

logger = logging.getLogger(__name__)

PRESENT = "Present"


# ===== COERCION HELPERS =====

def _coerce_str(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool) or value is None:
        return ""
    if isinstance(value, (int, float)):
        return str(value)
    return ""


def _coerce_str_list(value: Any) -> List[str]:
    if isinstance(value, str):
        return [value] if value.strip() else []
    if not isinstance(value, (list, tuple)):
        return []
    items = []
    for item in value:
        if isinstance(item, bool) or item is None:
            continue
        if isinstance(item, (str, int, float)):
            items.append(str(item))
    return items


def _coerce(value: Any, annotation: Any) -> Any:
    """Coerce one untrusted value to the shape its field annotation expects."""
    if annotation is str:
        return _coerce_str(value)

    if get_origin(annotation) is list:
        (item_type,) = get_args(annotation)
        if item_type is str:
            return _coerce_str_list(value)
        if isinstance(value, (list, tuple)) and isinstance(item_type, type):
            return [item for item in value if isinstance(item, (dict, item_type))]
        return []

    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        return value if isinstance(value, (dict, annotation)) else {}

    return value


class CVModel(BaseModel):
    """Base for all record models: lenient input, camelCase output."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("*", mode="before")
    @classmethod
    def coerce_untrusted(cls, value: Any, info: ValidationInfo) -> Any:
        annotation = cls.model_fields[info.field_name].annotation
        return _coerce(value, annotation)


def _camel(name: str, *alternatives: str) -> Any:
    """Field serialized as ``name`` and accepted under any alternative key."""
    return Field(default="", alias=name, validation_alias=AliasChoices(name, *alternatives))


# ===== RECORD MODELS =====

class LinkEntry(CVModel):
    label: str = ""
    url: str = ""


class CandidateProfile(CVModel):
    """Candidate identity and contact details."""

    full_name: str = _camel("fullName", "full_name", "name")
    title: str = ""
    location: str = ""
    email: str = ""
    phone: str = ""
    links: List[LinkEntry] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def normalize_links(cls, data: Any) -> Any:
        """Extractors sometimes return links as bare URL strings."""
        if isinstance(data, dict) and isinstance(data.get("links"), list):
            data = dict(data)
            data["links"] = [
                {"label": "", "url": link} if isinstance(link, str) else link
                for link in data["links"]
            ]
        return data

    def is_empty(self) -> bool:
        return not any(
            value.strip()
            for value in (self.full_name, self.title, self.location, self.email, self.phone)
        ) and not any(link.url.strip() or link.label.strip() for link in self.links)


class ExperienceEntry(CVModel):
    """One job. Rendered as its own atomic layout block."""

    title: str = Field(default="", validation_alias=AliasChoices("title", "role", "position"))
    company: str = ""
    employment_type: str = _camel("employmentType", "employment_type")
    location: str = ""
    start_date: str = _camel("startDate", "start_date")
    end_date: str = _camel("endDate", "end_date")
    description: str = ""
    highlights: List[str] = Field(default_factory=list)
    tech: List[str] = Field(default_factory=list)

    @field_validator("tech")
    @classmethod
    def dedupe_tech(cls, v: List[str]) -> List[str]:
        """Tech is a set; keep first-seen order for stable output."""
        seen = set()
        unique = []
        for item in v:
            if item not in seen:
                seen.add(item)
                unique.append(item)
        return unique

    @property
    def is_current(self) -> bool:
        return self.end_date.strip().lower() == PRESENT.lower()

    def is_empty(self) -> bool:
        return not any(
            text.strip()
            for text in (self.title, self.company, self.description, *self.highlights)
        )


class EducationEntry(CVModel):
    degree: str = ""
    field: str = ""
    institution: str = ""
    location: str = ""
    year: str = ""
    start_date: str = _camel("startDate", "start_date")
    end_date: str = _camel("endDate", "end_date")

    @property
    def display_year(self) -> str:
        """``year`` when set, otherwise the start/end range."""
        if self.year.strip():
            return self.year.strip()
        start, end = self.start_date.strip(), self.end_date.strip()
        if start and end and start != end:
            return f"{start} – {end}"
        return start or end

    def is_empty(self) -> bool:
        return not (self.degree.strip() or self.institution.strip() or self.field.strip())


class SkillGroup(CVModel):
    category: str = ""
    items: List[str] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not any(item.strip() for item in self.items)


class CertificationEntry(CVModel):
    name: str = ""
    issuer: str = ""
    date: str = ""

    def is_empty(self) -> bool:
        return not self.name.strip()


class LanguageEntry(CVModel):
    name: str = ""
    level: str = ""

    def is_empty(self) -> bool:
        return not self.name.strip()


class ProjectEntry(CVModel):
    name: str = ""
    description: str = ""
    tech: List[str] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.name.strip() or self.description.strip())


class ExtraField(CVModel):
    label: str = ""
    value: str = ""

    def is_empty(self) -> bool:
        return not self.value.strip()


class CVRecord(CVModel):
    """
    Complete structured CV.

    Sequence order is display order and export order; nothing in the export
    path reorders entries.
    """

    candidate: CandidateProfile = Field(default_factory=CandidateProfile)
    summary: str = ""
    skills: List[SkillGroup] = Field(default_factory=list)
    experience: List[ExperienceEntry] = Field(default_factory=list)
    education: List[EducationEntry] = Field(default_factory=list)
    certifications: List[CertificationEntry] = Field(default_factory=list)
    projects: List[ProjectEntry] = Field(default_factory=list)
    languages: List[LanguageEntry] = Field(default_factory=list)
    extras: List[ExtraField] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def normalize_extras(cls, data: Any) -> Any:
        """
        Convert mapping-shaped extras into label/value rows.

        The extractor returns e.g. {"awards": ["A", "B"], "interests": []};
        the record stores [{"label": "Awards", "value": "A, B"}].
        """
        if isinstance(data, dict) and isinstance(data.get("extras"), dict):
            data = dict(data)
            rows = []
            for key, value in data["extras"].items():
                text = ", ".join(_coerce_str_list(value))
                if text:
                    rows.append({"label": str(key).replace("_", " ").title(), "value": text})
            data["extras"] = rows
        return data

    @classmethod
    def from_payload(cls, payload: Any) -> "CVRecord":
        """Build a record from an untrusted mapping; non-mappings yield an empty record."""
        if not isinstance(payload, dict):
            logger.warning(f"CV payload is {type(payload).__name__}, not an object; using empty record")
            payload = {}
        return cls.model_validate(payload)

    @classmethod
    def from_json(cls, data) -> "CVRecord":
        """Parse the output of ``to_json`` (str or bytes)."""
        return cls.model_validate_json(data)

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)

    def to_json(self, indent: int = 2) -> str:
        return self.model_dump_json(by_alias=True, indent=indent)


def parse_cv_payload(text: str) -> CVRecord:
    """
    Turn raw extractor output into a CVRecord.

    Accepts fenced or prose-wrapped JSON, the ``{"cvData": {...}}`` envelope
    returned by the parsing function, and slightly malformed JSON.

    Raises:
        ValueError: If no JSON object can be recovered from the text
    """
    return CVRecord.from_payload(load_cv_payload(text))
