"""
Unit tests for CV record models.

Tests cover:
1. Field-by-field coercion of untrusted payloads
2. camelCase/snake_case aliases and the extractor's alternative keys
3. JSON round-trip
4. Parsing raw extractor output
"""

import json

import pytest

from cv_export.models import (
    CandidateProfile,
    CVRecord,
    EducationEntry,
    ExperienceEntry,
    parse_cv_payload,
)


class TestCoercion:
    """Tests for lenient input handling."""

    def test_missing_fields_default_to_empty(self):
        """Test that an empty payload yields an empty record."""
        record = CVRecord.from_payload({})

        assert record.candidate.full_name == ""
        assert record.summary == ""
        assert record.experience == []
        assert record.extras == []

    def test_non_mapping_payload_yields_empty_record(self):
        """Test that a list or string payload does not raise."""
        assert CVRecord.from_payload(["not", "a", "dict"]) == CVRecord()
        assert CVRecord.from_payload("text") == CVRecord()

    def test_wrong_types_are_coerced(self):
        """Test that None, numbers and wrong containers become safe values."""
        record = CVRecord.from_payload({
            "summary": None,
            "candidate": "Jane",
            "skills": "Python",
            "education": [{"degree": "BSc", "year": 2013}],
            "experience": [{"title": 42, "highlights": "Shipped v2", "tech": None}],
        })

        assert record.summary == ""
        assert record.candidate == CandidateProfile()
        assert record.skills == []
        assert record.education[0].year == "2013"
        assert record.experience[0].title == "42"
        assert record.experience[0].highlights == ["Shipped v2"]
        assert record.experience[0].tech == []

    def test_non_dict_list_items_are_dropped(self):
        """Test that stray strings in object lists are discarded."""
        record = CVRecord.from_payload({
            "experience": ["garbage", {"title": "Engineer"}, None],
        })

        assert len(record.experience) == 1
        assert record.experience[0].title == "Engineer"

    def test_string_list_filters_non_scalars(self):
        """Test that nested objects and booleans are removed from string lists."""
        entry = ExperienceEntry.model_validate({"highlights": ["ok", {"x": 1}, True, None, 3]})

        assert entry.highlights == ["ok", "3"]

    def test_tech_is_deduplicated_in_order(self):
        """Test that repeated tech items keep their first position."""
        entry = ExperienceEntry.model_validate({"tech": ["Go", "Python", "Go", "SQL", "Python"]})

        assert entry.tech == ["Go", "Python", "SQL"]


class TestAliases:
    """Tests for accepted input keys."""

    def test_snake_case_input(self):
        """Test that snake_case keys populate the same fields."""
        entry = ExperienceEntry.model_validate({"start_date": "2020-01", "end_date": "2021-01"})

        assert entry.start_date == "2020-01"
        assert entry.end_date == "2021-01"

    def test_extractor_name_key(self):
        """Test that candidate.name is accepted for fullName."""
        candidate = CandidateProfile.model_validate({"name": "Jane Doe"})

        assert candidate.full_name == "Jane Doe"

    def test_role_key_for_title(self):
        """Test that 'role' is accepted for an experience title."""
        assert ExperienceEntry.model_validate({"role": "CTO"}).title == "CTO"

    def test_links_as_bare_strings(self):
        """Test that URL strings become link entries."""
        candidate = CandidateProfile.model_validate({"links": ["https://example.com"]})

        assert candidate.links[0].url == "https://example.com"
        assert candidate.links[0].label == ""

    def test_extras_mapping_becomes_rows(self):
        """Test that the extractor's extras mapping is flattened to label/value rows."""
        record = CVRecord.from_payload({
            "extras": {"awards": ["Best Paper", "Hackathon winner"], "volunteer_work": "Mentoring", "interests": []},
        })

        assert [(e.label, e.value) for e in record.extras] == [
            ("Awards", "Best Paper, Hackathon winner"),
            ("Volunteer Work", "Mentoring"),
        ]


class TestSerialization:
    """Tests for the camelCase wire format."""

    def test_payload_uses_camel_case(self, sample_record):
        """Test that output keys are camelCase."""
        payload = sample_record.to_payload()

        assert payload["candidate"]["fullName"] == "Jane Marie Doe"
        assert payload["experience"][0]["startDate"] == "2020-03"
        assert payload["experience"][0]["employmentType"] == "Full-time"
        assert "full_name" not in payload["candidate"]

    def test_json_round_trip(self, sample_record):
        """Test that to_json and from_json preserve the record exactly."""
        assert CVRecord.from_json(sample_record.to_json()) == sample_record

    def test_json_round_trip_from_bytes(self, sample_record):
        """Test that from_json accepts bytes."""
        assert CVRecord.from_json(sample_record.to_json().encode("utf-8")) == sample_record


class TestEntryHelpers:
    """Tests for entry properties."""

    def test_is_current(self):
        """Test that an end date of 'present' marks the role as current."""
        assert ExperienceEntry(end_date="present").is_current
        assert not ExperienceEntry(end_date="2020-01").is_current

    def test_display_year_prefers_year(self):
        """Test that year wins over the date range."""
        assert EducationEntry(year="2013", start_date="2009").display_year == "2013"

    def test_display_year_falls_back_to_range(self):
        """Test that start and end dates are joined when no year is set."""
        assert EducationEntry(start_date="2009", end_date="2013").display_year == "2009 – 2013"

    def test_candidate_is_empty(self):
        """Test emptiness of the candidate profile."""
        assert CandidateProfile().is_empty()
        assert not CandidateProfile(email="a@b.c").is_empty()


class TestParseCVPayload:
    """Tests for parse_cv_payload() on raw extractor output."""

    def test_fenced_json(self):
        """Test that markdown fences are stripped."""
        text = '```json\n{"candidate": {"name": "Jane"}, "summary": "Engineer"}\n```'

        record = parse_cv_payload(text)

        assert record.candidate.full_name == "Jane"
        assert record.summary == "Engineer"

    def test_cv_data_envelope(self):
        """Test that the {"cvData": {...}} envelope is unwrapped."""
        text = json.dumps({"cvData": {"summary": "Wrapped"}})

        assert parse_cv_payload(text).summary == "Wrapped"

    def test_malformed_json_is_repaired(self):
        """Test that trailing commas and single quotes are tolerated."""
        text = "{'summary': 'Repaired', 'skills': [],}"

        assert parse_cv_payload(text).summary == "Repaired"

    def test_empty_text_raises(self):
        """Test that empty input raises ValueError."""
        with pytest.raises(ValueError):
            parse_cv_payload("   ")
