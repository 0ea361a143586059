"""Unit tests for the resume document model, legacy migration and file IO."""

import json

import pytest

from scribe.contexts.document import (
    DocumentFormatError,
    LegacyResumeDocument,
    ResumeDocument,
    load_document,
    save_document,
)
from scribe.contexts.document.document_data_structure import CURRENT_SCHEMA_VERSION, is_legacy_document

LEGACY_DOCUMENT = {
    "personalDetails": {"fullName": "Ada Lovelace", "jobTitle": "Analyst"},
    "templateId": "classic",
    "sections": [
        {"id": "s1", "type": "summary", "title": "Profile", "content": "Analyst with five years of SQL."},
        {
            "id": "s2",
            "type": "experience",
            "title": "Work",
            "items": [
                {
                    "id": "e1",
                    "jobTitle": "Analyst",
                    "company": "Globex",
                    "startDate": "2018",
                    "endDate": "2019",
                    "description": "Reports",
                }
            ],
        },
        {"id": "s3", "type": "skills", "title": "Skills", "visible": False, "items": [{"id": "k1", "name": "SQL"}]},
    ],
}


@pytest.mark.unit
def test_round_trip_dict(sample_document_dict):
    document = ResumeDocument.from_dict(sample_document_dict)
    again = ResumeDocument.from_dict(document.to_dict())

    assert again == document
    assert again.get_section("experience_1").items[0].data["company"] == "Acme"
    assert [s.id for s in again.visible_sections()] == ["summary_1", "experience_1", "education_1", "skills_1"]


@pytest.mark.unit
def test_to_dict_uses_camel_case(sample_document):
    data = sample_document.to_dict()
    assert data["schemaVersion"] == CURRENT_SCHEMA_VERSION
    section = data["sections"][1]
    assert section["schemaId"] == "experience"
    assert set(section["metadata"]) == {"customTitle", "aiOptimized"}
    assert set(section["items"][0]["metadata"]) == {"createdAt", "updatedAt", "aiGenerated", "aiImproved"}
    assert data["metadata"] == {"lastAIReview": None}


@pytest.mark.unit
def test_legacy_discriminator():
    assert is_legacy_document(LEGACY_DOCUMENT)
    assert not is_legacy_document({"schemaVersion": "1.0.0", "sections": []})


@pytest.mark.unit
def test_legacy_document_migrates_on_load():
    """Test that a legacy document converts fully to the schema-driven form."""
    document = ResumeDocument.from_dict(LEGACY_DOCUMENT)

    assert document.schema_version == CURRENT_SCHEMA_VERSION
    assert document.template_id == "classic"
    summary, experience, skills = document.sections

    assert summary.schema_id == "summary"
    assert summary.title == "Profile"
    assert summary.items[0].data == {"content": "Analyst with five years of SQL."}

    assert experience.items[0].id == "e1"
    assert experience.items[0].schema_id == "experience"
    assert experience.items[0].data["company"] == "Globex"
    assert "id" not in experience.items[0].data

    assert not skills.visible
    assert skills.items[0].data == {"name": "SQL"}


@pytest.mark.unit
def test_legacy_migration_keeps_only_fixed_text_fields():
    """Test that migrated legacy items keep their fixed fields as text."""
    document = ResumeDocument.from_dict(
        {
            "sections": [
                {
                    "id": "ed",
                    "type": "education",
                    "title": "Education",
                    "items": [
                        {"id": "e1", "degree": ["not", "text"], "institution": "UCL", "graduationYear": 2021, "junk": 1}
                    ],
                }
            ]
        }
    )
    assert document.get_section("ed").items[0].data == {"institution": "UCL", "graduationYear": "2021"}


@pytest.mark.unit
def test_mixed_document_migrates_section_by_section(sample_document_dict):
    sample_document_dict["sections"].append({"id": "old", "type": "customText", "title": "Awards", "content": "Prize"})
    document = ResumeDocument.from_dict(sample_document_dict)

    awards = document.get_section("old")
    assert awards.schema_id == "customText"
    assert awards.items[0].data == {"content": "Prize"}


@pytest.mark.unit
def test_legacy_document_kept_unmigrated():
    legacy = LegacyResumeDocument.from_dict(LEGACY_DOCUMENT)
    assert legacy.sections[0].field_items()[0]["content"].startswith("Analyst")
    assert isinstance(legacy.to_dynamic(), ResumeDocument)


@pytest.mark.unit
def test_invalid_document_raises():
    with pytest.raises(DocumentFormatError):
        ResumeDocument.from_dict({"personalDetails": {}})
    with pytest.raises(DocumentFormatError, match="neither schemaId nor type"):
        ResumeDocument.from_dict({"schemaVersion": "1.0.0", "sections": [{"id": "x", "title": "X"}]})


@pytest.mark.unit
@pytest.mark.parametrize("suffix", [".json", ".yaml"])
def test_save_and_load(tmp_path, sample_document, suffix):
    path = save_document(sample_document, tmp_path / f"resume{suffix}")
    loaded = load_document(path)
    assert loaded == sample_document


@pytest.mark.unit
def test_yaml_keeps_interpolation_syntax(tmp_path, sample_document):
    """Test that user text containing ${...} survives a YAML round trip."""
    sample_document.get_section("skills_1").items[0].data["name"] = "Shell ${HOME}"
    path = save_document(sample_document, tmp_path / "resume.yaml")
    assert load_document(path).get_section("skills_1").items[0].data["name"] == "Shell ${HOME}"


@pytest.mark.unit
def test_load_legacy_json(tmp_path):
    path = tmp_path / "legacy.json"
    path.write_text(json.dumps(LEGACY_DOCUMENT))
    document = load_document(path)
    assert [s.schema_id for s in document.sections] == ["summary", "experience", "skills"]


@pytest.mark.unit
def test_load_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_document(tmp_path / "missing.json")

    bad = tmp_path / "bad.json"
    bad.write_text("{not json")
    with pytest.raises(DocumentFormatError, match="Invalid JSON"):
        load_document(bad)

    unsupported = tmp_path / "resume.txt"
    unsupported.write_text("hello")
    with pytest.raises(DocumentFormatError, match="Unsupported"):
        load_document(unsupported)
