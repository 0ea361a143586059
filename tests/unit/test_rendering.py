"""Unit tests for the renderable view transformer, role lookups and markdown output."""

from dataclasses import FrozenInstanceError

import pytest

from scribe.contexts.document.document_data_structure import LegacyResumeDocument, ResumeSection, SectionItem
from scribe.contexts.rendering.markdown_formatter import format_resume_markdown
from scribe.contexts.rendering.role_utils import (
    get_item_date_range,
    get_item_organization,
    get_item_title,
    pick_field_by_role,
    pick_fields_by_role,
)
from scribe.contexts.rendering.transformer import collect_fields, transform_to_renderable_view
from scribe.contexts.schema.field_types import FieldRole
from scribe.contexts.schema.field_values import is_empty_value


@pytest.mark.unit
def test_view_skips_hidden_sections_and_keeps_order(registry, sample_document):
    view = transform_to_renderable_view(sample_document, registry)
    assert [s.id for s in view.sections] == ["summary_1", "experience_1", "education_1", "skills_1"]
    assert [i.id for i in view.sections[1].items] == ["exp_a", "exp_b"]


@pytest.mark.unit
def test_view_contains_no_empty_fields(registry, sample_document):
    """Test that empty values never reach the view model."""
    sample_document.get_section("experience_1").items[1].data["description"] = "   "
    view = transform_to_renderable_view(sample_document, registry)

    fields = collect_fields(view)
    assert fields
    assert not any(is_empty_value(f.value) for f in fields)

    education = view.sections[2].items[0]
    assert education.get("details") is None
    assert view.sections[1].items[1].get("description") is None


@pytest.mark.unit
def test_view_fields_follow_schema_order_and_labels(registry, sample_document):
    item = transform_to_renderable_view(sample_document, registry).sections[1].items[0]
    assert [f.key for f in item.fields] == ["jobTitle", "company", "location", "startDate", "endDate", "description"]
    description = item.get("description")
    assert description.label == "Description"
    assert description.markdown_enabled
    assert not item.get("company").markdown_enabled


@pytest.mark.unit
def test_view_section_metadata(registry, sample_document):
    section = transform_to_renderable_view(sample_document, registry).sections[3]
    assert section.schema_id == "skills"
    assert section.title == "Skills"
    assert section.default_render_type == "badge-list"


@pytest.mark.unit
def test_view_drops_unknown_schema(registry, sample_document):
    sample_document.sections.append(
        ResumeSection(id="x", schema_id="hobbies", title="Hobbies", items=[SectionItem(id="h", schema_id="hobbies")])
    )
    view = transform_to_renderable_view(sample_document, registry)
    assert "x" not in [s.id for s in view.sections]


@pytest.mark.unit
def test_view_is_immutable(registry, sample_document):
    sample_document.get_section("skills_1").items[0].data["name"] = "Python"
    sample_document.personal_details["links"] = ["https://example.com"]
    view = transform_to_renderable_view(sample_document, registry)

    with pytest.raises(FrozenInstanceError):
        view.sections[0].title = "Changed"
    with pytest.raises(TypeError):
        view.personal_details["fullName"] = "Someone"
    assert view.personal_details["links"] == ("https://example.com",)
    assert "avatar" in view.personal_details


@pytest.mark.unit
def test_view_does_not_track_later_edits(registry, sample_document):
    view = transform_to_renderable_view(sample_document, registry)
    sample_document.get_section("skills_1").items[0].data["name"] = "COBOL"
    assert view.sections[3].items[0].get("name").value == "Python"


@pytest.mark.unit
def test_legacy_document_view(registry):
    """Test that legacy sections map their fixed fields using schema labels."""
    legacy = LegacyResumeDocument.from_dict(
        {
            "personalDetails": {"fullName": "Ada", "phone": ""},
            "sections": [
                {"id": "s1", "type": "summary", "title": "Profile", "content": "Analyst."},
                {
                    "id": "s2",
                    "type": "education",
                    "title": "Education",
                    "items": [{"id": "e1", "degree": "BSc", "institution": "UCL", "graduationYear": "2017", "gpa": "4"}],
                },
                {"id": "s3", "type": "portfolio", "title": "Portfolio", "items": []},
            ],
        }
    )
    view = transform_to_renderable_view(legacy, registry)

    assert [s.id for s in view.sections] == ["s1", "s2"]
    summary_field = view.sections[0].items[0].fields[0]
    assert (summary_field.key, summary_field.label, summary_field.value) == ("content", "Summary", "Analyst.")
    assert summary_field.markdown_enabled

    education = view.sections[1].items[0]
    assert education.id == "e1"
    assert [f.key for f in education.fields] == ["degree", "institution", "graduationYear"]
    assert "phone" not in view.personal_details


# --- Role lookups ---


@pytest.mark.unit
def test_role_lookups_on_view_items(registry, sample_document):
    view = transform_to_renderable_view(sample_document, registry)
    experience = view.sections[1].items[0]
    role_map = registry.get_role_map("experience")

    assert get_item_title(experience, role_map) == "Data Engineer"
    assert get_item_organization(experience, role_map) == "Acme"
    assert get_item_date_range(experience, role_map) == "2020-01 - 2023-06"
    assert pick_field_by_role(experience, FieldRole.LOCATION, role_map) == "London"
    assert pick_field_by_role(experience, FieldRole.URL, role_map) is None


@pytest.mark.unit
def test_role_lookups_on_data_dicts(registry):
    projects = registry.get_role_map("projects")
    assert get_item_date_range({"startDate": "2021"}, projects) == "2021 - Present"
    assert get_item_date_range({"endDate": "2022"}, projects) == "2022"
    assert get_item_date_range({}, projects) == ""
    assert get_item_title({"name": "ETL"}, projects) == "ETL"
    assert pick_fields_by_role({"technologies": ["Python", "Airflow"]}, FieldRole.SKILLS, projects) == [
        ["Python", "Airflow"]
    ]

    education = registry.get_role_map("education")
    assert get_item_date_range({"graduationYear": "2017"}, education) == "2017"


@pytest.mark.unit
def test_role_lookups_without_role_map():
    assert pick_field_by_role({"jobTitle": "Analyst"}, FieldRole.TITLE, None) is None
    assert pick_fields_by_role({"jobTitle": "Analyst"}, FieldRole.TITLE, None) == []
    assert get_item_title({"jobTitle": "Analyst"}, None) == ""


# --- Markdown ---


@pytest.mark.unit
def test_format_resume_markdown(registry, sample_document):
    view = transform_to_renderable_view(sample_document, registry)
    markdown = format_resume_markdown(view, registry)

    assert markdown.startswith("# Ada Lovelace")
    assert "**Data Engineer**" in markdown
    assert "ada@example.com" in markdown
    assert "## Experience" in markdown
    assert "### Data Engineer | Acme" in markdown
    assert "*2020-01 - 2023-06*" in markdown
    assert "**Location:** London" in markdown
    assert "Built ETL jobs" in markdown
    assert "- Python" in markdown
    assert "Hobbies" not in markdown
    assert markdown.index("## Summary") < markdown.index("## Experience") < markdown.index("## Skills")
