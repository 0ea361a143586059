"""Unit tests for the AI Data Bridge."""

import copy

import pytest

from scribe.contexts.ai.bridge import AIBridgedResume, AIBridgedSection, AIDataBridge, ItemPatch
from scribe.contexts.document.document_data_structure import ResumeSection, SectionItem


@pytest.mark.unit
def test_from_internal_experience_core_fields(registry, sample_document):
    """Test that only core-role fields of each item are sent."""
    bridged = AIDataBridge.from_internal(sample_document.get_section("experience_1"), registry)

    assert bridged.schema_id == "experience"
    assert bridged.item_ids == ["exp_a", "exp_b"]
    assert set(bridged.items[0]) == {"jobTitle", "company", "startDate", "endDate", "description"}
    assert "location" not in bridged.items[0]
    assert bridged.to_dict() == {"schemaId": "experience", "items": bridged.items}


@pytest.mark.unit
def test_from_internal_skips_empty_values_and_items(registry, sample_document):
    education = sample_document.get_section("education_1")
    education.items.append(SectionItem(id="edu_empty", schema_id="education", data={"details": "  "}))

    bridged = AIDataBridge.from_internal(education, registry)
    assert bridged.item_ids == ["edu_a"]
    assert "details" not in bridged.items[0]
    assert bridged.items[0]["graduationYear"] == "2017"


@pytest.mark.unit
def test_from_internal_without_role_map(registry):
    registry._role_maps.pop("skills")
    section = ResumeSection(
        id="s",
        schema_id="skills",
        title="Skills",
        items=[SectionItem(id="k", schema_id="skills", data={"id": "legacy-id", "name": "Go"})],
    )
    bridged = AIDataBridge.from_internal(section, registry)
    assert bridged.items == [{"name": "Go"}]


@pytest.mark.unit
def test_to_internal_drops_unknown_fields(registry):
    """Test that undeclared and empty fields are dropped while the item is kept."""
    document = AIDataBridge.to_internal(
        {
            "sections": [
                {
                    "schemaId": "experience",
                    "items": [
                        {"jobTitle": "Engineer", "company": "Acme", "salary": "100k", "description": ""},
                    ],
                }
            ]
        },
        registry,
    )

    section = document.sections[0]
    assert section.schema_id == "experience"
    assert section.title == "Experience"
    item = section.items[0]
    assert item.data == {"jobTitle": "Engineer", "company": "Acme"}
    assert item.metadata.ai_generated
    assert item.schema_id == "experience"


@pytest.mark.unit
def test_to_internal_skips_unknown_schema_and_empty_items(registry):
    document = AIDataBridge.to_internal(
        {
            "sections": [
                {"schemaId": "hobbies", "items": [{"content": "Chess"}]},
                {"schemaId": "skills", "items": [{"name": "Python"}, {"level": "high"}, "junk"]},
            ]
        },
        registry,
        personal_details={"fullName": "Ada"},
    )
    assert [s.schema_id for s in document.sections] == ["skills"]
    assert [i.data for i in document.sections[0].items] == [{"name": "Python"}]
    assert document.personal_details == {"fullName": "Ada"}


@pytest.mark.unit
def test_to_internal_validates_options_and_rules(registry):
    document = AIDataBridge.to_internal(
        {
            "sections": [
                {
                    "schemaId": "advanced-skills",
                    "items": [
                        {
                            "category": "Data",
                            "skills": ["Spark", "dbt"],
                            "proficiency": "Wizard",
                            "yearsOfExperience": 5,
                        }
                    ],
                },
                {"schemaId": "projects", "items": [{"name": "ETL", "url": "example.com"}]},
            ]
        },
        registry,
    )
    skills, projects = document.sections
    assert skills.items[0].data == {"category": "Data", "skills": ["Spark", "dbt"], "yearsOfExperience": "5"}
    assert projects.items[0].data == {"name": "ETL"}


@pytest.mark.unit
def test_to_internal_single_section_keeps_first_item(registry):
    document = AIDataBridge.to_internal(
        {"sections": [{"schemaId": "summary", "items": [{"content": "First"}, {"content": "Second"}]}]},
        registry,
    )
    assert [i.data["content"] for i in document.sections[0].items] == ["First"]


@pytest.mark.unit
def test_round_trip_preserves_core_fields(registry, sample_document):
    """Test from_internal then to_internal keeps the core-role values."""
    bridged = AIDataBridge.from_internal(sample_document.get_section("experience_1"), registry)
    rebuilt = AIDataBridge.to_internal(AIBridgedResume(sections=[bridged]), registry)
    assert [item.data for item in rebuilt.sections[0].items] == bridged.items


@pytest.mark.unit
def test_bridged_dict_forms():
    resume = AIBridgedResume.from_dict({"sections": [{"schemaId": "skills", "items": [{"name": "Go"}, 3]}, "x"]})
    assert resume.sections == [AIBridgedSection(schema_id="skills", items=[{"name": "Go"}])]
    assert resume.to_dict() == {"sections": [{"schemaId": "skills", "items": [{"name": "Go"}]}]}


@pytest.mark.unit
def test_merge_back_is_local(sample_document):
    """Test that merging patches only the named fields of the named items."""
    original = copy.deepcopy(sample_document)
    merged = AIDataBridge.merge_back(
        sample_document,
        "experience_1",
        [ItemPatch(id="exp_b", data={"description": "Automated weekly SQL reporting"})],
    )

    # Input untouched
    assert sample_document == original

    section = merged.get_section("experience_1")
    patched = section.get_item("exp_b")
    assert patched.data["description"] == "Automated weekly SQL reporting"
    assert patched.data["company"] == "Globex"
    assert patched.metadata.ai_improved
    assert section.metadata.ai_optimized

    untouched = section.get_item("exp_a")
    assert untouched == original.get_section("experience_1").get_item("exp_a")
    assert [i.id for i in section.items] == ["exp_a", "exp_b"]
    for section_id in ("summary_1", "education_1", "skills_1", "hobbies_1"):
        assert merged.get_section(section_id) == original.get_section(section_id)


@pytest.mark.unit
def test_merge_back_ignores_unknown_targets(sample_document):
    merged = AIDataBridge.merge_back(sample_document, "experience_1", [{"id": "ghost", "data": {"company": "X"}}])
    assert merged == sample_document
    assert not merged.get_section("experience_1").metadata.ai_optimized

    assert AIDataBridge.merge_back(sample_document, "missing", []) == sample_document


@pytest.mark.unit
def test_schema_instructions(registry):
    instruction = AIDataBridge.build_schema_instruction(registry, "advanced-skills")
    assert '"schemaId": "advanced-skills"' in instruction
    assert '"proficiency": "string (must be one of:' in instruction
    assert '"skills": "array of strings"' in instruction
    assert AIDataBridge.build_schema_instruction(registry, "nope") == ""

    summary = AIDataBridge.build_schema_instruction(registry, "summary")
    assert "exactly one object" in summary

    everything = AIDataBridge.build_schema_instructions(registry)
    for schema_id in registry.get_available_section_types():
        assert f'"schemaId": "{schema_id}"' in everything
