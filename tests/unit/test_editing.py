"""Unit tests for the document edit path and named snapshots."""

import pytest

from scribe.contexts.document import DocumentEditError, SnapshotStore
from scribe.contexts.document import editing


@pytest.mark.unit
def test_update_field_touches_item(registry, sample_document):
    item = sample_document.get_section("experience_1").get_item("exp_b")
    item.metadata.updated_at = "2000-01-01T00:00:00+00:00"

    edited = registry.update_field(sample_document, "experience_1", "company", "Initech", item_id="exp_b")

    assert edited is item
    assert item.data["company"] == "Initech"
    assert item.metadata.updated_at != "2000-01-01T00:00:00+00:00"


@pytest.mark.unit
def test_update_field_creates_single_item_lazily(registry, sample_document):
    """Test that the first edit of an empty single section creates its item."""
    section = registry.add_section(sample_document, "summary")
    assert section.items == []

    item = registry.update_field(sample_document, section.id, "content", "New summary")
    assert section.items == [item]
    assert item.schema_id == "summary"

    # Second edit reuses the same item
    registry.update_field(sample_document, section.id, "content", "Edited summary")
    assert len(section.items) == 1
    assert section.items[0].data["content"] == "Edited summary"


@pytest.mark.unit
def test_update_field_missing_targets(registry, sample_document):
    with pytest.raises(DocumentEditError, match="Item not found"):
        registry.update_field(sample_document, "experience_1", "company", "X")
    with pytest.raises(DocumentEditError, match="Section not found"):
        registry.update_field(sample_document, "nope", "company", "X", item_id="exp_a")


@pytest.mark.unit
def test_update_field_coerces_to_field_type(registry, sample_document):
    """Test that edited values are typed and checked against the schema."""
    section = registry.add_section(sample_document, "advanced-skills")
    item = registry.add_section_item(sample_document, section.id, {"category": "Frameworks"})

    assert registry.update_field(sample_document, section.id, "yearsOfExperience", 7, item_id=item.id) is item
    assert item.data["yearsOfExperience"] == "7"

    assert registry.update_field(sample_document, section.id, "proficiency", "Wizard", item_id=item.id) is None
    assert registry.update_field(sample_document, section.id, "bogusField", "x", item_id=item.id) is None
    assert registry.update_field(sample_document, section.id, "skills", "Django", item_id=item.id) is None
    assert item.data == {"category": "Frameworks", "yearsOfExperience": "7"}

    registry.update_field(sample_document, section.id, "proficiency", "Expert", item_id=item.id)
    registry.update_field(sample_document, section.id, "yearsOfExperience", "", item_id=item.id)
    assert item.data["proficiency"] == "Expert"
    assert item.data["yearsOfExperience"] == ""


@pytest.mark.unit
def test_rejected_edit_does_not_create_single_item(registry, sample_document):
    section = registry.add_section(sample_document, "summary")
    assert registry.update_field(sample_document, section.id, "headline", "x") is None
    assert section.items == []


@pytest.mark.unit
def test_add_section_item_cleans_prefill(registry, sample_document):
    item = registry.add_section_item(
        sample_document, "experience_1", {"jobTitle": "Engineer", "company": ["A", "B"], "salary": "100k"}
    )
    assert item.data == {"jobTitle": "Engineer"}


@pytest.mark.unit
def test_add_and_remove_items(registry, sample_document):
    item = registry.add_section_item(sample_document, "skills_1", {"name": "Rust"})
    section = sample_document.get_section("skills_1")
    assert section.items[-1] is item
    assert item.id.startswith("skills_")

    removed = registry.remove_section_item(sample_document, "skills_1", item.id)
    assert removed is item
    assert item not in section.items

    with pytest.raises(DocumentEditError):
        registry.remove_section_item(sample_document, "skills_1", "ghost")


@pytest.mark.unit
def test_single_section_rejects_second_item(registry, sample_document):
    assert registry.add_section_item(sample_document, "summary_1", {"content": "Another"}) is None
    assert len(sample_document.get_section("summary_1").items) == 1


@pytest.mark.unit
def test_add_section_item_unknown_section(registry, sample_document):
    assert registry.add_section_item(sample_document, "nope") is None


@pytest.mark.unit
def test_update_section_title_marks_custom(registry, sample_document):
    registry.update_section_title(sample_document, "skills_1", "Toolbox")
    section = sample_document.get_section("skills_1")
    assert section.title == "Toolbox"
    assert section.metadata.custom_title


@pytest.mark.unit
def test_reorder_items_and_sections(registry, sample_document):
    registry.reorder_section_items(sample_document, "experience_1", 1, 0)
    assert [i.id for i in sample_document.get_section("experience_1").items] == ["exp_b", "exp_a"]

    registry.reorder_sections(sample_document, 0, 3)
    assert [s.id for s in sample_document.sections] == [
        "experience_1",
        "education_1",
        "skills_1",
        "summary_1",
        "hobbies_1",
    ]

    with pytest.raises(DocumentEditError, match="Cannot move"):
        registry.reorder_sections(sample_document, 0, 9)


@pytest.mark.unit
def test_add_section(registry, sample_document):
    section = registry.add_section(sample_document, "projects", title="Side Projects")
    assert sample_document.sections[-1] is section
    assert section.title == "Side Projects"
    assert section.metadata.custom_title
    assert registry.add_section(sample_document, "nope") is None


@pytest.mark.unit
def test_remove_section_and_visibility(sample_document):
    editing.set_section_visibility(sample_document, "hobbies_1", True)
    assert sample_document.get_section("hobbies_1").visible

    editing.remove_section(sample_document, "hobbies_1")
    assert sample_document.get_section("hobbies_1") is None

    editing.update_personal_detail(sample_document, "phone", "555-0100")
    assert sample_document.personal_details["phone"] == "555-0100"


# --- Snapshots ---


@pytest.mark.unit
def test_snapshot_is_isolated_copy(sample_document):
    store = SnapshotStore()
    snapshot = store.create("Before rewrite", sample_document)

    sample_document.get_section("skills_1").items[0].data["name"] = "COBOL"
    assert snapshot.document.get_section("skills_1").items[0].data["name"] == "Python"

    # Avatar images are not kept
    assert snapshot.document.personal_details["avatar"] == ""
    assert sample_document.personal_details["avatar"].startswith("data:image")


@pytest.mark.unit
def test_snapshot_restore_returns_fresh_copy(sample_document):
    store = SnapshotStore()
    snapshot = store.create("v1", sample_document)

    restored = store.restore(snapshot.id, current_version="1.0.0")
    restored.sections.clear()
    assert store.restore(snapshot.id).sections != []
    assert store.restore("missing") is None


@pytest.mark.unit
def test_snapshot_management(sample_document):
    store = SnapshotStore()
    first = store.create("first", sample_document)
    second = store.create("second", sample_document)

    assert [s.name for s in store.list()] == ["first", "second"]
    assert store.rename(first.id, "renamed")
    assert store.get(first.id).name == "renamed"
    assert not store.rename("missing", "x")

    assert store.delete(second.id)
    assert not store.delete(second.id)
    assert len(store) == 1
