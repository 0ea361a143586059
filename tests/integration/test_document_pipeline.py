"""
Integration test for the document pipeline.
Tests: legacy file -> migrated document -> edits -> saved file -> renderable view -> markdown.
"""

import json

import pytest

from scribe.contexts.ai.bridge import AIDataBridge, ItemPatch
from scribe.contexts.document import SnapshotStore, load_document, save_document
from scribe.contexts.rendering.markdown_formatter import format_resume_markdown
from scribe.contexts.rendering.transformer import transform_to_renderable_view

LEGACY_RESUME = {
    "personalDetails": {"fullName": "Grace Hopper", "jobTitle": "Compiler Engineer", "email": "grace@example.com"},
    "sections": [
        {"id": "sum", "type": "summary", "title": "Summary", "content": "Builds compilers."},
        {
            "id": "exp",
            "type": "experience",
            "title": "Experience",
            "items": [
                {
                    "id": "e1",
                    "jobTitle": "Engineer",
                    "company": "Remington Rand",
                    "startDate": "1949",
                    "endDate": "",
                    "description": "- Wrote the A-0 compiler",
                }
            ],
        },
        {"id": "sk", "type": "skills", "title": "Skills", "items": [{"id": "s1", "name": "COBOL"}]},
    ],
}


@pytest.mark.integration
def test_legacy_file_to_markdown(tmp_path, registry):
    legacy_path = tmp_path / "legacy.json"
    legacy_path.write_text(json.dumps(LEGACY_RESUME))

    document = load_document(legacy_path)
    store = SnapshotStore()
    snapshot = store.create("migrated", document)

    registry.update_field(document, "exp", "location", "Philadelphia", item_id="e1")
    registry.add_section_item(document, "sk", {"name": "FLOW-MATIC"})
    document = AIDataBridge.merge_back(
        document, "exp", [ItemPatch(id="e1", data={"description": "- Wrote the A-0 compiler, 1952"})]
    )

    saved = load_document(save_document(document, tmp_path / "current.yaml"))
    assert saved == document
    assert store.restore(snapshot.id, current_version=saved.schema_version).get_section("exp").items[0].data[
        "description"
    ] == "- Wrote the A-0 compiler"

    view = transform_to_renderable_view(saved, registry)
    experience_item = view.sections[1].items[0]
    assert experience_item.get("endDate") is None
    assert experience_item.get("location").value == "Philadelphia"

    markdown = format_resume_markdown(view, registry)
    assert markdown.startswith("# Grace Hopper")
    assert "### Engineer | Remington Rand" in markdown
    assert "*1949 - Present*" in markdown
    assert "- Wrote the A-0 compiler, 1952" in markdown
    assert "- COBOL\n- FLOW-MATIC" in markdown
