"""
Data Transformer

Pure conversion from the edit-time document to the renderable view model.

For each visible section, in order:
- dynamic sections resolve their schema and emit one field per declared field
  whose value is non-empty, in schema field order
- legacy sections (only in a LegacyResumeDocument) use the fixed field names of
  their type, borrowing labels and markdown flags from the matching schema

Sections with an unknown schema or legacy type are dropped with a warning.
Nothing is sorted or deduplicated.
"""

from typing import Any, Dict, List, Optional, Tuple, Union

from scribe.contexts.document.document_data_structure import (
    LEGACY_SECTION_FIELDS,
    LegacyResumeDocument,
    LegacySection,
    ResumeDocument,
    ResumeSection,
)
from scribe.contexts.rendering.logger import _log_warning
from scribe.contexts.rendering.view_model import (
    RenderableField,
    RenderableItem,
    RenderableResume,
    RenderableSection,
    freeze,
)
from scribe.contexts.schema.field_values import is_empty_value
from scribe.contexts.schema.schema_data_structures import SectionSchema

DEFAULT_RENDER_TYPE = "list"


def _renderable_field(key: str, label: str, value: Any, markdown_enabled: bool) -> Optional[RenderableField]:
    if is_empty_value(value):
        return None
    return RenderableField(key=key, label=label, value=freeze(value), markdown_enabled=markdown_enabled)


def _transform_dynamic_section(section: ResumeSection, registry) -> Optional[RenderableSection]:
    schema: Optional[SectionSchema] = registry.get_section_schema(section.schema_id)
    if schema is None:
        _log_warning(f"Dropping section '{section.id}': unknown schema '{section.schema_id}'")
        return None

    items = []
    for item in section.items:
        fields = []
        for field_schema in schema.fields:
            rendered = _renderable_field(
                field_schema.id,
                field_schema.label,
                item.data.get(field_schema.id),
                field_schema.markdown_enabled,
            )
            if rendered is not None:
                fields.append(rendered)
        items.append(RenderableItem(id=item.id, fields=tuple(fields)))

    return RenderableSection(
        id=section.id,
        title=section.title,
        schema_id=section.schema_id,
        default_render_type=schema.ui_config.default_render_type,
        items=tuple(items),
    )


def _humanize(field_name: str) -> str:
    """jobTitle -> Job Title"""
    words, current = [], ""
    for ch in field_name:
        if ch.isupper() and current:
            words.append(current)
            current = ch
        else:
            current += ch
    words.append(current)
    return " ".join(word.capitalize() for word in words if word)


def _transform_legacy_section(section: LegacySection, registry) -> Optional[RenderableSection]:
    field_names = LEGACY_SECTION_FIELDS.get(section.type)
    if field_names is None:
        _log_warning(f"Dropping legacy section '{section.id}': unknown type '{section.type}'")
        return None

    schema: Optional[SectionSchema] = registry.get_section_schema(section.type)
    items = []
    for index, raw in enumerate(section.field_items()):
        fields = []
        for name in field_names:
            field_schema = schema.get_field(name) if schema else None
            rendered = _renderable_field(
                name,
                field_schema.label if field_schema else _humanize(name),
                raw.get(name),
                field_schema.markdown_enabled if field_schema else False,
            )
            if rendered is not None:
                fields.append(rendered)
        item_id = str(raw.get("id") or f"{section.id}_{index}")
        items.append(RenderableItem(id=item_id, fields=tuple(fields)))

    return RenderableSection(
        id=section.id,
        title=section.title,
        schema_id=section.type,
        default_render_type=schema.ui_config.default_render_type if schema else DEFAULT_RENDER_TYPE,
        items=tuple(items),
    )


def transform_to_renderable_view(
    document: Union[ResumeDocument, LegacyResumeDocument],
    registry,
) -> RenderableResume:
    """
    Build the renderable view of a document.

    Args:
        document: ResumeDocument, or a LegacyResumeDocument that was not migrated
        registry: SchemaRegistry for schema lookups

    Returns:
        RenderableResume with only visible, resolvable sections
    """
    sections: List[RenderableSection] = []
    for section in document.sections:
        if not section.visible:
            continue
        if isinstance(section, LegacySection):
            rendered = _transform_legacy_section(section, registry)
        else:
            rendered = _transform_dynamic_section(section, registry)
        if rendered is not None:
            sections.append(rendered)

    personal_details: Dict[str, Any] = {
        key: value for key, value in document.personal_details.items() if not is_empty_value(value)
    }
    return RenderableResume(personal_details=freeze(personal_details), sections=tuple(sections))


def collect_fields(view: RenderableResume) -> Tuple[RenderableField, ...]:
    """Every field of every item in the view, in order."""
    return tuple(f for section in view.sections for item in section.items for f in item.fields)
