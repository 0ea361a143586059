"""
Document edit path.

In-place edits of a ResumeDocument, one function per editor action. Functions that
need cardinality take the section's SectionSchema; SchemaRegistry wraps them and
resolves the schema itself.

Edits targeting a missing section or item raise DocumentEditError. Values are
coerced through the field schema when one is given; undeclared fields and values
of the wrong shape are dropped with a warning.
"""

from typing import Any, Dict, Optional, Tuple

from scribe.contexts.document.document_data_structure import (
    ResumeDocument,
    ResumeSection,
    SectionItem,
)
from scribe.contexts.document.exceptions import DocumentEditError
from scribe.contexts.document.logger import _log_warning
from scribe.contexts.schema.exceptions import FieldValueError
from scribe.contexts.schema.field_values import clean_item_data, coerce_field_value, is_empty_value
from scribe.contexts.schema.schema_data_structures import SectionSchema
from scribe.utils.hashing import generate_id


def _require_section(document: ResumeDocument, section_id: str) -> ResumeSection:
    section = document.get_section(section_id)
    if section is None:
        raise DocumentEditError("Section not found", section_id=section_id)
    return section


def _move(sequence: list, from_index: int, to_index: int) -> None:
    if not (0 <= from_index < len(sequence)) or not (0 <= to_index < len(sequence)):
        raise DocumentEditError(
            f"Cannot move index {from_index} to {to_index} in a list of {len(sequence)}"
        )
    moved = sequence.pop(from_index)
    sequence.insert(to_index, moved)


def new_item(schema_id: str, data: Optional[Dict[str, Any]] = None) -> SectionItem:
    """Create an item with a fresh id and timestamps."""
    return SectionItem(id=generate_id(schema_id), schema_id=schema_id, data=dict(data or {}))


def resolve_item(
    section: ResumeSection,
    item_id: Optional[str],
    schema: Optional[SectionSchema] = None,
) -> Optional[SectionItem]:
    """
    Find the item an edit or AI request is aimed at.

    With an item_id, that item. Without one, the sole item of a single-cardinality
    section. Returns None when nothing matches.
    """
    if item_id is not None:
        return section.get_item(item_id)
    if schema is not None and schema.is_single and section.items:
        return section.items[0]
    return None


def _accept_value(schema: Optional[SectionSchema], field_id: str, value: Any) -> Tuple[bool, Any]:
    """Check one edited value against its field; (False, None) means drop it."""
    if schema is None:
        return True, value

    field_schema = schema.get_field(field_id)
    if field_schema is None:
        _log_warning(f"Ignoring edit of undeclared field '{field_id}' for schema '{schema.id}'")
        return False, None
    if is_empty_value(value):
        return True, value

    try:
        return True, coerce_field_value(field_schema, value)
    except FieldValueError as e:
        _log_warning(f"Ignoring edit for schema '{schema.id}': {e}")
        return False, None


def update_field(
    document: ResumeDocument,
    section_id: str,
    field_id: str,
    value: Any,
    item_id: Optional[str] = None,
    schema: Optional[SectionSchema] = None,
) -> Optional[SectionItem]:
    """
    Set one field of one item.

    For a single-cardinality section the item may be omitted; if the section has
    no item yet it is created here, on first edit. With a schema, the field must be
    declared and the value is coerced to its type; empty values clear the field.

    Returns:
        The edited item, or None if the field or value was rejected

    Raises:
        DocumentEditError: If the section or item does not exist
    """
    section = _require_section(document, section_id)
    item = resolve_item(section, item_id, schema)

    if item is None and not (item_id is None and schema is not None and schema.is_single):
        raise DocumentEditError("Item not found", section_id=section_id, item_id=item_id)

    accepted, value = _accept_value(schema, field_id, value)
    if not accepted:
        return None

    if item is None:
        item = new_item(section.schema_id)
        section.items.append(item)

    item.data[field_id] = value
    item.touch()
    return item


def update_personal_detail(document: ResumeDocument, field_id: str, value: Any) -> None:
    document.personal_details[field_id] = value


def add_section_item(
    document: ResumeDocument,
    section_id: str,
    schema: SectionSchema,
    data: Optional[Dict[str, Any]] = None,
) -> Optional[SectionItem]:
    """
    Append an empty (or pre-filled) item.

    Prefill data is coerced through the schema; fields that do not fit are dropped.

    Returns:
        The new item, or None if the section is single-cardinality and already has one
    """
    section = _require_section(document, section_id)
    if schema.is_single and section.items:
        return None
    item = new_item(section.schema_id, clean_item_data(data or {}, schema, check_rules=False))
    section.items.append(item)
    return item


def remove_section_item(document: ResumeDocument, section_id: str, item_id: str) -> SectionItem:
    section = _require_section(document, section_id)
    item = section.get_item(item_id)
    if item is None:
        raise DocumentEditError("Item not found", section_id=section_id, item_id=item_id)
    section.items.remove(item)
    return item


def update_section_title(document: ResumeDocument, section_id: str, title: str) -> None:
    section = _require_section(document, section_id)
    section.title = title
    section.metadata.custom_title = True


def reorder_section_items(document: ResumeDocument, section_id: str, from_index: int, to_index: int) -> None:
    section = _require_section(document, section_id)
    _move(section.items, from_index, to_index)


def reorder_sections(document: ResumeDocument, from_index: int, to_index: int) -> None:
    _move(document.sections, from_index, to_index)


def add_section(document: ResumeDocument, schema: SectionSchema, title: Optional[str] = None) -> ResumeSection:
    """Append a new, empty section for schema. Single sections start with no item."""
    section = ResumeSection(
        id=generate_id(schema.id),
        schema_id=schema.id,
        title=title or schema.name,
    )
    section.metadata.custom_title = title is not None
    document.sections.append(section)
    return section


def remove_section(document: ResumeDocument, section_id: str) -> ResumeSection:
    section = _require_section(document, section_id)
    document.sections.remove(section)
    return section


def set_section_visibility(document: ResumeDocument, section_id: str, visible: bool) -> None:
    _require_section(document, section_id).visible = visible
