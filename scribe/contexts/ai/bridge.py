"""
AI Data Bridge

The only conversion layer between the internal document model and the simplified
representation exchanged with the generation backend:

    AIBridgedSection  {"schemaId": str, "items": [ {field_id: value}, ... ]}
    AIBridgedResume   {"sections": [AIBridgedSection, ...]}

Outgoing data is narrowed to core-role fields. Incoming data is shape-checked
against the section schema field by field: unknown keys, empty values and values
of the wrong shape are dropped, the rest of the item is kept.
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from scribe.contexts.ai.logger import _log_warning
from scribe.contexts.document.document_data_structure import (
    ResumeDocument,
    ResumeSection,
    SectionItem,
)
from scribe.contexts.document.editing import new_item
from scribe.contexts.schema.field_types import CORE_ROLES, FieldType
from scribe.contexts.schema.field_values import clean_item_data, is_empty_value
from scribe.contexts.schema.schema_data_structures import SectionSchema
from scribe.utils.hashing import generate_id


@dataclass
class AIBridgedSection:
    """
    Minimal section representation sent to / received from the generator.

    item_ids pairs each entry of items with the internal item it came from. It is
    kept for merging results back and never serialized.
    """

    schema_id: str
    items: List[Dict[str, Any]] = field(default_factory=list)
    item_ids: List[str] = field(default_factory=list, compare=False, repr=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"schemaId": self.schema_id, "items": copy.deepcopy(self.items)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AIBridgedSection":
        items = data.get("items") or []
        return cls(
            schema_id=str(data.get("schemaId") or ""),
            items=[item for item in items if isinstance(item, dict)],
        )


@dataclass
class AIBridgedResume:
    sections: List[AIBridgedSection] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"sections": [section.to_dict() for section in self.sections]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AIBridgedResume":
        sections = data.get("sections") or []
        return cls(sections=[AIBridgedSection.from_dict(s) for s in sections if isinstance(s, dict)])


@dataclass
class ItemPatch:
    """Field-level patch for one item: only the fields in data are replaced."""

    id: str
    data: Dict[str, Any]


class AIDataBridge:
    """Conversions between ResumeDocument and the AI-bridged representation."""

    @staticmethod
    def validate_item_data(raw: Dict[str, Any], schema: SectionSchema) -> Dict[str, Any]:
        """
        Keep only declared, non-empty, well-shaped fields of one generated item.

        Args:
            raw: Field mapping produced by the generator
            schema: Section schema the item must follow

        Returns:
            Cleaned field mapping (possibly empty)
        """
        return clean_item_data(raw, schema)

    @staticmethod
    def to_internal(
        ai_result: Union[AIBridgedResume, Dict[str, Any]],
        registry,
        personal_details: Optional[Dict[str, Any]] = None,
    ) -> ResumeDocument:
        """
        Build a ResumeDocument from generator output.

        Sections with an unknown schemaId are skipped. Items keep only validated
        fields; items left with no fields are dropped. Single-cardinality sections
        keep their first valid item. Everything created here is stamped ai_generated.

        Args:
            ai_result: AIBridgedResume or its dict form
            registry: SchemaRegistry used to resolve schemas
            personal_details: Optional personal details for the new document
        """
        if isinstance(ai_result, dict):
            ai_result = AIBridgedResume.from_dict(ai_result)

        sections = []
        for bridged in ai_result.sections:
            schema = registry.get_section_schema(bridged.schema_id)
            if schema is None:
                _log_warning(f"Skipping generated section with unknown schema '{bridged.schema_id}'")
                continue

            items = []
            for raw in bridged.items:
                data = AIDataBridge.validate_item_data(raw, schema)
                if not data:
                    continue
                item = new_item(schema.id, data)
                item.metadata.ai_generated = True
                items.append(item)

            if schema.is_single and len(items) > 1:
                _log_warning(f"Schema '{schema.id}' holds one item; keeping the first of {len(items)}")
                items = items[:1]

            sections.append(
                ResumeSection(
                    id=generate_id(schema.id),
                    schema_id=schema.id,
                    title=schema.name,
                    items=items,
                )
            )

        return ResumeDocument(personal_details=copy.deepcopy(personal_details or {}), sections=sections)

    @staticmethod
    def from_internal(section: ResumeSection, registry) -> AIBridgedSection:
        """
        Narrow a section to the fields worth sending to the generator.

        With a role map, only fields mapped to a core role (title, organization,
        description, dates, level, skills) are sent. Without one, every non-empty
        field except "id". Items with nothing to send are left out.
        """
        role_map = registry.get_role_map(section.schema_id)
        bridged = AIBridgedSection(schema_id=section.schema_id)

        for item in section.items:
            if role_map is not None:
                fields = {
                    field_id: copy.deepcopy(value)
                    for field_id, value in item.data.items()
                    if role_map.role_of(field_id) in CORE_ROLES and not is_empty_value(value)
                }
            else:
                fields = {
                    field_id: copy.deepcopy(value)
                    for field_id, value in item.data.items()
                    if field_id != "id" and not is_empty_value(value)
                }
            if fields:
                bridged.items.append(fields)
                bridged.item_ids.append(item.id)

        return bridged

    @staticmethod
    def merge_back(
        document: ResumeDocument,
        section_id: str,
        items_to_merge: List[Union[ItemPatch, Dict[str, Any]]],
    ) -> ResumeDocument:
        """
        Apply field-level patches to items of one section.

        Only the fields present in each patch change. Other fields, other items, item
        order and other sections are untouched. Patched items get a new updated_at
        and ai_improved; the section is marked ai_optimized.

        Returns:
            A new document; the input document is never mutated
        """
        merged = copy.deepcopy(document)
        section = merged.get_section(section_id)
        if section is None:
            _log_warning(f"Cannot merge into missing section '{section_id}'")
            return merged

        patched_any = False
        for patch in items_to_merge:
            if isinstance(patch, dict):
                patch = ItemPatch(id=str(patch.get("id")), data=patch.get("data") or {})
            item: Optional[SectionItem] = section.get_item(patch.id)
            if item is None:
                _log_warning(f"Cannot merge into missing item '{patch.id}' of section '{section_id}'")
                continue
            if not patch.data:
                continue

            for field_id, value in patch.data.items():
                item.data[field_id] = copy.deepcopy(value)
            item.touch()
            item.metadata.ai_improved = True
            patched_any = True

        if patched_any:
            section.metadata.ai_optimized = True
        return merged

    @staticmethod
    def build_schema_instruction(registry, schema_id: str) -> str:
        """
        Describe the JSON shape of one section type's items for a prompt.

        Returns "" for an unknown schema.
        """
        schema = registry.get_section_schema(schema_id)
        if schema is None:
            return ""

        definitions = []
        for f in schema.fields:
            description = f.ui_props.placeholder or f"The {f.label} for an item"
            if f.type == FieldType.TEXTAREA and "description" in f.id.lower():
                description += " (use bullet points with \\n- )"
            definitions.append(f'    "{f.id}": "{_describe_type(f)}" // {description}')

        cardinality = "exactly one object" if schema.is_single else "any number of objects"
        return (
            f'- For a section with "schemaId": "{schema.id}" ({cardinality}), '
            f'each object in its "items" array must have the following keys:\n'
            "  {\n" + ",\n".join(definitions) + "\n  }"
        )

    @staticmethod
    def build_schema_instructions(registry) -> str:
        """Schema instructions for every registered section type."""
        instructions = [
            AIDataBridge.build_schema_instruction(registry, schema.id)
            for schema in registry.get_all_section_schemas()
        ]
        return "\n".join(instruction for instruction in instructions if instruction)


def _describe_type(f) -> str:
    options = f.ui_props.options
    if f.type == FieldType.DATE:
        return "string (e.g., YYYY-MM or Month YYYY)"
    if f.type == FieldType.SELECT and options:
        if f.ui_props.allow_custom:
            return f"string (a suggested value from [{', '.join(options)}] or your own)"
        return f"string (must be one of: {', '.join(options)})"
    if f.type == FieldType.MULTISELECT:
        if options and not f.ui_props.allow_custom:
            return f"array of strings (each one of: {', '.join(options)})"
        return "array of strings"
    if f.type == FieldType.ARRAY:
        return "array"
    if f.type == FieldType.OBJECT:
        return "object"
    return "string"
