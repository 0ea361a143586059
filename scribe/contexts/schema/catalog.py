"""
Schema Catalog

Loads section schemas from the types directory. Each section type lives in its
own directory:

    types/<schema_id>/schema.yaml     # fields, AI hints, UI hints
    types/<schema_id>/role_map.yaml   # field id -> semantic role (see role_maps.py)

Adding a section type means adding one directory; no engine code changes.
Structural authoring errors raise SchemaDefinitionError at load time.
"""

import re
from pathlib import Path
from typing import Any, Dict, List, Optional

from omegaconf import OmegaConf

from scribe.contexts.schema.exceptions import SchemaDefinitionError
from scribe.contexts.schema.field_types import (
    AITask,
    Cardinality,
    FieldType,
    Priority,
    ValidationKind,
    parse_enum,
)
from scribe.contexts.schema.logger import _log_debug
from scribe.contexts.schema.schema_data_structures import (
    AIContextConfig,
    AIHints,
    FieldSchema,
    SectionSchema,
    UIConfig,
    UIProps,
    ValidationRule,
)
from scribe.utils.config import SCHEMA_TYPES_PATH

SCHEMA_FILENAME = "schema.yaml"

# Keys accepted in schema.yaml, per level
SECTION_KEYS = {"id", "name", "cardinality", "version", "fields", "ai_context", "ui_config"}
FIELD_KEYS = {"id", "type", "label", "required", "validation", "ai_hints", "ui_props"}
AI_HINT_KEYS = {"context_builders", "improvement_prompts", "autocomplete_enabled", "priority"}
UI_PROP_KEYS = {"placeholder", "rows", "options", "allow_custom", "markdown_enabled"}
AI_CONTEXT_KEYS = {"section_summary_builder", "item_summary_builder", "batch_improvement_supported"}
UI_CONFIG_KEYS = {
    "icon",
    "default_render_type",
    "add_button_text",
    "item_display_template",
    "sortable",
    "collapsible",
}


def load_yaml(path: Path) -> Dict[str, Any]:
    """Load a YAML file into a plain dict with interpolations resolved."""
    config = OmegaConf.load(path)
    return OmegaConf.to_container(config, resolve=True) or {}


def _check_keys(data: dict, allowed: set, where: str, schema_id: str, source_path) -> None:
    unknown = set(data) - allowed
    if unknown:
        raise SchemaDefinitionError(
            f"Unknown keys in {where}: {', '.join(sorted(unknown))}",
            schema_id=schema_id,
            source_path=source_path,
        )


def _enum_or_error(enum_cls, value, schema_id, source_path, default=None):
    try:
        return parse_enum(enum_cls, value, default)
    except ValueError as e:
        raise SchemaDefinitionError(str(e), schema_id=schema_id, source_path=source_path)


def _parse_validation(raw_rules: list, field_id: str, schema_id: str, source_path) -> List[ValidationRule]:
    rules = []
    for raw in raw_rules or []:
        kind = _enum_or_error(ValidationKind, raw.get("kind"), schema_id, source_path)
        value = raw.get("value")

        if kind == ValidationKind.PATTERN:
            try:
                re.compile(str(value))
            except re.error as e:
                raise SchemaDefinitionError(
                    f"Field '{field_id}' has an invalid pattern {value!r}: {e}",
                    schema_id=schema_id,
                    source_path=source_path,
                )
        elif kind in (ValidationKind.MIN_LENGTH, ValidationKind.MAX_LENGTH):
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                raise SchemaDefinitionError(
                    f"Field '{field_id}' {kind.value} needs a non-negative integer, got {value!r}",
                    schema_id=schema_id,
                    source_path=source_path,
                )

        rules.append(ValidationRule(kind=kind, value=value, message=raw.get("message", "")))
    return rules


def _parse_ai_hints(raw: Optional[dict], schema_id: str, source_path) -> Optional[AIHints]:
    if raw is None:
        return None
    _check_keys(raw, AI_HINT_KEYS, "ai_hints", schema_id, source_path)

    builders = {}
    for task, builder_id in (raw.get("context_builders") or {}).items():
        builders[_enum_or_error(AITask, task, schema_id, source_path)] = str(builder_id)

    return AIHints(
        context_builders=builders,
        improvement_prompts=list(raw.get("improvement_prompts") or []),
        autocomplete_enabled=bool(raw.get("autocomplete_enabled", False)),
        priority=_enum_or_error(
            Priority, raw.get("priority"), schema_id, source_path, default=Priority.MEDIUM
        ),
    )


def _parse_field(raw: dict, schema_id: str, source_path) -> FieldSchema:
    if "id" not in raw or "type" not in raw:
        raise SchemaDefinitionError(
            f"Field definition missing 'id' or 'type': {raw}",
            schema_id=schema_id,
            source_path=source_path,
        )
    field_id = str(raw["id"])
    _check_keys(raw, FIELD_KEYS, f"field '{field_id}'", schema_id, source_path)

    ui_raw = raw.get("ui_props") or {}
    _check_keys(ui_raw, UI_PROP_KEYS, f"ui_props of '{field_id}'", schema_id, source_path)
    ui_props = UIProps(
        placeholder=ui_raw.get("placeholder"),
        rows=ui_raw.get("rows"),
        options=[str(option) for option in ui_raw.get("options") or []],
        allow_custom=bool(ui_raw.get("allow_custom", False)),
        markdown_enabled=bool(ui_raw.get("markdown_enabled", False)),
    )

    field_type = _enum_or_error(FieldType, raw["type"], schema_id, source_path)
    if field_type == FieldType.SELECT and not ui_props.options and not ui_props.allow_custom:
        raise SchemaDefinitionError(
            f"Select field '{field_id}' declares no options and does not allow custom values",
            schema_id=schema_id,
            source_path=source_path,
        )

    return FieldSchema(
        id=field_id,
        type=field_type,
        label=str(raw.get("label", field_id)),
        required=bool(raw.get("required", False)),
        validation=_parse_validation(raw.get("validation"), field_id, schema_id, source_path),
        ai_hints=_parse_ai_hints(raw.get("ai_hints"), schema_id, source_path),
        ui_props=ui_props,
    )


def section_schema_from_dict(data: Dict[str, Any], source_path: Optional[Path] = None) -> SectionSchema:
    """
    Build a SectionSchema from its dict form (as found in schema.yaml).

    Args:
        data: Parsed schema definition
        source_path: File the definition came from, for error messages

    Returns:
        SectionSchema

    Raises:
        SchemaDefinitionError: On missing keys, unknown keys, invalid enum values,
            duplicate field ids or invalid validation rules
    """
    schema_id = data.get("id")
    if not schema_id:
        raise SchemaDefinitionError("Schema definition has no 'id'", source_path=source_path)
    schema_id = str(schema_id)

    _check_keys(data, SECTION_KEYS, "section schema", schema_id, source_path)
    for required_key in ("name", "cardinality", "fields"):
        if required_key not in data:
            raise SchemaDefinitionError(
                f"Missing required key '{required_key}'", schema_id=schema_id, source_path=source_path
            )

    fields = [_parse_field(raw, schema_id, source_path) for raw in data["fields"] or []]
    if not fields:
        raise SchemaDefinitionError("Schema declares no fields", schema_id=schema_id, source_path=source_path)

    seen = set()
    for f in fields:
        if f.id in seen:
            raise SchemaDefinitionError(
                f"Duplicate field id '{f.id}'", schema_id=schema_id, source_path=source_path
            )
        seen.add(f.id)

    ai_raw = data.get("ai_context") or {}
    _check_keys(ai_raw, AI_CONTEXT_KEYS, "ai_context", schema_id, source_path)
    ui_raw = data.get("ui_config") or {}
    _check_keys(ui_raw, UI_CONFIG_KEYS, "ui_config", schema_id, source_path)

    return SectionSchema(
        id=schema_id,
        name=str(data["name"]),
        cardinality=_enum_or_error(Cardinality, data["cardinality"], schema_id, source_path),
        fields=fields,
        ai_context=AIContextConfig(
            section_summary_builder=ai_raw.get("section_summary_builder"),
            item_summary_builder=ai_raw.get("item_summary_builder"),
            batch_improvement_supported=bool(ai_raw.get("batch_improvement_supported", False)),
        ),
        ui_config=UIConfig(**ui_raw),
        version=str(data.get("version", "1.0.0")),
    )


def load_section_schema(schema_dir: Path) -> SectionSchema:
    """
    Load the schema.yaml of one type directory.

    Raises:
        SchemaDefinitionError: If the file is missing, malformed, or its id does not
            match the directory name
    """
    schema_path = Path(schema_dir) / SCHEMA_FILENAME
    if not schema_path.exists():
        raise SchemaDefinitionError(f"Missing {SCHEMA_FILENAME}", source_path=schema_path)

    schema = section_schema_from_dict(load_yaml(schema_path), source_path=schema_path)
    if schema.id != Path(schema_dir).name:
        raise SchemaDefinitionError(
            f"Schema id does not match its directory name '{Path(schema_dir).name}'",
            schema_id=schema.id,
            source_path=schema_path,
        )
    return schema


def discover_schema_dirs(types_path: Optional[Path] = None) -> List[Path]:
    """Type directories containing a schema.yaml, sorted by name."""
    types_path = Path(types_path or SCHEMA_TYPES_PATH)
    if not types_path.exists():
        return []
    return sorted(p for p in types_path.iterdir() if p.is_dir() and (p / SCHEMA_FILENAME).exists())


def load_schema_catalog(types_path: Optional[Path] = None) -> Dict[str, SectionSchema]:
    """
    Load every section schema under types_path.

    Args:
        types_path: Directory of type directories (default: SCRIBE_SCHEMA_TYPES_PATH)

    Returns:
        Dict mapping schema id to SectionSchema, in directory-name order
    """
    catalog = {}
    for schema_dir in discover_schema_dirs(types_path):
        schema = load_section_schema(schema_dir)
        catalog[schema.id] = schema
        _log_debug(f"Loaded schema '{schema.id}' ({len(schema.fields)} fields)")
    return catalog
