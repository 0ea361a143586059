"""
Role Map Catalog

Loads the role_map.yaml authored next to each schema.yaml. A role map assigns each
field at most one semantic role so generic code can find "the title" or "the
start date" of any item without knowing the schema's field ids.

Role maps are static data. A mapping that names a field the schema does not
declare is an authoring error and fails loading.
"""

from pathlib import Path
from typing import Any, Dict, Optional

from scribe.contexts.schema.catalog import load_yaml
from scribe.contexts.schema.exceptions import SchemaDefinitionError
from scribe.contexts.schema.field_types import FieldRole, parse_enum
from scribe.contexts.schema.schema_data_structures import RoleMap, SectionSchema

ROLE_MAP_FILENAME = "role_map.yaml"


def role_map_from_dict(
    data: Dict[str, Any],
    schema: Optional[SectionSchema] = None,
    source_path: Optional[Path] = None,
) -> RoleMap:
    """
    Build a RoleMap from its dict form and check it against its schema.

    Args:
        data: Parsed role map with schema_id, schema_version and field_mappings
        schema: Schema the map belongs to; when given, mappings are validated against it
        source_path: File the map came from, for error messages

    Raises:
        SchemaDefinitionError: On invalid roles or dangling field ids
    """
    schema_id = str(data.get("schema_id") or (schema.id if schema else ""))
    if not schema_id:
        raise SchemaDefinitionError("Role map has no 'schema_id'", source_path=source_path)

    mappings = {}
    for field_id, role in (data.get("field_mappings") or {}).items():
        try:
            mappings[str(field_id)] = parse_enum(FieldRole, role)
        except ValueError as e:
            raise SchemaDefinitionError(
                f"Field '{field_id}': {e}", schema_id=schema_id, source_path=source_path
            )

    role_map = RoleMap(
        schema_id=schema_id,
        schema_version=str(data.get("schema_version") or (schema.version if schema else "1.0.0")),
        field_mappings=mappings,
    )
    if schema is not None:
        validate_role_map(role_map, schema, source_path)
    return role_map


def validate_role_map(role_map: RoleMap, schema: SectionSchema, source_path: Optional[Path] = None) -> None:
    """
    Ensure a role map belongs to schema and references only declared fields.

    Raises:
        SchemaDefinitionError: On schema id mismatch or dangling mappings
    """
    if role_map.schema_id != schema.id:
        raise SchemaDefinitionError(
            f"Role map is for schema '{role_map.schema_id}'",
            schema_id=schema.id,
            source_path=source_path,
        )

    declared = set(schema.field_ids)
    dangling = [field_id for field_id in role_map.field_mappings if field_id not in declared]
    if dangling:
        raise SchemaDefinitionError(
            f"Role map references undeclared fields: {', '.join(dangling)}",
            schema_id=schema.id,
            source_path=source_path,
        )


def load_role_map(schema_dir: Path, schema: SectionSchema) -> Optional[RoleMap]:
    """Load role_map.yaml from a type directory. Returns None if the schema has none."""
    path = Path(schema_dir) / ROLE_MAP_FILENAME
    if not path.exists():
        return None
    return role_map_from_dict(load_yaml(path), schema=schema, source_path=path)
