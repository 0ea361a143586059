"""
Role-based field lookups for renderers.

Renderers ask for "the title of this item" rather than "the jobTitle field", so a
single template works for any section schema. Lookups go through the schema's
authored role map only; a schema without a role map yields no role matches.

Items may be RenderableItem instances or plain data dicts.
"""

from typing import Any, List, Optional, Union

from scribe.contexts.rendering.view_model import RenderableItem
from scribe.contexts.schema.field_types import FieldRole
from scribe.contexts.schema.field_values import is_empty_value
from scribe.contexts.schema.schema_data_structures import RoleMap

ItemLike = Union[RenderableItem, dict]


def _value_of(item: ItemLike, field_id: str) -> Any:
    if isinstance(item, RenderableItem):
        rendered = item.get(field_id)
        return rendered.value if rendered else None
    return item.get(field_id)


def pick_field_by_role(item: ItemLike, role: FieldRole, role_map: Optional[RoleMap]) -> Any:
    """
    Value of the first non-empty field mapped to role.

    Args:
        item: RenderableItem or item data dict
        role: Semantic role to look up
        role_map: Role map of the item's schema (None means no matches)

    Returns:
        Field value, or None
    """
    if role_map is None:
        return None
    for field_id in role_map.fields_for_role(role):
        value = _value_of(item, field_id)
        if not is_empty_value(value):
            return value
    return None


def pick_fields_by_role(item: ItemLike, role: FieldRole, role_map: Optional[RoleMap]) -> List[Any]:
    """Values of every non-empty field mapped to role, in role map order."""
    if role_map is None:
        return []
    values = []
    for field_id in role_map.fields_for_role(role):
        value = _value_of(item, field_id)
        if not is_empty_value(value):
            values.append(value)
    return values


def _as_text(value: Any) -> str:
    if is_empty_value(value):
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    return str(value).strip()


def get_item_title(item: ItemLike, role_map: Optional[RoleMap]) -> str:
    return _as_text(pick_field_by_role(item, FieldRole.TITLE, role_map))


def get_item_organization(item: ItemLike, role_map: Optional[RoleMap]) -> str:
    return _as_text(pick_field_by_role(item, FieldRole.ORGANIZATION, role_map))


def get_item_date_range(item: ItemLike, role_map: Optional[RoleMap]) -> str:
    """
    "start - end", "start - Present" when only a start date is set, the end date
    alone when only an end date is set, otherwise "".
    """
    start = _as_text(pick_field_by_role(item, FieldRole.START_DATE, role_map))
    end = _as_text(pick_field_by_role(item, FieldRole.END_DATE, role_map))
    if start and end:
        return f"{start} - {end}"
    if start:
        return f"{start} - Present"
    return end
