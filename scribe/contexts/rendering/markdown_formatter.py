"""
Markdown formatter for renderable views.

A reference consumer of the view model. Items are headed by their role-derived
title, organization and date range; fields not covered by those roles are written
beneath. Section layout follows the schema's default render type.
"""

from typing import List, Optional

from scribe.contexts.rendering.role_utils import (
    get_item_date_range,
    get_item_organization,
    get_item_title,
)
from scribe.contexts.rendering.view_model import (
    RenderableField,
    RenderableItem,
    RenderableResume,
    RenderableSection,
)
from scribe.contexts.schema.field_types import FieldRole
from scribe.contexts.schema.schema_data_structures import RoleMap

# Roles already shown in an item heading
HEADING_ROLES = (
    FieldRole.TITLE,
    FieldRole.ORGANIZATION,
    FieldRole.START_DATE,
    FieldRole.END_DATE,
)

CONTACT_KEYS = ("email", "phone", "location", "website", "linkedin", "github")


def _field_text(f: RenderableField) -> str:
    if isinstance(f.value, tuple):
        return ", ".join(str(v) for v in f.value)
    return str(f.value).strip()


def _heading_field_ids(role_map: Optional[RoleMap]) -> set:
    if role_map is None:
        return set()
    return {field_id for role in HEADING_ROLES for field_id in role_map.fields_for_role(role)}


def _format_item(item: RenderableItem, role_map: Optional[RoleMap]) -> List[str]:
    lines = []
    title = get_item_title(item, role_map)
    organization = get_item_organization(item, role_map)
    date_range = get_item_date_range(item, role_map)

    heading = " | ".join(part for part in (title, organization) if part)
    if heading:
        lines.append(f"### {heading}")
    if date_range:
        lines.append(f"*{date_range}*")

    skip = _heading_field_ids(role_map)
    for f in item.fields:
        if f.key in skip:
            continue
        text = _field_text(f)
        if f.markdown_enabled or "\n" in text:
            lines.append(text)
        else:
            lines.append(f"**{f.label}:** {text}")
    return lines


def _format_badge_section(section: RenderableSection) -> List[str]:
    """One line per item: every field value joined."""
    lines = []
    for item in section.items:
        values = [_field_text(f) for f in item.fields]
        if values:
            lines.append(f"- {' | '.join(values)}")
    return lines


def format_section_markdown(section: RenderableSection, registry) -> str:
    lines = [f"## {section.title}", ""]
    if section.default_render_type == "badge-list":
        lines.extend(_format_badge_section(section))
    else:
        role_map = registry.get_role_map(section.schema_id)
        for item in section.items:
            item_lines = _format_item(item, role_map)
            if item_lines:
                lines.extend(item_lines)
                lines.append("")
    return "\n".join(lines).rstrip() + "\n"


def format_resume_markdown(view: RenderableResume, registry) -> str:
    """
    Format a renderable view as a markdown document.

    Args:
        view: RenderableResume produced by transform_to_renderable_view
        registry: SchemaRegistry used for role map lookups

    Returns:
        Markdown text
    """
    parts = []
    details = view.personal_details
    full_name = details.get("fullName") or details.get("name")
    if full_name:
        parts.append(f"# {full_name}")
    if details.get("jobTitle"):
        parts.append(f"**{details['jobTitle']}**")
    contact = [str(details[key]) for key in CONTACT_KEYS if details.get(key)]
    if contact:
        parts.append(" · ".join(contact))
    if parts:
        parts = ["\n\n".join(parts) + "\n"]

    for section in view.sections:
        parts.append(format_section_markdown(section, registry))

    return "\n".join(parts)
