"""
Renderable View Model

Immutable, template-agnostic projection of a document. Produced only by the data
transformer; consumed by renderers. Carries no schema objects and never contains
empty fields, so renderers can treat presence as meaningful content.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple


def freeze(value: Any) -> Any:
    """Recursively convert lists to tuples and dicts to read-only mappings."""
    if isinstance(value, dict):
        return MappingProxyType({key: freeze(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(item) for item in value)
    return value


@dataclass(frozen=True)
class RenderableField:
    key: str
    label: str
    value: Any
    markdown_enabled: bool = False


@dataclass(frozen=True)
class RenderableItem:
    id: str
    fields: Tuple[RenderableField, ...] = ()

    def get(self, key: str) -> Optional[RenderableField]:
        for f in self.fields:
            if f.key == key:
                return f
        return None


@dataclass(frozen=True)
class RenderableSection:
    """
    One visible section, ready for display.

    Attributes:
        id: Section id from the document
        title: User-facing section title
        schema_id: Section type, for renderers that specialise per type
        default_render_type: Render hint from the schema (timeline, badge-list, ...)
        items: Items in document order
    """

    id: str
    title: str
    schema_id: str
    default_render_type: str
    items: Tuple[RenderableItem, ...] = ()


@dataclass(frozen=True)
class RenderableResume:
    personal_details: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    sections: Tuple[RenderableSection, ...] = ()
