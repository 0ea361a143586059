"""
Closed vocabularies shared by the schema catalog, role maps and AI operations.

All enums subclass str so members compare equal to the plain strings that
appear in YAML schema files and exported documents.
"""

from enum import Enum
from typing import Optional


class FieldType(str, Enum):
    """Editable field kinds. Determines the value shape stored in item data."""

    TEXT = "text"  # short single-line text
    TEXTAREA = "textarea"  # long, possibly markdown text
    DATE = "date"
    URL = "url"
    EMAIL = "email"
    PHONE = "phone"
    SELECT = "select"  # single choice
    MULTISELECT = "multiselect"  # list of choices
    OBJECT = "object"  # nested mapping
    ARRAY = "array"  # list of arbitrary values

    @property
    def is_scalar_text(self) -> bool:
        return self in _SCALAR_TEXT_TYPES

    @property
    def is_list(self) -> bool:
        return self in (FieldType.MULTISELECT, FieldType.ARRAY)


_SCALAR_TEXT_TYPES = {
    FieldType.TEXT,
    FieldType.TEXTAREA,
    FieldType.DATE,
    FieldType.URL,
    FieldType.EMAIL,
    FieldType.PHONE,
    FieldType.SELECT,
}


class FieldRole(str, Enum):
    """Semantic role of a field, independent of its schema-specific id."""

    TITLE = "title"
    ORGANIZATION = "organization"
    DESCRIPTION = "description"
    START_DATE = "startDate"
    END_DATE = "endDate"
    LOCATION = "location"
    URL = "url"
    IDENTIFIER = "identifier"
    SKILLS = "skills"
    LEVEL = "level"
    OTHER = "other"


# Roles sent to the generation backend for batch work
CORE_ROLES = (
    FieldRole.TITLE,
    FieldRole.ORGANIZATION,
    FieldRole.DESCRIPTION,
    FieldRole.START_DATE,
    FieldRole.END_DATE,
    FieldRole.LEVEL,
    FieldRole.SKILLS,
)


class Cardinality(str, Enum):
    SINGLE = "single"  # exactly one item
    LIST = "list"  # zero or more items


class AITask(str, Enum):
    """Field-scoped AI tasks that select a context builder."""

    IMPROVE = "improve"
    AUTOCOMPLETE = "autocomplete"


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ValidationKind(str, Enum):
    REQUIRED = "required"
    MIN_LENGTH = "minLength"
    MAX_LENGTH = "maxLength"
    PATTERN = "pattern"


def parse_enum(enum_cls, value, default: Optional[Enum] = None):
    """
    Convert a raw string to a member of enum_cls.

    Args:
        enum_cls: Target Enum class
        value: Raw value (member, string, or None)
        default: Returned when value is None

    Raises:
        ValueError: If value is not a valid member
    """
    if value is None:
        return default
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        valid = ", ".join(member.value for member in enum_cls)
        raise ValueError(f"Invalid {enum_cls.__name__} '{value}'. Valid values: {valid}")
