"""Custom exceptions for the schema context."""

from pathlib import Path
from typing import Any, Optional


class SchemaDefinitionError(ValueError):
    """
    Exception raised when an authored section schema or role map is structurally invalid.

    Attributes:
        message: Error description
        schema_id: Schema being loaded, if known
        source_path: YAML file that defines the schema, if loaded from disk
    """

    def __init__(
        self,
        message: str,
        schema_id: Optional[str] = None,
        source_path: Optional[Path] = None,
    ):
        self.message = message
        self.schema_id = schema_id
        self.source_path = source_path

        parts = [message]
        if schema_id:
            parts.append(f"Schema: {schema_id}")
        if source_path:
            parts.append(f"Defined in: {source_path}")

        super().__init__("\n".join(parts))


class FieldValueError(ValueError):
    """
    Exception raised when a value does not fit its field schema.

    Raised at the boundary where external data (AI output, imported documents)
    enters the system. Callers drop the offending field and keep the rest.

    Attributes:
        field_id: Field the value was meant for
        value: The rejected value
        reason: Why it was rejected
    """

    def __init__(self, field_id: str, value: Any, reason: str):
        self.field_id = field_id
        self.value = value
        self.reason = reason

        shown = repr(value)
        if len(shown) > 80:
            shown = shown[:80] + "..."
        super().__init__(f"Invalid value for field '{field_id}': {reason} (got {shown})")
