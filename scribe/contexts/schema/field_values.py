"""
Field value checks.

Item data is a mapping from field id to a value whose shape depends on the field's
FieldType. Values coming from outside (editor input, AI output, imported files) are
coerced once, at the boundary; everything after that trusts the data.
"""

import re
from typing import Any, Dict, List, Optional

from scribe.contexts.schema.exceptions import FieldValueError
from scribe.contexts.schema.field_types import FieldType, ValidationKind
from scribe.contexts.schema.logger import _log_debug, _log_warning
from scribe.contexts.schema.schema_data_structures import FieldSchema, SectionSchema

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+$")


def is_empty_value(value: Any) -> bool:
    """True for None, blank strings and empty collections."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


def coerce_field_value(field: FieldSchema, value: Any) -> Any:
    """
    Coerce a raw value to the shape its field type expects.

    Numbers are accepted for text-like fields and stringified (models often return
    a bare 2021 for a year). Everything else must already have the right shape.

    Args:
        field: Target field schema
        value: Raw value

    Returns:
        Value in canonical shape

    Raises:
        FieldValueError: If the value cannot represent this field type
    """
    field_type = field.type

    if field_type.is_scalar_text:
        if isinstance(value, bool):
            raise FieldValueError(field.id, value, f"expected text for {field_type.value} field")
        if isinstance(value, (int, float)):
            value = str(value)
        if not isinstance(value, str):
            raise FieldValueError(field.id, value, f"expected text for {field_type.value} field")

        if field_type == FieldType.SELECT:
            _check_option(field, value)
        elif field_type == FieldType.EMAIL and not EMAIL_PATTERN.match(value.strip()):
            raise FieldValueError(field.id, value, "not an email address")
        elif field_type == FieldType.URL and any(ch.isspace() for ch in value.strip()):
            raise FieldValueError(field.id, value, "URL contains whitespace")
        return value

    if field_type == FieldType.MULTISELECT:
        if not isinstance(value, (list, tuple)):
            raise FieldValueError(field.id, value, "expected a list of choices")
        choices = list(value)
        for choice in choices:
            if not isinstance(choice, str):
                raise FieldValueError(field.id, value, "choices must be text")
            _check_option(field, choice)
        return choices

    if field_type == FieldType.ARRAY:
        if not isinstance(value, (list, tuple)):
            raise FieldValueError(field.id, value, "expected a list")
        return list(value)

    if field_type == FieldType.OBJECT:
        if not isinstance(value, dict):
            raise FieldValueError(field.id, value, "expected an object")
        return dict(value)

    raise FieldValueError(field.id, value, f"unsupported field type {field_type}")


def _check_option(field: FieldSchema, choice: str) -> None:
    options = field.ui_props.options
    if options and not field.ui_props.allow_custom and choice not in options:
        raise FieldValueError(field.id, choice, f"not one of the declared options {options}")


def check_validation_rules(field: FieldSchema, value: Any) -> Optional[str]:
    """
    Run the field's validation rules in order.

    Args:
        field: Field schema with validation rules
        value: Coerced value

    Returns:
        Message of the first failing rule, or None if all pass
    """
    for rule in field.validation:
        failed = False

        if rule.kind == ValidationKind.REQUIRED:
            failed = is_empty_value(value)
        elif rule.kind == ValidationKind.MIN_LENGTH:
            failed = _length(value) < int(rule.value)
        elif rule.kind == ValidationKind.MAX_LENGTH:
            failed = _length(value) > int(rule.value)
        elif rule.kind == ValidationKind.PATTERN:
            pattern = re.compile(str(rule.value))
            failed = any(not pattern.search(text) for text in _texts(value))

        if failed:
            return rule.message or f"{rule.kind.value} check failed"
    return None


def _length(value: Any) -> int:
    if value is None:
        return 0
    return len(value) if isinstance(value, (str, list, tuple, dict)) else len(str(value))


def _texts(value: Any) -> List[str]:
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    return [] if value is None else [str(value)]


def validate_field_value(field: FieldSchema, value: Any) -> Any:
    """
    Coerce a value and run its validation rules.

    Returns:
        Coerced value

    Raises:
        FieldValueError: On a shape mismatch or a failing validation rule
    """
    coerced = coerce_field_value(field, value)
    message = check_validation_rules(field, coerced)
    if message:
        raise FieldValueError(field.id, value, message)
    return coerced


def clean_item_data(raw: Dict[str, Any], schema: SectionSchema, check_rules: bool = True) -> Dict[str, Any]:
    """
    Keep only declared, non-empty, well-shaped fields of one item.

    Undeclared fields and values that fail coercion (or, with check_rules, a
    validation rule) are dropped; the rest of the item is kept.

    Args:
        raw: Field mapping from outside (generator output, editor prefill)
        schema: Section schema the item must follow
        check_rules: Also run each field's validation rules

    Returns:
        Cleaned field mapping (possibly empty)
    """
    cleaned = {}
    for field_id, value in raw.items():
        field_schema = schema.get_field(field_id)
        if field_schema is None:
            _log_debug(f"Dropped undeclared field '{field_id}' for schema '{schema.id}'")
            continue
        if is_empty_value(value):
            continue
        try:
            if check_rules:
                cleaned[field_id] = validate_field_value(field_schema, value)
            else:
                cleaned[field_id] = coerce_field_value(field_schema, value)
        except FieldValueError as e:
            _log_warning(f"Dropped field for schema '{schema.id}': {e}")
    return cleaned
