"""
Section Schema Data Structures

Defines the declarative description of section types: fields, validation rules,
AI hints and UI hints, plus the per-schema role maps that give fields a generic
meaning. Instances are built from the YAML catalog under types/ by catalog.py.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from scribe.contexts.schema.field_types import (
    AITask,
    Cardinality,
    FieldRole,
    FieldType,
    Priority,
    ValidationKind,
)


@dataclass
class ValidationRule:
    """
    One validation constraint on a field value.

    Attributes:
        kind: Which check to run
        value: Parameter for the check (length bound or regex); unused for required
        message: Human-readable failure message
    """

    kind: ValidationKind
    value: Any = None
    message: str = ""


@dataclass
class AIHints:
    """
    AI-related hints for one field.

    Attributes:
        context_builders: Builder id per AI task (improve, autocomplete)
        improvement_prompts: Suggested free-form improvement instructions
        autocomplete_enabled: Whether inline autocomplete is offered
        priority: Relative importance when improving a whole document
    """

    context_builders: Dict[AITask, str] = field(default_factory=dict)
    improvement_prompts: List[str] = field(default_factory=list)
    autocomplete_enabled: bool = False
    priority: Priority = Priority.MEDIUM


@dataclass
class UIProps:
    placeholder: Optional[str] = None
    rows: Optional[int] = None
    options: List[str] = field(default_factory=list)
    allow_custom: bool = False  # combobox: free entry besides options
    markdown_enabled: bool = False


@dataclass
class FieldSchema:
    """
    Declarative description of one editable field.

    The id is stable for the lifetime of the schema version. Renaming a field
    requires a new schema version.
    """

    id: str
    type: FieldType
    label: str
    required: bool = False
    validation: List[ValidationRule] = field(default_factory=list)
    ai_hints: Optional[AIHints] = None
    ui_props: UIProps = field(default_factory=UIProps)

    @property
    def markdown_enabled(self) -> bool:
        return self.ui_props.markdown_enabled

    def builder_for(self, task: AITask) -> Optional[str]:
        """Context builder id for an AI task, or None if the field has none."""
        if self.ai_hints is None:
            return None
        return self.ai_hints.context_builders.get(AITask(task))


@dataclass
class AIContextConfig:
    section_summary_builder: Optional[str] = None
    item_summary_builder: Optional[str] = None
    batch_improvement_supported: bool = False


@dataclass
class UIConfig:
    """
    Display hints consumed by editors and renderers.

    Attributes:
        icon: Icon name shown next to the section
        default_render_type: Render hint passed through to the view model
        add_button_text: Label of the "add item" control
        item_display_template: Pattern like "{jobTitle} at {company}" for item titles
        sortable: Whether items may be reordered
        collapsible: Whether the section can be collapsed in the editor
    """

    icon: Optional[str] = None
    default_render_type: str = "list"
    add_button_text: Optional[str] = None
    item_display_template: Optional[str] = None
    sortable: bool = False
    collapsible: bool = False


@dataclass
class SectionSchema:
    """
    Declarative description of one section type.

    Attributes:
        id: Stable key (e.g. "experience")
        name: Display name
        cardinality: single (exactly one item) or list (zero or more)
        fields: Ordered field schemas
        ai_context: Section- and item-level builder ids
        ui_config: Display hints
        version: Schema version string
    """

    id: str
    name: str
    cardinality: Cardinality
    fields: List[FieldSchema] = field(default_factory=list)
    ai_context: AIContextConfig = field(default_factory=AIContextConfig)
    ui_config: UIConfig = field(default_factory=UIConfig)
    version: str = "1.0.0"

    @property
    def field_ids(self) -> List[str]:
        return [f.id for f in self.fields]

    @property
    def is_single(self) -> bool:
        return self.cardinality == Cardinality.SINGLE

    def get_field(self, field_id: str) -> Optional[FieldSchema]:
        for f in self.fields:
            if f.id == field_id:
                return f
        return None


@dataclass
class RoleMap:
    """
    Authored mapping from a schema's field ids to semantic roles.

    Role maps are never inferred from data. Generic code (renderers, the AI bridge)
    uses them for deterministic field lookups across schemas.
    """

    schema_id: str
    schema_version: str
    field_mappings: Dict[str, FieldRole] = field(default_factory=dict)

    def role_of(self, field_id: str) -> Optional[FieldRole]:
        return self.field_mappings.get(field_id)

    def fields_for_role(self, role: FieldRole) -> List[str]:
        """Field ids mapped to role, in mapping order."""
        role = FieldRole(role)
        return [field_id for field_id, mapped in self.field_mappings.items() if mapped == role]
