"""
AI Data Structures

Inputs and results of the AI operations exposed by SchemaRegistry.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from scribe.contexts.ai.bridge import ItemPatch
from scribe.contexts.document.document_data_structure import ResumeDocument
from scribe.contexts.schema.field_types import AITask
from scribe.utils.timestamp import now_iso


@dataclass
class AIContextPayload:
    """
    Request for prompt context around one field (or one section).

    Attributes:
        document: Document being edited
        section_id: Section the request is scoped to
        task: improve or autocomplete; selects the field's context builder
        field_id: Field being edited, if the request is field-scoped
        item_id: Item being edited; optional for single-cardinality sections
        input_text: Live, uncommitted text of the field being edited
    """

    document: ResumeDocument
    section_id: str
    task: AITask = AITask.IMPROVE
    field_id: Optional[str] = None
    item_id: Optional[str] = None
    input_text: Optional[str] = None


@dataclass
class StructuredAIContext:
    current_item_context: str = ""
    other_sections_context: str = ""
    user_job_title: Optional[str] = None
    user_job_info: Optional[str] = None
    user_bio: Optional[str] = None

    def to_prompt_vars(self) -> Dict[str, Any]:
        """Context as template variables for prompt rendering."""
        return {
            "current_item_context": self.current_item_context,
            "other_sections_context": self.other_sections_context,
            "user_job_title": self.user_job_title,
            "user_job_info": self.user_job_info,
            "user_bio": self.user_bio,
        }


@dataclass
class BatchImprovementResult:
    """
    Result of improving every item of a section at once.

    On failure document is None and the caller's document was not changed.

    Attributes:
        success: Whether improvements were merged
        document: New document with improvements merged (success only)
        improved_items: Patches that were applied
        summary: Generator's description of the changes
        error: Why the operation failed
    """

    success: bool
    document: Optional[ResumeDocument] = None
    improved_items: List[ItemPatch] = field(default_factory=list)
    summary: str = ""
    error: Optional[str] = None


@dataclass
class DocumentReview:
    overall_quality: str
    suggestions: List[str] = field(default_factory=list)
    reviewed_at: str = field(default_factory=now_iso)

    @classmethod
    def from_output(cls, output: Any) -> Optional["DocumentReview"]:
        """Build from generator output; None if it has no usable content."""
        if not isinstance(output, dict):
            return None

        quality = output.get("overallQuality") or output.get("overall_quality") or ""
        raw_suggestions = output.get("suggestions")
        if not isinstance(raw_suggestions, list):
            raw_suggestions = []

        suggestions = []
        for suggestion in raw_suggestions:
            if isinstance(suggestion, dict):
                suggestion = suggestion.get("suggestion") or suggestion.get("text") or ""
            if isinstance(suggestion, str) and suggestion.strip():
                suggestions.append(suggestion.strip())

        if not str(quality).strip() and not suggestions:
            return None
        return cls(overall_quality=str(quality).strip(), suggestions=suggestions)
