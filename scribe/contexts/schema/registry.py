"""
Schema Registry

Central service composing the schema catalog, role maps and context builders.
Owned by the application and passed to whoever needs it; tests build isolated
instances.

    registry = SchemaRegistry(config=load_ai_config(), generator=my_generator)
    context = registry.build_ai_context(AIContextPayload(document, "experience_1", ...))
    improved = await registry.improve_field(document, "experience_1", "description", ...)

The AI operations are thin orchestrators: build context, call the generator with
an output contract, hand results to the AI Data Bridge. An empty result means "no
suggestion"; backend failures surface as one GenerationError per operation.
"""

import copy
import re
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from scribe.contexts.ai.ai_data_structures import (
    AIContextPayload,
    BatchImprovementResult,
    DocumentReview,
    StructuredAIContext,
)
from scribe.contexts.ai.bridge import AIDataBridge, ItemPatch
from scribe.contexts.ai.generation import (
    CancellationToken,
    GenerationError,
    GenerationTask,
    Generator,
    LLMGenerator,
    OutputShape,
    call_generator,
)
from scribe.contexts.ai.logger import log_generation_result
from scribe.contexts.document import editing
from scribe.contexts.document.document_data_structure import (
    ResumeDocument,
    ResumeSection,
    SectionItem,
)
from scribe.contexts.schema.catalog import discover_schema_dirs, load_section_schema
from scribe.contexts.schema.context_builders import (
    DEFAULT_CONTEXT_BUILDERS,
    ContextBuilder,
    builder_key,
)
from scribe.contexts.schema.field_types import AITask
from scribe.contexts.schema.logger import _log_debug, _log_info, _log_warning
from scribe.contexts.schema.role_maps import load_role_map, validate_role_map
from scribe.contexts.schema.schema_data_structures import FieldSchema, RoleMap, SectionSchema
from scribe.utils.config import AIConfig
from scribe.utils.hashing import stable_hash

CacheKey = Tuple[str, str]

DISPLAY_PLACEHOLDER = re.compile(r"\{(\w+)\}")


def format_item_display(template: Optional[str], data: Dict[str, Any]) -> str:
    """
    Fill an item display template such as "{jobTitle} at {company}".

    Lists are joined with ", "; missing fields become empty strings.
    """
    if not template:
        return ""

    def _value(match) -> str:
        value = data.get(match.group(1))
        if isinstance(value, (list, tuple)):
            return ", ".join(str(v) for v in value)
        return "" if value is None else str(value)

    return DISPLAY_PLACEHOLDER.sub(_value, template).strip()


class SchemaRegistry:
    """
    Registry of section schemas, role maps and context builders, plus the AI
    operations built on them.

    Attributes:
        config: AIConfig with target job, bio, provider and timeout
        generator: Async generation backend; an LLMGenerator is created from config
            on first use if none is given
    """

    def __init__(
        self,
        config: Optional[AIConfig] = None,
        generator: Optional[Generator] = None,
        load_defaults: bool = True,
        types_path: Optional[Path] = None,
    ):
        """
        Initialize the registry.

        Args:
            config: AI configuration (default: AIConfig())
            generator: Generation backend
            load_defaults: Load the bundled schema catalog, role maps and builders
            types_path: Directory of schema type directories (default: SCRIBE_SCHEMA_TYPES_PATH)
        """
        self.config = config or AIConfig()
        self._generator = generator
        self._schemas: Dict[str, SectionSchema] = {}
        self._role_maps: Dict[str, RoleMap] = {}
        self._builders: Dict[str, ContextBuilder] = {}
        self._other_sections_cache: Dict[CacheKey, str] = {}

        if load_defaults:
            self.load_catalog(types_path)
            for builder_id, builder in DEFAULT_CONTEXT_BUILDERS.items():
                self.register_context_builder(builder_id, builder)

    def load_catalog(self, types_path: Optional[Path] = None) -> int:
        """
        Register every schema (and its role map) found under types_path.

        Returns:
            Number of schemas registered

        Raises:
            SchemaDefinitionError: On any authoring error in the catalog
        """
        count = 0
        for schema_dir in discover_schema_dirs(types_path):
            schema = load_section_schema(schema_dir)
            self.register_section_schema(schema)
            role_map = load_role_map(schema_dir, schema)
            if role_map is not None:
                self._role_maps[schema.id] = role_map
            count += 1
        _log_debug(f"Registered {count} section schemas")
        return count

    # --- Schema catalog ---

    def register_section_schema(self, schema: SectionSchema) -> None:
        """Register a schema. Registering an existing id replaces it."""
        if schema.id in self._schemas:
            _log_debug(f"Replacing schema '{schema.id}'")
        self._schemas[schema.id] = schema

    def get_section_schema(self, schema_id: str) -> Optional[SectionSchema]:
        return self._schemas.get(schema_id)

    def get_all_section_schemas(self) -> List[SectionSchema]:
        return list(self._schemas.values())

    def get_available_section_types(self) -> List[str]:
        return list(self._schemas.keys())

    def get_field_schema(self, schema_id: str, field_id: str) -> Optional[FieldSchema]:
        schema = self.get_section_schema(schema_id)
        return schema.get_field(field_id) if schema else None

    def get_ai_enabled_fields(self, schema_id: str) -> List[FieldSchema]:
        """Fields of a schema that offer autocomplete."""
        schema = self.get_section_schema(schema_id)
        if schema is None:
            return []
        return [f for f in schema.fields if f.ai_hints and f.ai_hints.autocomplete_enabled]

    def get_improvement_prompts(self, schema_id: str, field_id: str) -> List[str]:
        field_schema = self.get_field_schema(schema_id, field_id)
        if field_schema is None or field_schema.ai_hints is None:
            return []
        return list(field_schema.ai_hints.improvement_prompts)

    def supports_batch_improvement(self, schema_id: str) -> bool:
        schema = self.get_section_schema(schema_id)
        return bool(schema and schema.ai_context.batch_improvement_supported)

    def format_item_display(self, item: SectionItem) -> str:
        """Display title of an item from its schema's item_display_template."""
        schema = self.get_section_schema(item.schema_id)
        if schema is None:
            return ""
        return format_item_display(schema.ui_config.item_display_template, item.data)

    # --- Role maps ---

    def register_role_map(self, role_map: RoleMap) -> None:
        """
        Register a role map, replacing any existing one for the schema.

        Raises:
            SchemaDefinitionError: If the schema is registered and the map references
                fields it does not declare
        """
        schema = self.get_section_schema(role_map.schema_id)
        if schema is not None:
            validate_role_map(role_map, schema)
        self._role_maps[role_map.schema_id] = role_map

    def get_role_map(self, schema_id: str) -> Optional[RoleMap]:
        return self._role_maps.get(schema_id)

    # --- Context builders ---

    def register_context_builder(self, builder_id, builder: ContextBuilder) -> None:
        self._builders[builder_key(builder_id)] = builder

    def has_context_builder(self, builder_id) -> bool:
        return builder_id is not None and builder_key(builder_id) in self._builders

    def build_context(self, builder_id, data: Any, document: Optional[ResumeDocument]) -> str:
        """
        Run a context builder.

        Returns "" when builder_id is missing or names no registered builder, so a
        schema pointing at an unknown builder degrades to empty context.
        """
        if builder_id is None:
            return ""
        builder = self._builders.get(builder_key(builder_id))
        if builder is None:
            _log_debug(f"No context builder registered for '{builder_key(builder_id)}'")
            return ""
        return builder(data, document)

    def summarize_section(self, section: ResumeSection, document: Optional[ResumeDocument]) -> str:
        """Section-level summary via the schema's section_summary_builder ("" if none)."""
        schema = self.get_section_schema(section.schema_id)
        if schema is None:
            return ""
        return self.build_context(schema.ai_context.section_summary_builder, section, document)

    # --- AI context assembly ---

    def cache_key_for(self, document: ResumeDocument, section_id: str) -> CacheKey:
        """
        Cache key of the other-sections context for a request scoped to section_id.

        The hash covers the whole document except that section and the document
        metadata, so edits inside the section being edited keep hitting the cache
        while edits anywhere else miss.
        """
        data = document.to_dict()
        del data["metadata"]
        data["sections"] = [s for s in data["sections"] if s["id"] != section_id]
        return stable_hash(data, length=64), section_id

    def clear_cache(self) -> None:
        """Drop all cached context. Entries are never evicted individually."""
        self._other_sections_cache.clear()
        _log_debug("Context cache cleared")

    def is_cached(self, document: ResumeDocument, section_id: str) -> bool:
        """Check if the other-sections context for this request is cached."""
        return self.cache_key_for(document, section_id) in self._other_sections_cache

    def _other_sections_context(self, document: ResumeDocument, section_id: str) -> str:
        key = self.cache_key_for(document, section_id)
        cached = self._other_sections_cache.get(key)
        if cached is not None:
            return cached

        parts = []
        for section in document.sections:
            if section.id == section_id or not section.visible:
                continue
            summary = self.summarize_section(section, document)
            if summary:
                parts.append(summary)
        context = "\n\n".join(parts)
        self._other_sections_cache[key] = context
        return context

    def _user_job_title(self, document: ResumeDocument) -> Optional[str]:
        return self.config.target_job_title or document.personal_details.get("jobTitle") or None

    def build_ai_context(self, payload: AIContextPayload) -> StructuredAIContext:
        """
        Assemble prompt context for an AI request.

        current_item_context runs the field's builder for the task on a copy of the
        item data in which the edited field holds the live input text.
        other_sections_context summarises every other visible section and is cached.

        Returns:
            StructuredAIContext; empty if the section does not exist
        """
        document = payload.document
        section = document.get_section(payload.section_id)
        if section is None:
            _log_warning(f"AI context requested for unknown section '{payload.section_id}'")
            return StructuredAIContext()

        schema = self.get_section_schema(section.schema_id)
        current_item_context = ""

        if payload.field_id is not None and schema is not None:
            field_schema = schema.get_field(payload.field_id)
            builder_id = field_schema.builder_for(AITask(payload.task)) if field_schema else None
            if builder_id is not None:
                item = editing.resolve_item(section, payload.item_id, schema)
                item_data = copy.deepcopy(item.data) if item is not None else {}
                if payload.input_text is not None:
                    item_data[payload.field_id] = payload.input_text
                current_item_context = self.build_context(builder_id, item_data, document)
        elif schema is None:
            _log_warning(f"Section '{section.id}' uses unknown schema '{section.schema_id}'")

        return StructuredAIContext(
            current_item_context=current_item_context,
            other_sections_context=self._other_sections_context(document, section.id),
            user_job_title=self._user_job_title(document),
            user_job_info=self.config.target_job_info,
            user_bio=self.config.user_bio,
        )

    def stringify_document_for_review(self, document: ResumeDocument) -> str:
        """
        Plain-text rendering of the whole document for review-style prompts.

        Target job info, bio, a personal summary and every visible section summary,
        separated by "---" lines.
        """
        parts = []
        if self.config.target_job_info:
            parts.append(f"## Target Job Description\n{self.config.target_job_info}")
        if self.config.user_bio:
            parts.append(f"## User's Professional Bio\n{self.config.user_bio}")

        details = document.personal_details
        personal = [
            f"{label}: {details.get(key)}"
            for label, key in (("Job Title", "jobTitle"), ("Location", "address"))
            if details.get(key)
        ]
        if personal:
            parts.append("## Personal Information Summary\n" + " | ".join(personal))

        for section in document.visible_sections():
            summary = self.summarize_section(section, document)
            if summary.strip():
                parts.append(summary)

        return "\n\n---\n\n".join(parts)

    # --- AI operations ---

    @property
    def generator(self) -> Generator:
        if self._generator is None:
            self._generator = LLMGenerator.from_config(self.config)
        return self._generator

    async def _generate(
        self,
        task: GenerationTask,
        payload: Dict[str, Any],
        shape: OutputShape,
        cancel_token: Optional[CancellationToken],
    ) -> Any:
        start = time.time()
        try:
            result = await call_generator(
                self.generator,
                task,
                payload,
                shape,
                cancel_token=cancel_token,
                timeout_s=self.config.timeout_s,
            )
        except GenerationError as e:
            log_generation_result(task.value, time.time() - start, False, e.message)
            raise
        log_generation_result(task.value, time.time() - start, result not in (None, "", {}, []))
        return result

    def _section_type(self, document: ResumeDocument, section_id: str) -> str:
        section = document.get_section(section_id)
        return section.schema_id if section else ""

    async def improve_field(
        self,
        document: ResumeDocument,
        section_id: str,
        field_id: str,
        current_value: str,
        prompt: str,
        item_id: Optional[str] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Optional[str]:
        """
        Rewrite one field's value following the user's prompt.

        Returns:
            Improved text, or None if the generator had no suggestion

        Raises:
            GenerationError: On backend failure, cancellation or timeout
        """
        context = self.build_ai_context(
            AIContextPayload(
                document=document,
                section_id=section_id,
                task=AITask.IMPROVE,
                field_id=field_id,
                item_id=item_id,
                input_text=current_value,
            )
        )
        schema_id = self._section_type(document, section_id)
        payload = {
            **context.to_prompt_vars(),
            "section_type": schema_id,
            "field_id": field_id,
            "current_value": current_value,
            "prompt": prompt,
            "improvement_prompts": self.get_improvement_prompts(schema_id, field_id),
        }
        result = await self._generate(GenerationTask.IMPROVE_FIELD, payload, OutputShape.TEXT, cancel_token)
        return _text_or_none(result)

    async def get_autocomplete(
        self,
        document: ResumeDocument,
        section_id: str,
        field_id: str,
        input_text: str,
        item_id: Optional[str] = None,
        text_after_cursor: str = "",
        cancel_token: Optional[CancellationToken] = None,
    ) -> Optional[str]:
        """
        Suggest a continuation of the text being typed.

        Returns:
            Completion text, or None if there is no suggestion (including fields
            that do not offer autocomplete)
        """
        schema_id = self._section_type(document, section_id)
        field_schema = self.get_field_schema(schema_id, field_id)
        if field_schema is not None and not (field_schema.ai_hints and field_schema.ai_hints.autocomplete_enabled):
            return None

        context = self.build_ai_context(
            AIContextPayload(
                document=document,
                section_id=section_id,
                task=AITask.AUTOCOMPLETE,
                field_id=field_id,
                item_id=item_id,
                input_text=input_text,
            )
        )
        payload = {
            **context.to_prompt_vars(),
            "section_type": schema_id,
            "field_id": field_id,
            "input_text": input_text,
            "text_after_cursor": text_after_cursor,
        }
        result = await self._generate(GenerationTask.AUTOCOMPLETE, payload, OutputShape.TEXT, cancel_token)
        return _text_or_none(result)

    async def batch_improve_section(
        self,
        document: ResumeDocument,
        section_id: str,
        prompt: str,
        cancel_token: Optional[CancellationToken] = None,
    ) -> BatchImprovementResult:
        """
        Improve every item of a section in one generator call.

        The generator must return exactly one item per item sent; any other count
        fails the whole operation with no partial merge.

        Returns:
            BatchImprovementResult; on success .document holds a new document with
            the improvements merged, the input document is never modified

        Raises:
            GenerationError: On backend failure, cancellation or timeout
        """
        section = document.get_section(section_id)
        if section is None:
            return BatchImprovementResult(success=False, error=f"Section '{section_id}' not found")

        schema = self.get_section_schema(section.schema_id)
        if schema is None or not schema.ai_context.batch_improvement_supported:
            return BatchImprovementResult(
                success=False,
                error=f"Batch improvement not supported for section type '{section.schema_id}'",
            )

        bridged = AIDataBridge.from_internal(section, self)
        if not bridged.items:
            return BatchImprovementResult(success=False, error="Section has no content to improve")

        context = self.build_ai_context(AIContextPayload(document=document, section_id=section_id))
        payload = {
            "section": bridged.to_dict(),
            "improvement_goals": [prompt],
            "schema_instructions": AIDataBridge.build_schema_instruction(self, schema.id),
            "other_sections_context": context.other_sections_context,
            "user_job_title": context.user_job_title,
            "user_job_info": context.user_job_info,
            "user_bio": context.user_bio,
        }
        output = await self._generate(GenerationTask.BATCH_IMPROVE, payload, OutputShape.ITEMS, cancel_token)

        items = output.get("items") if isinstance(output, dict) else None
        if not isinstance(items, list):
            return BatchImprovementResult(success=False, error="Generator returned no item list")
        if len(items) != len(bridged.item_ids):
            _log_warning(
                f"Batch improvement of '{section_id}' returned {len(items)} items for "
                f"{len(bridged.item_ids)} sent; nothing merged"
            )
            return BatchImprovementResult(
                success=False,
                error=f"Expected {len(bridged.item_ids)} items, got {len(items)}",
            )

        patches = []
        for item_id, raw in zip(bridged.item_ids, items):
            data = AIDataBridge.validate_item_data(raw, schema) if isinstance(raw, dict) else {}
            if data:
                patches.append(ItemPatch(id=item_id, data=data))

        summary = str(output.get("summary") or "")
        merged = AIDataBridge.merge_back(document, section_id, patches)
        _log_info(f"Merged {len(patches)}/{len(items)} improved items into '{section_id}'")
        return BatchImprovementResult(success=True, document=merged, improved_items=patches, summary=summary)

    async def review_document(
        self,
        document: ResumeDocument,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Optional[DocumentReview]:
        """
        Ask for an overall review of the document.

        The document is left untouched; callers that keep review history record
        review.reviewed_at in document.metadata.last_ai_review themselves.

        Returns:
            DocumentReview, or None if the generator gave nothing usable
        """
        payload = {"resume_text": self.stringify_document_for_review(document)}
        output = await self._generate(GenerationTask.REVIEW, payload, OutputShape.REVIEW, cancel_token)
        return DocumentReview.from_output(output)

    async def generate_document(
        self,
        bio: str,
        job_description: str,
        personal_details: Optional[Dict[str, Any]] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Optional[ResumeDocument]:
        """
        Generate a complete document from a bio and a job description.

        Returns:
            New document built through the AI Data Bridge, or None if nothing
            usable came back
        """
        payload = {
            "bio": bio,
            "job_description": job_description,
            "schema_instructions": AIDataBridge.build_schema_instructions(self),
        }
        output = await self._generate(GenerationTask.GENERATE_DOCUMENT, payload, OutputShape.DOCUMENT, cancel_token)
        if not isinstance(output, dict):
            return None

        document = AIDataBridge.to_internal(output, self, personal_details=personal_details)
        if not document.sections:
            return None
        return document

    async def generate_cover_letter(
        self,
        document: ResumeDocument,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Optional[str]:
        """Write a cover letter for the configured target job from the document."""
        payload = {
            "resume_text": self.stringify_document_for_review(document),
            "user_job_title": self._user_job_title(document),
            "user_job_info": self.config.target_job_info,
        }
        result = await self._generate(GenerationTask.COVER_LETTER, payload, OutputShape.TEXT, cancel_token)
        return _text_or_none(result)

    # --- Edit path ---

    def _schema_for_section(self, document: ResumeDocument, section_id: str) -> Optional[SectionSchema]:
        section = document.get_section(section_id)
        return self.get_section_schema(section.schema_id) if section else None

    def update_field(
        self,
        document: ResumeDocument,
        section_id: str,
        field_id: str,
        value: Any,
        item_id: Optional[str] = None,
    ) -> Optional[SectionItem]:
        """
        Set a field value; creates the item of a single section on first edit.

        The value is coerced to the field's type. Undeclared fields and values that
        do not fit are dropped with a warning and None is returned.
        """
        schema = self._schema_for_section(document, section_id)
        return editing.update_field(document, section_id, field_id, value, item_id=item_id, schema=schema)

    def add_section_item(
        self,
        document: ResumeDocument,
        section_id: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> Optional[SectionItem]:
        schema = self._schema_for_section(document, section_id)
        if schema is None:
            _log_warning(f"Cannot add item to section '{section_id}': unknown section or schema")
            return None
        return editing.add_section_item(document, section_id, schema, data)

    def remove_section_item(self, document: ResumeDocument, section_id: str, item_id: str) -> SectionItem:
        return editing.remove_section_item(document, section_id, item_id)

    def update_section_title(self, document: ResumeDocument, section_id: str, title: str) -> None:
        editing.update_section_title(document, section_id, title)

    def reorder_section_items(self, document: ResumeDocument, section_id: str, from_index: int, to_index: int) -> None:
        editing.reorder_section_items(document, section_id, from_index, to_index)

    def reorder_sections(self, document: ResumeDocument, from_index: int, to_index: int) -> None:
        editing.reorder_sections(document, from_index, to_index)

    def add_section(self, document: ResumeDocument, schema_id: str, title: Optional[str] = None) -> Optional[ResumeSection]:
        schema = self.get_section_schema(schema_id)
        if schema is None:
            _log_warning(f"Cannot add section: unknown schema '{schema_id}'")
            return None
        return editing.add_section(document, schema, title)


def _text_or_none(result: Any) -> Optional[str]:
    if not isinstance(result, str) or not result.strip():
        return None
    return result.strip()
