"""
Resume Document Structure

Defines the mutable edit-time representation of a resume:

    ResumeDocument
      personal_details      free-form mapping (fullName, jobTitle, email, ...)
      sections[]            ResumeSection, ordered
        items[]             SectionItem, ordered
          data              field id -> value, shaped by the section schema

Documents written before section schemas existed (LegacyResumeDocument) have fixed
section types and no schemaVersion key. They are converted to ResumeDocument when
loaded and never stored in mixed form.

Serialized form uses camelCase keys so exported files stay compatible with the
editor's own JSON.
"""

import copy
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from omegaconf import OmegaConf

from scribe.contexts.document.exceptions import DocumentFormatError
from scribe.contexts.document.logger import _log_warning
from scribe.utils.hashing import generate_id
from scribe.utils.timestamp import now_iso

CURRENT_SCHEMA_VERSION = "1.0.0"

# Fixed field names of each legacy section type, in display order
LEGACY_SECTION_FIELDS: Dict[str, List[str]] = {
    "summary": ["content"],
    "experience": ["jobTitle", "company", "startDate", "endDate", "description"],
    "education": ["degree", "institution", "graduationYear", "details"],
    "skills": ["name"],
    "customText": ["content"],
}


@dataclass
class ItemMetadata:
    created_at: str = field(default_factory=now_iso)
    updated_at: str = field(default_factory=now_iso)
    ai_generated: bool = False
    ai_improved: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "aiGenerated": self.ai_generated,
            "aiImproved": self.ai_improved,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ItemMetadata":
        data = data or {}
        metadata = cls()
        metadata.created_at = data.get("createdAt") or metadata.created_at
        metadata.updated_at = data.get("updatedAt") or metadata.created_at
        metadata.ai_generated = bool(data.get("aiGenerated", False))
        metadata.ai_improved = bool(data.get("aiImproved", False))
        return metadata


@dataclass
class SectionItem:
    """
    One entry of a section.

    Attributes:
        id: Unique item id within the document
        schema_id: Section schema this item's data follows
        data: Field id -> value
        metadata: Timestamps and AI provenance flags
    """

    id: str
    schema_id: str
    data: Dict[str, Any] = field(default_factory=dict)
    metadata: ItemMetadata = field(default_factory=ItemMetadata)

    def touch(self) -> None:
        """Bump updated_at to now."""
        self.metadata.updated_at = now_iso()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "schemaId": self.schema_id,
            "data": copy.deepcopy(self.data),
            "metadata": self.metadata.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], schema_id: Optional[str] = None) -> "SectionItem":
        return cls(
            id=str(data.get("id") or generate_id("item")),
            schema_id=str(data.get("schemaId") or schema_id or ""),
            data=copy.deepcopy(data.get("data") or {}),
            metadata=ItemMetadata.from_dict(data.get("metadata")),
        )


@dataclass
class SectionMetadata:
    custom_title: bool = False
    ai_optimized: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"customTitle": self.custom_title, "aiOptimized": self.ai_optimized}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "SectionMetadata":
        data = data or {}
        return cls(
            custom_title=bool(data.get("customTitle", False)),
            ai_optimized=bool(data.get("aiOptimized", False)),
        )


@dataclass
class ResumeSection:
    """
    A schema-described section of the resume.

    The title is user-editable and independent of the schema's display name.
    Sections whose schema has single cardinality hold at most one item.
    """

    id: str
    schema_id: str
    title: str
    visible: bool = True
    items: List[SectionItem] = field(default_factory=list)
    metadata: SectionMetadata = field(default_factory=SectionMetadata)

    def get_item(self, item_id: str) -> Optional[SectionItem]:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "schemaId": self.schema_id,
            "title": self.title,
            "visible": self.visible,
            "items": [item.to_dict() for item in self.items],
            "metadata": self.metadata.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ResumeSection":
        if "schemaId" not in data:
            if "type" in data:
                return LegacySection.from_dict(data).to_dynamic()
            raise DocumentFormatError(f"Section '{data.get('id', '?')}' has neither schemaId nor type")

        schema_id = str(data["schemaId"])
        return cls(
            id=str(data.get("id") or generate_id(schema_id)),
            schema_id=schema_id,
            title=str(data.get("title") or ""),
            visible=bool(data.get("visible", True)),
            items=[SectionItem.from_dict(item, schema_id) for item in data.get("items") or []],
            metadata=SectionMetadata.from_dict(data.get("metadata")),
        )


@dataclass
class DocumentMetadata:
    last_ai_review: Optional[str] = None  # ISO timestamp of the last review

    def to_dict(self) -> Dict[str, Any]:
        return {"lastAIReview": self.last_ai_review}


@dataclass
class ResumeDocument:
    """
    Schema-driven resume document.

    Attributes:
        personal_details: Contact and headline fields (fullName, jobTitle, email, ...)
        sections: Ordered sections
        template_id: Template the editor renders with
        schema_version: Document format version; its presence marks a non-legacy document
        metadata: Document-level AI bookkeeping
    """

    personal_details: Dict[str, Any] = field(default_factory=dict)
    sections: List[ResumeSection] = field(default_factory=list)
    template_id: str = "default"
    schema_version: str = CURRENT_SCHEMA_VERSION
    metadata: DocumentMetadata = field(default_factory=DocumentMetadata)

    def get_section(self, section_id: str) -> Optional[ResumeSection]:
        for section in self.sections:
            if section.id == section_id:
                return section
        return None

    def visible_sections(self) -> List[ResumeSection]:
        return [section for section in self.sections if section.visible]

    def copy(self) -> "ResumeDocument":
        """Deep copy; edits to the copy never reach this document."""
        return copy.deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "personalDetails": copy.deepcopy(self.personal_details),
            "sections": [section.to_dict() for section in self.sections],
            "templateId": self.template_id,
            "schemaVersion": self.schema_version,
            "metadata": self.metadata.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ResumeDocument":
        """
        Build a document from its dict form.

        Legacy documents (no schemaVersion) and legacy-shaped sections inside a
        current document are migrated section by section.

        Raises:
            DocumentFormatError: If the dict is not a resume document
        """
        if not isinstance(data, dict) or "sections" not in data:
            raise DocumentFormatError("Document must be a mapping with a 'sections' list")
        if is_legacy_document(data):
            return LegacyResumeDocument.from_dict(data).to_dynamic()

        metadata = data.get("metadata") or {}
        return cls(
            personal_details=copy.deepcopy(data.get("personalDetails") or {}),
            sections=[ResumeSection.from_dict(section) for section in data.get("sections") or []],
            template_id=str(data.get("templateId") or "default"),
            schema_version=str(data["schemaVersion"]),
            metadata=DocumentMetadata(last_ai_review=metadata.get("lastAIReview")),
        )


# --- Legacy documents ---


@dataclass
class LegacySection:
    """
    Hard-typed section from the pre-schema format.

    Items are flat mappings carrying their fields next to their id. Single-text
    types (summary, customText) may keep their text directly in content.
    """

    id: str
    type: str
    title: str
    visible: bool = True
    items: List[Dict[str, Any]] = field(default_factory=list)
    content: Optional[str] = None

    def field_items(self) -> List[Dict[str, Any]]:
        """Items as flat mappings, with section-level content lifted into one item."""
        if self.items:
            return self.items
        if self.content is not None:
            return [{"id": f"{self.id}_content", "content": self.content}]
        return []

    def item_data(self, raw: Dict[str, Any]) -> Dict[str, Any]:
        """
        Field data of one legacy item.

        Legacy fields are all plain text: numbers are stringified, other shapes
        are dropped. Known types keep only their fixed field names.
        """
        field_names = LEGACY_SECTION_FIELDS.get(self.type)
        data = {}
        for key, value in raw.items():
            if key == "id":
                continue
            if field_names is not None and key not in field_names:
                _log_warning(f"Dropped unknown field '{key}' of legacy {self.type} section '{self.id}'")
                continue
            if isinstance(value, bool) or not isinstance(value, (str, int, float)):
                _log_warning(f"Dropped non-text field '{key}' of legacy {self.type} section '{self.id}'")
                continue
            data[key] = value if isinstance(value, str) else str(value)
        return data

    def to_dynamic(self) -> ResumeSection:
        items = []
        for raw in self.field_items():
            item_id = str(raw.get("id") or generate_id(self.type))
            items.append(SectionItem(id=item_id, schema_id=self.type, data=self.item_data(raw)))
        return ResumeSection(
            id=self.id,
            schema_id=self.type,
            title=self.title,
            visible=self.visible,
            items=items,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LegacySection":
        section_type = str(data["type"])
        return cls(
            id=str(data.get("id") or generate_id(section_type)),
            type=section_type,
            title=str(data.get("title") or section_type),
            visible=bool(data.get("visible", True)),
            items=copy.deepcopy(data.get("items") or []),
            content=data.get("content"),
        )


@dataclass
class LegacyResumeDocument:
    personal_details: Dict[str, Any] = field(default_factory=dict)
    sections: List[LegacySection] = field(default_factory=list)
    template_id: str = "default"

    def to_dynamic(self) -> ResumeDocument:
        """Convert to a ResumeDocument. One-way: nothing converts back."""
        return ResumeDocument(
            personal_details=copy.deepcopy(self.personal_details),
            sections=[section.to_dynamic() for section in self.sections],
            template_id=self.template_id,
            schema_version=CURRENT_SCHEMA_VERSION,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LegacyResumeDocument":
        sections = []
        for raw in data.get("sections") or []:
            if "type" not in raw:
                raise DocumentFormatError(f"Legacy section '{raw.get('id', '?')}' has no type")
            sections.append(LegacySection.from_dict(raw))
        return cls(
            personal_details=copy.deepcopy(data.get("personalDetails") or {}),
            sections=sections,
            template_id=str(data.get("templateId") or "default"),
        )


def is_legacy_document(data: Dict[str, Any]) -> bool:
    """Legacy documents are exactly those without a schemaVersion key."""
    return "schemaVersion" not in data


AnyDocument = Union[ResumeDocument, LegacyResumeDocument]


# --- File IO ---


def load_document(path: Path) -> ResumeDocument:
    """
    Load a resume document from a .json or .yaml/.yml file, migrating legacy data.

    Raises:
        FileNotFoundError: If the file does not exist
        DocumentFormatError: On unreadable content or unsupported extension
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Document not found: {path}")

    suffix = path.suffix.lower()
    try:
        if suffix == ".json":
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        elif suffix in (".yaml", ".yml"):
            # No interpolation: user text may legitimately contain ${...}
            data = OmegaConf.to_container(OmegaConf.load(path), resolve=False)
        else:
            raise DocumentFormatError(f"Unsupported document format '{suffix}'", source_path=path)
    except json.JSONDecodeError as e:
        raise DocumentFormatError(f"Invalid JSON: {e}", source_path=path)

    try:
        return ResumeDocument.from_dict(data)
    except DocumentFormatError as e:
        raise DocumentFormatError(e.message, source_path=path)


def save_document(document: ResumeDocument, path: Path) -> Path:
    """Write a document as JSON or YAML depending on the file extension."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = document.to_dict()

    suffix = path.suffix.lower()
    if suffix == ".json":
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
    elif suffix in (".yaml", ".yml"):
        OmegaConf.save(OmegaConf.create(data), path)
    else:
        raise DocumentFormatError(f"Unsupported document format '{suffix}'", source_path=path)
    return path
