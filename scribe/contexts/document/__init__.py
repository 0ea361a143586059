"""
Document Context

Mutable edit-time resume model: documents, sections, items, legacy migration,
in-place edit operations and named snapshots.
"""

from scribe.contexts.document.document_data_structure import (
    LegacyResumeDocument,
    ResumeDocument,
    ResumeSection,
    SectionItem,
    load_document,
    save_document,
)
from scribe.contexts.document.exceptions import DocumentEditError, DocumentFormatError
from scribe.contexts.document.snapshots import SnapshotStore

__all__ = [
    "ResumeDocument",
    "ResumeSection",
    "SectionItem",
    "LegacyResumeDocument",
    "load_document",
    "save_document",
    "DocumentFormatError",
    "DocumentEditError",
    "SnapshotStore",
]
