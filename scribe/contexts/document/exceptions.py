"""Custom exceptions for the document context."""

from pathlib import Path
from typing import Optional


class DocumentFormatError(ValueError):
    """
    Exception raised when a resume document file or dict cannot be read.

    Attributes:
        message: Error description
        source_path: File being loaded, if any
    """

    def __init__(self, message: str, source_path: Optional[Path] = None):
        self.message = message
        self.source_path = source_path

        parts = [message]
        if source_path:
            parts.append(f"File: {source_path}")

        super().__init__("\n".join(parts))


class DocumentEditError(ValueError):
    """
    Exception raised when an edit targets a section or item that does not exist,
    or would break section cardinality.
    """

    def __init__(self, message: str, section_id: Optional[str] = None, item_id: Optional[str] = None):
        self.message = message
        self.section_id = section_id
        self.item_id = item_id

        parts = [message]
        if section_id:
            parts.append(f"Section: {section_id}")
        if item_id:
            parts.append(f"Item: {item_id}")

        super().__init__("\n".join(parts))
