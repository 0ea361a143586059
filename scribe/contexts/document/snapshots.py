"""
Named document snapshots.

A snapshot is a deep copy of a document taken under a user-chosen name. Restoring
returns a fresh deep copy, so neither the stored snapshot nor the restored document
can affect each other afterwards.
"""

import copy
import time
import uuid
from dataclasses import dataclass
from typing import Dict, List, Optional

from scribe.contexts.document.document_data_structure import ResumeDocument
from scribe.contexts.document.logger import _log_debug, _log_error, _log_warning
from scribe.utils.timestamp import now_iso


@dataclass
class Snapshot:
    id: str
    name: str
    created_at: str
    schema_version: str
    document: ResumeDocument


class SnapshotStore:
    """In-memory collection of named snapshots, in creation order."""

    def __init__(self):
        self._snapshots: Dict[str, Snapshot] = {}

    def create(self, name: str, document: ResumeDocument) -> Snapshot:
        """
        Store a deep copy of document under name.

        The avatar image is blanked in the copy; snapshots keep content, not media.
        """
        cloned = copy.deepcopy(document)
        if "avatar" in cloned.personal_details:
            cloned.personal_details["avatar"] = ""

        snapshot = Snapshot(
            id=f"snapshot_{int(time.time() * 1000)}_{uuid.uuid4().hex[:5]}",
            name=name,
            created_at=now_iso(),
            schema_version=document.schema_version,
            document=cloned,
        )
        self._snapshots[snapshot.id] = snapshot
        _log_debug(f"Created snapshot '{name}' ({snapshot.id})")
        return snapshot

    def restore(self, snapshot_id: str, current_version: Optional[str] = None) -> Optional[ResumeDocument]:
        """
        Return a deep copy of the snapshot's document, or None if it does not exist.

        Args:
            snapshot_id: Snapshot to restore
            current_version: Schema version of the document being replaced; a mismatch
                is logged since the snapshot may need migration
        """
        snapshot = self._snapshots.get(snapshot_id)
        if snapshot is None:
            _log_error(f"Snapshot {snapshot_id} not found")
            return None

        if current_version is not None and snapshot.schema_version != current_version:
            _log_warning(
                f"Schema version mismatch! Snapshot version: {snapshot.schema_version}, "
                f"current version: {current_version}. Data migration may be needed."
            )
        return copy.deepcopy(snapshot.document)

    def delete(self, snapshot_id: str) -> bool:
        return self._snapshots.pop(snapshot_id, None) is not None

    def rename(self, snapshot_id: str, new_name: str) -> bool:
        snapshot = self._snapshots.get(snapshot_id)
        if snapshot is None:
            return False
        snapshot.name = new_name
        return True

    def get(self, snapshot_id: str) -> Optional[Snapshot]:
        return self._snapshots.get(snapshot_id)

    def list(self) -> List[Snapshot]:
        return list(self._snapshots.values())

    def __len__(self) -> int:
        return len(self._snapshots)
