"""
SCRIBE - Schema-driven Composition of Resumes with Intelligent Bridged Editing

A schema-driven data and context engine for a resume builder: section types are
data, generic code reaches fields through semantic roles, and AI-generated content
is validated and merged back field by field.

Architecture:
- Schema Context: Section schemas, role maps, context builders, SchemaRegistry
- Document Context: Edit-time document model, legacy migration, snapshots
- Rendering Context: Immutable view model and markdown output
- AI Context: Generation boundary and the AI Data Bridge
"""

__version__ = "0.1.0"
