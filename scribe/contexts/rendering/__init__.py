"""
Rendering Context

Responsibilities:
- Transforms the mutable document into an immutable, renderer-agnostic view model
- Provides role-based lookups so renderers work over any section schema
- Formats view models as markdown

Owns: Renderable view model, data transformer, markdown output
Never: Modifies documents
"""
