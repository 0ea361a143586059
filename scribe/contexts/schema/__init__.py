"""
Schema Context

Responsibilities:
- Defines section types declaratively (fields, validation rules, AI and UI hints)
- Maps schema-specific field ids onto a closed set of semantic roles
- Renders AI-prompt fragments through named context builders
- Assembles and caches AI context; orchestrates AI operations (SchemaRegistry)

Owns: Schema catalog (types/<schema_id>/), role maps, context builders, SchemaRegistry
Never: Infers roles from data or renders documents for display
"""
