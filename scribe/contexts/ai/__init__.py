"""
AI Context

Responsibilities:
- Defines the generation boundary (generator protocol, output shapes, cancellation)
- Implements the LLM-backed generator with Jinja2 prompt templates
- Converts between documents and the simplified AI-bridged format
- Validates generated values against section schemas and merges them back field by field

Owns: Prompt templates, AI Data Bridge, generation errors
Never: Judges the content quality of generated text (only its shape)
"""
