"""
FOLIO - document composition and rendering core

Turns hydrated business records (proposals, technical requests, case studies,
staffing resumes, operational log reports) into paginated PDF documents.

Architecture:
- Templating Context: document kinds, section renderers, layout configuration
- Assets Context: fail-soft resolution of logos and photos
- Composition Context: embedding documents in documents, generation pipeline
- Rendering Context: headless browser lifecycle and PDF output
"""

__version__ = "0.1.0"
