"""Prompt templates for metadata extraction."""

METADATA_SYSTEM = """You are a librarian extracting bibliographic metadata from the opening pages of a document.
Report only what the text states; use null for anything not present.

You must respond with valid JSON only, no additional text."""

METADATA_TEMPLATE = """Extract the bibliographic metadata from the opening of this document.

\"\"\"
{sample}
\"\"\"

Respond with a JSON object:
{{
    "title": "...",
    "subtitle": null,
    "author": null,
    "translator": null,
    "editor": null,
    "publisher": null,
    "publish_date": null,
    "isbn": null,
    "language": null,
    "genre": null,
    "series": null,
    "edition": null
}}

Respond with JSON only."""


def format_metadata_prompt(sample: str) -> str:
    """Format the metadata extraction prompt."""
    return METADATA_TEMPLATE.format(sample=sample)
