"""Prompt templates for document-wide pattern detection."""

PATTERN_DETECTION_SYSTEM = """You are an expert at recognising recurring OCR artifacts and document conventions.
You describe them as Python regular expressions that can be applied line by line.

You must respond with valid JSON only, no additional text."""

PATTERN_DETECTION_TEMPLATE = """Analyze the document sample below and describe its recurring scaffolding.
Each line is prefixed with its 0-based line number and a | separator.

\"\"\"
{sample}
\"\"\"

Respond with a JSON object:
{{
    "page_number_patterns": ["regex matching a whole page-number line", ...],
    "header_patterns": ["regex matching a whole running-header line", ...],
    "footer_patterns": ["regex matching a whole running-footer line", ...],
    "citation_style": "apa" | "mla" | "chicago" | "ieee" | "numeric" | "none",
    "citation_patterns": ["regex matching one inline citation", ...],
    "footnote_marker_patterns": ["regex matching one inline footnote marker", ...],
    "special_characters_to_remove": ["character", ...],
    "has_front_matter": true | false,
    "front_matter_end_line": <line number> | null,
    "toc_start_line": <line number> | null,
    "toc_end_line": <line number> | null,
    "index_start_line": <line number> | null,
    "back_matter_start_line": <line number> | null,
    "chapter_start_lines": [<line number>, ...],
    "chapter_titles": ["exact chapter heading line", ...],
    "content_type": {{
        "primary_type": "prose" | "academic" | "technical" | "poetry" | "drama" | "mixed",
        "has_code": true | false,
        "has_math": true | false,
        "has_tables": true | false,
        "has_poetry": true | false,
        "has_dialogue": true | false,
        "is_academic": true | false
    }},
    "confidence": 0.0-1.0,
    "notes": "Brief observations"
}}

Rules:
- Line patterns must match the entire line, anchored with ^ and $.
- Patterns describe the text after the | separator; never include line numbers.
- Only include a pattern when you have seen it at least twice.
- Use null for a line you cannot see in the sample.
- Leave a list empty when nothing applies.

Respond with JSON only."""


def format_pattern_prompt(sample: str) -> str:
    """Format the pattern detection prompt.

    Args:
        sample: Document sample

    Returns:
        Formatted prompt string
    """
    numbered = "\n".join(f"{index}|{line}" for index, line in enumerate(sample.split("\n")))
    return PATTERN_DETECTION_TEMPLATE.format(sample=numbered)
