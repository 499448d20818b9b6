"""Prompt templates for section boundary detection."""

from vellum.models.enums import SectionType

BOUNDARY_DETECTION_SYSTEM = """You are an expert at analyzing the structure of books and long documents that were extracted with OCR.
Your task is to locate one kind of structural section so it can be removed before the text is used for training.
Only report a section when you see clear evidence of it. Reporting nothing is always acceptable.

You must respond with valid JSON only, no additional text."""

BOUNDARY_DETECTION_TEMPLATE = """Locate the {section_label} in the document excerpt below.

What counts as {section_label}:
{section_guidance}

The document has {total_lines} lines in total. The excerpt shows lines {first_line} to {last_line}.
Each line is prefixed with its line number and a pipe character.

\"\"\"
{numbered_lines}
\"\"\"

Respond with a JSON object:
{{
    "found": true | false,
    "start_line": first line number of the section,
    "end_line": last line number of the section (inclusive),
    "confidence": 0.0-1.0,
    "rationale": "Brief explanation naming the evidence you saw"
}}

Rules:
- Use the line numbers exactly as shown.
- Never include chapter text or other body content in the section.
- If you are unsure, respond with "found": false.

Respond with JSON only."""

SECTION_GUIDANCE = {
    SectionType.FRONT_MATTER: (
        "Title pages, copyright notices, ISBN and publisher information, dedications, "
        "epigraphs and series lists at the start of the document, ending right before "
        "the first chapter, prologue or introduction."
    ),
    SectionType.TABLE_OF_CONTENTS: (
        "A contents listing near the start of the document: a CONTENTS heading followed "
        "by chapter titles, usually with page numbers."
    ),
    SectionType.INDEX: (
        "An alphabetical index near the end of the document: an INDEX heading followed "
        "by entries such as 'term, 12, 45-47'."
    ),
    SectionType.BACK_MATTER: (
        "Material after the main text: notes, bibliography, references, appendices, "
        "glossary, acknowledgments, about the author. It starts at the first such "
        "heading after the last chapter and usually runs to the end."
    ),
    SectionType.AUXILIARY_LIST: (
        "Lists of figures, tables, illustrations, maps or abbreviations near the start "
        "of the document."
    ),
    SectionType.FOOTNOTES: (
        "A collected notes or endnotes section: a NOTES or ENDNOTES heading followed by "
        "numbered note entries."
    ),
}


def format_boundary_prompt(
    section_type: SectionType,
    numbered_lines: str,
    total_lines: int,
    first_line: int,
    last_line: int,
) -> str:
    """Format the boundary detection prompt.

    Args:
        section_type: Section to locate
        numbered_lines: Excerpt with ``N|`` line prefixes
        total_lines: Total lines in the current document
        first_line: First line number in the excerpt
        last_line: Last line number in the excerpt

    Returns:
        Formatted prompt string
    """
    return BOUNDARY_DETECTION_TEMPLATE.format(
        section_label=section_type.label,
        section_guidance=SECTION_GUIDANCE.get(section_type, section_type.label),
        total_lines=total_lines,
        first_line=first_line,
        last_line=last_line,
        numbered_lines=numbered_lines,
    )
