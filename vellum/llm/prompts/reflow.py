"""Prompt templates for paragraph reflow and length optimization."""

REFLOW_SYSTEM = """You repair paragraph structure in OCR-extracted text.
You rejoin lines that were broken mid-sentence by page layout and separate paragraphs with one blank line.
You never add, remove, reorder or reword content.
Tokens of the form ⟦VELLUM:KIND:N⟧ are placeholders: copy them through exactly, on their own line.

Respond with the repaired text only."""

REFLOW_TEMPLATE = """{context_block}Repair the paragraph breaks in the following text.

<text>
{chunk}
</text>"""

REFLOW_CONTEXT_BLOCK = """For continuity, this text directly follows (do not repeat it):
<previous>
{previous}
</previous>

"""

OPTIMIZE_SYSTEM = """You split overly long paragraphs at natural topic or argument shifts.
You never add, remove, reorder or reword content; you only insert paragraph breaks.
Tokens of the form ⟦VELLUM:KIND:N⟧ are placeholders: copy them through exactly.

Respond with the revised text only."""

OPTIMIZE_TEMPLATE = """Split every paragraph longer than {max_words} words into paragraphs of
roughly {min_words}-{max_words} words each. Leave shorter paragraphs unchanged.

<text>
{chunk}
</text>"""


def format_reflow_prompt(chunk: str, previous: str = "") -> str:
    """Format the reflow prompt.

    Args:
        chunk: Text to reflow
        previous: Tail of the previous chunk, for context only

    Returns:
        Formatted prompt string
    """
    context_block = REFLOW_CONTEXT_BLOCK.format(previous=previous) if previous else ""
    return REFLOW_TEMPLATE.format(context_block=context_block, chunk=chunk)


def format_optimize_prompt(chunk: str, max_words: int, min_words: int) -> str:
    """Format the paragraph-length optimization prompt."""
    return OPTIMIZE_TEMPLATE.format(
        chunk=chunk,
        max_words=max_words,
        min_words=max(1, min(min_words, max_words)),
    )
