"""Special-character normalization."""

import re
from typing import Callable, Optional, Sequence, TypeVar

import ftfy

from vellum.models import DEFAULT_SPECIAL_CHARACTERS
from vellum.text.shield import PLACEHOLDER_RE

T = TypeVar("T")

_INVISIBLE_RE = re.compile("[\u200b\u200c\u200d\u2060\ufeff\u00ad]")
_SPACE_EQUIVALENTS = str.maketrans(
    {
        ch: " "
        for ch in (
            "\u00a0",
            "\u1680",
            "\u2000",
            "\u2001",
            "\u2002",
            "\u2003",
            "\u2004",
            "\u2005",
            "\u2006",
            "\u2007",
            "\u2008",
            "\u2009",
            "\u200a",
            "\u202f",
            "\u205f",
            "\u3000",
        )
    }
)
_IMAGE_RE = re.compile(r"!\[[^\]\n]*\]\([^)\n]*\)")
_EMPTY_PARENS_RE = re.compile(r"\([ \t]*\)")
_INNER_SPACES_RE = re.compile(r"(?<=\S)[ \t]{2,}")
_TRAILING_SPACES_RE = re.compile(r"[ \t]+$", re.MULTILINE)
_BLANK_RUN_RE = re.compile(r"\n[ \t]*\n(?:[ \t]*\n)+")


def _stabilize(value: T, transform: Callable[[T], T], *, limit: int = 5) -> T:
    """Apply ``transform`` until a fixpoint is reached or ``limit`` iterations pass."""
    for _ in range(limit):
        updated = transform(value)
        if updated == value:
            return value
        value = updated
    return value


def _remove_characters(text: str, characters: Sequence[str]) -> str:
    if not characters:
        return text
    table = str.maketrans({ch: None for ch in characters if len(ch) == 1})
    multi = [ch for ch in characters if len(ch) > 1]

    # Placeholders pass through untouched.
    pieces = []
    last = 0
    for match in PLACEHOLDER_RE.finditer(text):
        pieces.append(_strip_chars(text[last : match.start()], table, multi))
        pieces.append(match.group(0))
        last = match.end()
    pieces.append(_strip_chars(text[last:], table, multi))
    return "".join(pieces)


def _strip_chars(segment: str, table: dict, multi: Sequence[str]) -> str:
    segment = segment.translate(table)
    for token in multi:
        segment = segment.replace(token, "")
    return segment


def _normalize_once(text: str, characters: Sequence[str]) -> str:
    text = ftfy.fix_text(text)
    text = _INVISIBLE_RE.sub("", text).translate(_SPACE_EQUIVALENTS)
    text = _IMAGE_RE.sub("", text)
    text = text.replace("[", "(").replace("]", ")")
    text = _remove_characters(text, characters)
    text = _EMPTY_PARENS_RE.sub("", text)
    text = _INNER_SPACES_RE.sub(" ", text)
    text = _TRAILING_SPACES_RE.sub("", text)
    return _BLANK_RUN_RE.sub("\n\n", text)


def normalize_special_characters(
    text: str, characters: Optional[Sequence[str]] = None
) -> str:
    """Repair encoding damage and strip markdown and OCR noise characters.

    Runs to a fixed point, so applying it twice gives the same result as
    applying it once.

    Args:
        text: Text to normalize (protected regions already swapped out)
        characters: Characters to delete; defaults to ``*`` and ``_``

    Returns:
        Normalized text
    """
    chars = list(DEFAULT_SPECIAL_CHARACTERS if characters is None else characters)
    return _stabilize(text, lambda value: _normalize_once(value, chars))
