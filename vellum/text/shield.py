"""Protect code, math and tables from rewriting steps.

Protected regions are swapped for ``⟦VELLUM:KIND:N⟧`` placeholders before a
step runs and swapped back afterwards.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Pattern, Tuple

logger = logging.getLogger(__name__)

PLACEHOLDER_RE = re.compile(r"⟦VELLUM:[A-Z]+:\d+⟧")

_FENCED_CODE_RE = re.compile(r"^(`{3,}|~{3,})[^\n]*\n[\s\S]*?^\1[ \t]*$", re.MULTILINE)
_INLINE_CODE_RE = re.compile(r"`[^`\n]+`")

_MATH_PATTERNS: Tuple[Pattern[str], ...] = (
    re.compile(r"\$\$[\s\S]+?\$\$"),
    re.compile(r"\\\[[\s\S]+?\\\]"),
    re.compile(r"\\\([^\n]+?\\\)"),
    re.compile(r"(?<![\\$\w])\$(?=\S)[^$\n]+?(?<=\S)\$(?![\w$])"),
    # x^2, e^{i\pi}
    re.compile(r"\b[A-Za-z0-9]\^(?:\{[^}\n]+\}|[A-Za-z0-9]+)"),
)

_TABLE_SEPARATOR_RE = re.compile(r"^\s*\|?\s*:?-{3,}:?\s*(?:\|\s*:?-{3,}:?\s*)+\|?\s*$")


@dataclass
class ShieldedContent:
    """Protected regions keyed by placeholder, in protection order."""

    regions: Dict[str, str] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.regions)

    def counts(self) -> Dict[str, int]:
        result: Dict[str, int] = {}
        for placeholder in self.regions:
            kind = placeholder.split(":")[1]
            result[kind] = result.get(kind, 0) + 1
        return result


@dataclass
class RestoreResult:
    text: str
    missing: List[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.missing


class ContentShield:
    """Swaps protected regions for placeholders and back."""

    def __init__(
        self,
        protect_code: bool = True,
        protect_math: bool = True,
        protect_tables: bool = True,
    ) -> None:
        self._protect_code = protect_code
        self._protect_math = protect_math
        self._protect_tables = protect_tables

    def protect(self, text: str) -> Tuple[str, ShieldedContent]:
        """Replace code, then math, then tables with placeholders.

        Args:
            text: Text to protect

        Returns:
            Tuple of (text with placeholders, the protected regions)
        """
        shielded = ShieldedContent()
        if self._protect_code:
            text = self._swap(text, _FENCED_CODE_RE, "CODE", shielded)
            text = self._swap(text, _INLINE_CODE_RE, "CODE", shielded)
        if self._protect_math:
            for pattern in _MATH_PATTERNS:
                text = self._swap(text, pattern, "MATH", shielded)
        if self._protect_tables:
            text = self._swap_tables(text, shielded)
        return text, shielded

    def restore(self, text: str, shielded: ShieldedContent) -> RestoreResult:
        """Put protected regions back, newest placeholder first.

        Placeholders the step dropped are reported in ``missing``; the rest
        of the text is still restored.
        """
        missing = []
        for placeholder, original in reversed(list(shielded.regions.items())):
            if placeholder not in text:
                missing.append(placeholder)
                continue
            text = text.replace(placeholder, original)
        if missing:
            logger.warning(f"{len(missing)} protected regions were lost during rewrite")
        return RestoreResult(text=text, missing=missing)

    @staticmethod
    def _placeholder(kind: str, shielded: ShieldedContent) -> str:
        return f"⟦VELLUM:{kind}:{len(shielded.regions)}⟧"

    def _swap(
        self, text: str, pattern: Pattern[str], kind: str, shielded: ShieldedContent
    ) -> str:
        def replace(match: "re.Match[str]") -> str:
            placeholder = self._placeholder(kind, shielded)
            shielded.regions[placeholder] = match.group(0)
            return placeholder

        return pattern.sub(replace, text)

    def _swap_tables(self, text: str, shielded: ShieldedContent) -> str:
        lines = text.split("\n")
        out: List[str] = []
        index = 0
        while index < len(lines):
            if not lines[index].lstrip().startswith("|"):
                out.append(lines[index])
                index += 1
                continue
            end = index
            while end < len(lines) and lines[end].lstrip().startswith("|"):
                end += 1
            block = lines[index:end]
            if len(block) >= 2 and any(_TABLE_SEPARATOR_RE.match(line) for line in block):
                placeholder = self._placeholder("TABLE", shielded)
                shielded.regions[placeholder] = "\n".join(block)
                out.append(placeholder)
            else:
                out.extend(block)
            index = end
        return "\n".join(out)
