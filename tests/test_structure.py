from __future__ import annotations

import json

from vellum.models import (
    ChapterMarkerStyle,
    DocumentMetadata,
    EndMarkerStyle,
    MetadataFormat,
)
from vellum.text.structure import apply_structure, detect_chapter_headings, format_metadata

BODY = """# Part One

## Chapter 1

It began.

```
# Chapter 99 inside code
```

## Notes

## Chapter 2

It ended."""

META = DocumentMetadata(title="The Book", author="A. Writer", language="en")


def test_detects_chapters_outside_code_and_skips_back_matter() -> None:
    headings = detect_chapter_headings(BODY.split("\n"))
    titles = [(h.title, h.is_part) for h in headings]
    assert titles == [("Part One", True), ("Chapter 1", False), ("Chapter 2", False)]


def test_layout_with_html_markers() -> None:
    result = apply_structure(
        BODY,
        META,
        metadata_format=MetadataFormat.YAML,
        chapter_style=ChapterMarkerStyle.HTML_COMMENTS,
        end_style=EndMarkerStyle.STANDARD,
    )

    assert result.chapters_found == 2
    assert result.text.startswith("# The Book\n\n---\ntitle: The Book\n")
    assert "<!-- PART: Part One -->\n\n# Part One" in result.text
    assert "<!-- CHAPTER: Chapter 1 -->\n\n## Chapter 1" in result.text
    assert "CHAPTER: Chapter 99" not in result.text
    assert result.text.rstrip().endswith("---\n\n*** <!-- END OF THE BOOK -->")


def test_no_markers_and_no_end_marker() -> None:
    result = apply_structure(
        "Plain text.",
        META,
        chapter_style=ChapterMarkerStyle.NONE,
        end_style=EndMarkerStyle.NONE,
    )
    assert result.text.endswith("---\n\nPlain text.\n")


def test_token_end_marker_with_author() -> None:
    result = apply_structure(
        "Plain text.", META, end_style=EndMarkerStyle.TOKEN_WITH_AUTHOR
    )
    assert result.text.rstrip().endswith('<END_DOCUMENT author="A. Writer">')


def test_metadata_formats() -> None:
    assert json.loads(format_metadata(META, MetadataFormat.JSON))["author"] == "A. Writer"
    markdown = format_metadata(META, MetadataFormat.MARKDOWN)
    assert markdown.split("  \n") == [
        "**Title:** The Book",
        "**Author:** A. Writer",
        "**Language:** en",
    ]
