"""Flattening of Read API results into plain text.

The Read API returns ``analyzeResult.readResults``: one entry per page,
each with an ordered list of ``lines``. Lines within a page are joined
with newlines and pages are separated by a blank line.
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class NormalizedText:
    """Extracted text of a whole document."""

    text: str
    pages: int


def _mapping(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def page_lines(payload: dict[str, Any] | None) -> list[list[str]]:
    """Return the text lines of each page.

    Missing keys and entries that are not objects read as empty.
    """
    analyze = _mapping((payload or {}).get("analyzeResult"))
    pages = analyze.get("readResults")
    if not isinstance(pages, list):
        return []
    result = []
    for page in pages:
        lines = _mapping(page).get("lines")
        if not isinstance(lines, list):
            lines = []
        result.append(
            [str(_mapping(line).get("text") or "") for line in lines]
        )
    return result


def normalize_result(payload: dict[str, Any] | None) -> NormalizedText:
    """Convert a succeeded Read API payload into text and a page count.

    Args:
        payload: Decoded JSON body of the final status query. ``None`` or
            an empty mapping is treated as a document with no pages.

    Returns:
        The joined, stripped text and the number of pages.
    """
    pages = page_lines(payload)
    text = "\n\n".join("\n".join(lines) for lines in pages)
    return NormalizedText(text=text.strip(), pages=len(pages))
