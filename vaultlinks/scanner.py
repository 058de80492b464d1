"""Index-based scanners for ``[[wikilinks]]`` and ``[text](url)`` links.

Both scanners walk the text once, honour backslash escapes and jump over the
code regions they are given, so the same rules apply whether the input is a
single text node or a whole document body.
"""

from bisect import bisect_right
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .models import LinkReference
from .utils import slugify_anchor, split_anchor


Span = Tuple[int, int]


@dataclass(frozen=True)
class BracketMatch:
    """A reference found in text; ``end`` is exclusive."""

    start: int
    end: int
    reference: LinkReference


class _CodeRegions:
    """Sorted, non-overlapping code spans with O(log n) membership."""

    def __init__(self, spans: Sequence[Span]) -> None:
        self._spans = sorted(spans)
        self._starts = [start for start, _ in self._spans]

    def end_of(self, pos: int) -> Optional[int]:
        """End of the region containing ``pos``, or None."""
        idx = bisect_right(self._starts, pos) - 1
        if idx >= 0 and pos < self._spans[idx][1]:
            return self._spans[idx][1]
        return None


def split_display(content: str) -> Tuple[str, Optional[str]]:
    """Split wikilink content on the first unescaped ``|``.

    Returns:
        Tuple of (target, display); display is None when absent or blank
    """
    i = 0
    while i < len(content):
        char = content[i]
        if char == "\\":
            i += 2
            continue
        if char == "|":
            target = content[:i].replace("\\|", "|")
            display = content[i + 1:].strip()
            return target, display or None
        i += 1
    return content.replace("\\|", "|"), None


def scan_wikilinks(text: str, code_spans: Sequence[Span] = ()) -> List[BracketMatch]:
    """Find ``[[target|display]]`` and ``![[target]]`` references.

    A match is abandoned (and the text left literal) when the brackets are
    not closed on the same line, the target is blank, a code region is
    entered, or another ``[[`` opens first; scanning resumes at that inner
    ``[[``.
    """
    regions = _CodeRegions(code_spans)
    matches: List[BracketMatch] = []
    length = len(text)
    i = 0

    while i < length:
        region_end = regions.end_of(i)
        if region_end is not None:
            i = region_end
            continue

        char = text[i]
        if char == "\\":
            i += 2
            continue

        is_image = char == "!" and text.startswith("[[", i + 1)
        if not is_image and not text.startswith("[[", i):
            i += 1
            continue

        content_start = i + (3 if is_image else 2)
        close, resume = _find_wikilink_close(text, content_start, regions)
        if close is None:
            i = resume if resume > i else i + 1
            continue

        target, display = split_display(text[content_start:close])
        if not target.strip():
            i = close + 2
            continue

        anchor = None
        if not is_image:
            _, raw_anchor = split_anchor(target)
            if raw_anchor:
                anchor = slugify_anchor(raw_anchor) or None

        matches.append(BracketMatch(
            start=i,
            end=close + 2,
            reference=LinkReference(
                raw_target=target.strip(),
                display_text=display,
                anchor=anchor,
                is_image=is_image,
            ),
        ))
        i = close + 2

    return matches


def _find_wikilink_close(text: str, pos: int, regions: _CodeRegions) -> Tuple[Optional[int], int]:
    """Locate the closing ``]]``.

    Returns:
        Tuple of (index of the closing brackets or None, index to resume at)
    """
    length = len(text)
    while pos < length:
        if regions.end_of(pos) is not None:
            return None, pos
        char = text[pos]
        if char == "\\":
            pos += 2
            continue
        if char == "\n":
            return None, pos
        if char == "]":
            if text.startswith("]]", pos):
                return pos, pos + 2
            return None, pos
        if text.startswith("[[", pos):
            return None, pos
        pos += 1
    return None, length


def scan_markdown_links(text: str, code_spans: Sequence[Span] = ()) -> List[BracketMatch]:
    """Find inline ``[label](destination "title")`` links and images.

    Wikilinks are skipped as a whole so their inner brackets are never read
    as a standard link.
    """
    regions = _CodeRegions(code_spans)
    matches: List[BracketMatch] = []
    length = len(text)
    i = 0

    while i < length:
        region_end = regions.end_of(i)
        if region_end is not None:
            i = region_end
            continue

        char = text[i]
        if char == "\\":
            i += 2
            continue
        if char != "[":
            i += 1
            continue

        if text.startswith("[[", i):
            close, resume = _find_wikilink_close(text, i + 2, regions)
            i = close + 2 if close is not None else max(resume, i + 1)
            continue

        match = _parse_inline_link(text, i, regions)
        if match is None:
            i += 1
            continue
        matches.append(match)
        i = match.end

    return matches


def _parse_inline_link(text: str, open_pos: int, regions: _CodeRegions) -> Optional[BracketMatch]:
    length = len(text)
    pos = open_pos + 1

    while pos < length and text[pos] != "]":
        if regions.end_of(pos) is not None or text.startswith("\n\n", pos):
            return None
        if text[pos] == "[":
            return None
        pos += 2 if text[pos] == "\\" else 1
    if pos >= length:
        return None

    label = text[open_pos + 1:pos]
    if not label.strip() or not text.startswith("(", pos + 1):
        return None

    dest_start = pos + 2
    depth = 0
    pos = dest_start
    while pos < length:
        char = text[pos]
        if char == "\\":
            pos += 2
            continue
        if char == "\n":
            return None
        if char == "(":
            depth += 1
        elif char == ")":
            if depth == 0:
                break
            depth -= 1
        pos += 1
    if pos >= length:
        return None

    url = _destination_url(text[dest_start:pos])
    if not url:
        return None

    is_image = open_pos > 0 and text[open_pos - 1] == "!" and not (
        open_pos > 1 and text[open_pos - 2] == "\\"
    )
    _, raw_anchor = split_anchor(url)
    return BracketMatch(
        start=open_pos - 1 if is_image else open_pos,
        end=pos + 1,
        reference=LinkReference(
            raw_target=url,
            display_text=label.strip(),
            anchor=(slugify_anchor(raw_anchor) or None) if raw_anchor else None,
            is_image=is_image,
        ),
    )


def _destination_url(destination: str) -> str:
    """Strip an optional title and angle brackets from a link destination."""
    destination = destination.strip()
    if destination.startswith("<"):
        close = destination.find(">")
        if close != -1:
            return destination[1:close].strip()
    return destination.split(None, 1)[0] if destination else ""
