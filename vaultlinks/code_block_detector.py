"""Code span detection for raw markdown text.

Used when references are extracted straight from a document body (backlinks,
audits) instead of from a parsed tree, where code is already a separate node.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple


class BlockType(Enum):
    """Types of code blocks."""
    FENCED_BACKTICK = "fenced_backtick"  # ```
    FENCED_TILDE = "fenced_tilde"        # ~~~
    INLINE_CODE = "inline_code"          # `code`
    HTML_CODE = "html_code"              # <code> or <pre>


@dataclass
class CodeBlock:
    """A code region of the document, ``end_pos`` exclusive."""
    block_type: BlockType
    start_pos: int
    end_pos: int
    language: str = ""


_FENCE_OPEN = re.compile(r"^ {0,3}(`{3,}|~{3,})(.*)$")
_BLANK_LINE = re.compile(r"\n[ \t]*\n")
_HTML_CODE_PATTERNS = [
    (re.compile(r"<code\b[^>]*>", re.IGNORECASE), re.compile(r"</code>", re.IGNORECASE)),
    (re.compile(r"<pre\b[^>]*>", re.IGNORECASE), re.compile(r"</pre>", re.IGNORECASE)),
]


class CodeBlockDetector:
    """Finds fenced blocks, inline code spans and HTML code elements."""

    def __init__(self) -> None:
        self.blocks: List[CodeBlock] = []
        self.content = ""

    def detect_code_blocks(self, content: str) -> List[CodeBlock]:
        """Detect all code blocks in the content.

        Fenced blocks are found first, then inline backtick spans, then HTML
        elements. Backticks inside fences and tags inside either are ignored
        by the later passes.

        Args:
            content: Markdown content to analyze

        Returns:
            Code blocks sorted by start position
        """
        self.content = content
        self.blocks = []

        self._detect_fenced_blocks()
        self._detect_inline_code()
        self._detect_html_blocks()

        self.blocks.sort(key=lambda b: b.start_pos)
        return self.blocks

    def spans(self) -> List[Tuple[int, int]]:
        return [(block.start_pos, block.end_pos) for block in self.blocks]

    def _block_at(self, pos: int) -> Optional[CodeBlock]:
        for block in self.blocks:
            if block.start_pos <= pos < block.end_pos:
                return block
        return None

    def _detect_fenced_blocks(self) -> None:
        lines = self.content.splitlines(True)
        current_pos = 0
        i = 0

        while i < len(lines):
            match = _FENCE_OPEN.match(lines[i].rstrip("\r\n"))
            if not match:
                current_pos += len(lines[i])
                i += 1
                continue

            fence = match.group(1)
            start_pos = current_pos
            current_pos += len(lines[i])
            i += 1

            # An unclosed fence runs to the end of the document
            while i < len(lines):
                line = lines[i]
                current_pos += len(line)
                i += 1
                stripped = line.strip()
                if (
                    len(stripped) >= len(fence)
                    and set(stripped) == {fence[0]}
                    and len(line) - len(line.lstrip(" ")) <= 3
                ):
                    break

            block_type = BlockType.FENCED_BACKTICK if fence[0] == "`" else BlockType.FENCED_TILDE
            self.blocks.append(CodeBlock(
                block_type=block_type,
                start_pos=start_pos,
                end_pos=current_pos,
                language=match.group(2).strip(),
            ))

    def _detect_html_blocks(self) -> None:
        for open_pattern, close_pattern in _HTML_CODE_PATTERNS:
            pos = 0
            while True:
                open_match = open_pattern.search(self.content, pos)
                if not open_match:
                    break
                if self._block_at(open_match.start()):
                    pos = open_match.end()
                    continue

                close_match = close_pattern.search(self.content, open_match.end())
                while close_match and self._block_at(close_match.start()):
                    close_match = close_pattern.search(self.content, close_match.end())
                if not close_match:
                    break

                element = CodeBlock(
                    block_type=BlockType.HTML_CODE,
                    start_pos=open_match.start(),
                    end_pos=close_match.end(),
                )
                # Inline spans inside the element belong to it
                self.blocks = [
                    block for block in self.blocks
                    if block.block_type is not BlockType.INLINE_CODE
                    or block.end_pos <= element.start_pos
                    or block.start_pos >= element.end_pos
                ]
                self.blocks.append(element)
                pos = close_match.end()

    def _detect_inline_code(self) -> None:
        """Backtick spans: a run of N backticks closed by the next run of exactly N."""
        content = self.content
        pos = 0
        length = len(content)

        while pos < length:
            block = self._block_at(pos)
            if block:
                pos = block.end_pos
                continue

            char = content[pos]
            if char == "\\":
                pos += 2
                continue
            if char != "`":
                pos += 1
                continue

            run_end = pos
            while run_end < length and content[run_end] == "`":
                run_end += 1
            run_length = run_end - pos

            close_start = self._find_closing_run(run_end, run_length)
            if close_start is None:
                # Literal backticks
                pos = run_end
                continue

            self.blocks.append(CodeBlock(
                block_type=BlockType.INLINE_CODE,
                start_pos=pos,
                end_pos=close_start + run_length,
            ))
            pos = close_start + run_length

    def _find_closing_run(self, start: int, run_length: int) -> Optional[int]:
        content = self.content
        pos = start
        length = len(content)

        while pos < length:
            if content[pos] != "`":
                pos += 1
                continue
            run_end = pos
            while run_end < length and content[run_end] == "`":
                run_end += 1
            if run_end - pos == run_length:
                # Code spans do not cross paragraphs
                if _BLANK_LINE.search(content, start, pos):
                    return None
                return pos
            pos = run_end

        return None


def code_spans(content: str) -> List[Tuple[int, int]]:
    """``(start, end)`` offsets of every code region in content."""
    detector = CodeBlockDetector()
    detector.detect_code_blocks(content)
    return detector.spans()
