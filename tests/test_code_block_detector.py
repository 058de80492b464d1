"""
Tests for code region detection in raw markdown.
"""

import textwrap

from vaultlinks.code_block_detector import BlockType, CodeBlockDetector, code_spans


def detect(content):
    return CodeBlockDetector().detect_code_blocks(content)


def covered(content, needle):
    pos = content.index(needle)
    return any(start <= pos < end for start, end in code_spans(content))


class TestFencedBlocks:

    def test_backtick_and_tilde_fences(self):
        content = textwrap.dedent("""\
            Intro
            ```python
            print("[[x]]")
            ```
            Middle
            ~~~
            [[y]]
            ~~~
            """)
        blocks = detect(content)
        assert [b.block_type for b in blocks] == [BlockType.FENCED_BACKTICK, BlockType.FENCED_TILDE]
        assert blocks[0].language == "python"
        assert content[blocks[0].start_pos:blocks[0].end_pos].startswith("```python")
        assert covered(content, "[[x]]")
        assert covered(content, "[[y]]")
        assert not covered(content, "Middle")

    def test_unclosed_fence_runs_to_end(self):
        content = "Text\n```\n[[inside]]\nmore"
        (block,) = detect(content)
        assert block.end_pos == len(content)

    def test_backticks_inside_fence_are_not_inline_code(self):
        content = "```\n`a` b\n```\n"
        assert len(detect(content)) == 1


class TestInlineCode:

    def test_single_and_double_backticks(self):
        content = "a `one` b ``two ` inner`` c"
        blocks = detect(content)
        assert [content[b.start_pos:b.end_pos] for b in blocks] == ["`one`", "``two ` inner``"]
        assert all(b.block_type is BlockType.INLINE_CODE for b in blocks)

    def test_unmatched_backtick_is_literal(self):
        assert detect("it`s [[fine]]") == []

    def test_escaped_backtick(self):
        assert detect(r"\`not code` here") == []

    def test_span_does_not_cross_blank_line(self):
        assert detect("`start\n\nend`") == []


class TestHtmlCode:

    def test_code_and_pre_elements(self):
        content = "x <code>[[a]]</code> y <pre class='z'>[[b]]</pre>"
        blocks = detect(content)
        assert {b.block_type for b in blocks} == {BlockType.HTML_CODE}
        assert len(blocks) == 2

    def test_tags_written_inside_inline_code_are_literal(self):
        content = "Write `<code>` first, see [[Target Post]], then close with `</code>`."
        blocks = detect(content)
        assert [b.block_type for b in blocks] == [BlockType.INLINE_CODE, BlockType.INLINE_CODE]
        assert not covered(content, "[[Target Post]]")

    def test_closing_tag_inside_inline_code_skipped(self):
        content = "<pre>one `</pre>` two</pre> [[after]]"
        (block,) = detect(content)
        assert block.block_type is BlockType.HTML_CODE
        assert content[block.start_pos:block.end_pos] == "<pre>one `</pre>` two</pre>"
        assert not covered(content, "[[after]]")

    def test_backticks_inside_element_are_part_of_it(self):
        content = "<code>`a`</code> b"
        assert code_spans(content) == [(0, len("<code>`a`</code>"))]


class TestCodeSpans:

    def test_offsets(self):
        assert code_spans("a `b` c") == [(2, 5)]
        assert code_spans("plain text") == []
