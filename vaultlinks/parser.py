"""Markdown text to document tree, via markdown-it-py.

Only CommonMark is parsed; wikilinks, callouts and embeds stay plain text
and links here and are picked up by the transform passes.
"""

from typing import List, Optional

from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode

from .logger import logger
from .models import Node, text_node


# markdown-it node type -> tree node type
NODE_TYPES = {
    "paragraph": "paragraph",
    "blockquote": "blockquote",
    "bullet_list": "list",
    "ordered_list": "list",
    "list_item": "listItem",
    "em": "emphasis",
    "strong": "strong",
    "hardbreak": "break",
    "hr": "thematicBreak",
}


# Escaped brackets stay separate text runs so "\[[" never reads as "[["
BRACKET_ESCAPES = ("[", "]", "!")


def create_markdown() -> MarkdownIt:
    md = MarkdownIt("commonmark")
    md.disable("text_join")
    return md


_MD = create_markdown()


def parse_markdown(text: str, md: Optional[MarkdownIt] = None) -> Node:
    """Parse a Markdown body (frontmatter already removed) into a ``root`` node."""
    md = md or _MD
    syntax_tree = SyntaxTreeNode(md.parse(text))
    return Node(type="root", children=_convert_children(syntax_tree.children))


def _convert_children(children: List[SyntaxTreeNode]) -> List[Node]:
    converted: List[Node] = []
    # Index of the last plain text node softbreaks may join
    joinable: Optional[int] = None

    for child in children:
        if child.type == "inline":
            converted.extend(_convert_children(child.children))
            joinable = None
            continue

        if child.type in ("text", "softbreak") or (
            child.type == "text_special" and child.content not in BRACKET_ESCAPES
        ):
            value = "\n" if child.type == "softbreak" else child.content
            if joinable is not None:
                converted[joinable].value += value
            else:
                converted.append(text_node(value))
                joinable = len(converted) - 1
            continue

        joinable = None
        node = _convert_node(child)
        if node is not None:
            converted.append(node)
    return converted


def _convert_node(node: SyntaxTreeNode) -> Optional[Node]:
    node_type = node.type

    if node_type == "text_special":
        return text_node(node.content)
    if node_type == "heading":
        return Node(type="heading", depth=int(node.tag[1:]), children=_convert_children(node.children))
    if node_type in ("bullet_list", "ordered_list"):
        return Node(
            type="list",
            ordered=node_type == "ordered_list",
            children=_convert_children(node.children),
        )
    if node_type == "code_inline":
        return Node(type="inlineCode", value=node.content)
    if node_type in ("fence", "code_block"):
        info = (node.info or "").strip()
        return Node(
            type="code",
            lang=info.split()[0] if info else None,
            value=node.content[:-1] if node.content.endswith("\n") else node.content,
        )
    if node_type in ("html_block", "html_inline"):
        return Node(type="html", value=node.content.rstrip("\n"))
    if node_type == "link":
        return Node(
            type="link",
            url=str(node.attrs.get("href", "")),
            title=_optional_attr(node, "title"),
            children=_convert_children(node.children),
        )
    if node_type == "image":
        return Node(
            type="image",
            url=str(node.attrs.get("src", "")),
            title=_optional_attr(node, "title"),
            alt=node.content,
        )

    mapped = NODE_TYPES.get(node_type)
    if mapped is None:
        logger.debug(f"Keeping unmapped markdown node '{node_type}'")
        mapped = node_type
    if mapped in ("break", "thematicBreak"):
        return Node(type=mapped)
    return Node(type=mapped, children=_convert_children(node.children))


def _optional_attr(node: SyntaxTreeNode, name: str) -> Optional[str]:
    value = node.attrs.get(name)
    return str(value) if value else None
