"""Obsidian callouts (``> [!type]+ Title``) as styled containers.

A callout blockquote is flattened into an opening ``html`` node, its
remaining children and a closing ``html`` node.
"""

import html
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .logger import logger
from .models import CalloutMapping, CollapseState, Node, html_node
from .tree import Ancestors, rewrite


CALLOUT_PATTERN = re.compile(r"^\[!([\w-]+)\]([+\-]?)(?:[ \t]+(.+))?")

DEFAULT_TYPE = "note"
DEFAULT_ICON = "info"

# Lucide icon paths
ICON_PATHS: Dict[str, str] = {
    "info": '<circle cx="12" cy="12" r="10"/><path d="M12 16v-4"/><path d="m12 8 .01 0"/>',
    "lightbulb": (
        '<path d="M15 14c.2-1 .7-1.7 1.5-2.5 1-.9 1.5-2.2 1.5-3.5A6 6 0 0 0 6 8c0 1 .2 2.2 1.5 3.5.7.7 1.3 '
        '1.5 1.5 2.5"/><path d="M9 18h6"/><path d="M10 22h4"/>'
    ),
    "star": (
        '<polygon points="12,2 15.09,8.26 22,9.27 17,14.14 18.18,21.02 12,17.77 5.82,21.02 7,14.14 '
        '2,9.27 8.91,8.26"/>'
    ),
    "triangle-alert": (
        '<path d="m21.73 18-8-14a2 2 0 0 0-3.48 0l-8 14A2 2 0 0 0 4 21h16a2 2 0 0 0 1.73-3Z"/>'
        '<path d="M12 9v4"/><path d="m12 17 .01 0"/>'
    ),
    "circle-alert": '<circle cx="12" cy="12" r="10"/><path d="M12 8v4"/><path d="m12 16 .01 0"/>',
    "circle-x": '<circle cx="12" cy="12" r="10"/><path d="m15 9-6 6"/><path d="m9 9 6 6"/>',
    "circle-help": (
        '<circle cx="12" cy="12" r="10"/><path d="M9.09 9a3 3 0 0 1 5.83 1c0 2-3 3-3 3"/>'
        '<path d="M12 17h.01"/>'
    ),
    "circle-check": '<circle cx="12" cy="12" r="10"/><path d="m9 12 2 2 4-4"/>',
    "bug": (
        '<path d="m8 2 1.88 1.88"/><path d="M14.12 3.88 16 2"/><path d="M9 7.13v-1a3.003 3.003 0 1 1 6 0v1"/>'
        '<path d="M12 20c-3.3 0-6-2.7-6-6v-3a4 4 0 0 1 4-4h4a4 4 0 0 1 4 4v3c0 3.3-2.7 6-6 6"/>'
        '<path d="M12 20v-9"/><path d="M6.53 9C4.6 8.8 3 7.1 3 5"/><path d="M6 13H2"/>'
        '<path d="M3 21c0-2.1 1.7-3.9 3.8-4"/><path d="M20.97 5c0 2.1-1.6 3.8-3.5 4"/>'
        '<path d="M22 13h-4"/><path d="M17.2 17c2.1.1 3.8 1.9 3.8 4"/>'
    ),
    "code": '<polyline points="16 18 22 12 16 6"/><polyline points="8 6 2 12 8 18"/>',
    "quote": (
        '<path d="M3 21c3 0 7-1 7-8V5c0-1.25-.756-2.017-2-2H4c-1.25 0-2 .75-2 1.972V11c0 1.25.75 2 2 2 1 0 '
        '1 0 1 1v1c0 1-1 2-2 2s-1 .008-1 1.031V20c0 1 0 1 1 1z"/><path d="M15 21c3 0 7-1 7-8V5c0-1.25-.757'
        '-2.017-2-2h-4c-1.25 0-2 .75-2 1.972V11c0 1.25.75 2 2 2h.75c0 2.25.25 4-2.75 4v3c0 1 0 1 1 1z"/>'
    ),
    "file-text": (
        '<path d="M15 2H6a2 2 0 0 0-2 2v16a2 2 0 0 0 2 2h12a2 2 0 0 0 2-2V7Z"/><path d="M14 2v4a2 2 0 0 0 2 2h4"/>'
        '<path d="M10 9H8"/><path d="M16 13H8"/><path d="M16 17H8"/>'
    ),
}

CALLOUT_MAPPINGS: Dict[str, CalloutMapping] = {
    "note": CalloutMapping("note", "info", "Note"),
    "tip": CalloutMapping("tip", "lightbulb", "Tip"),
    "important": CalloutMapping("important", "star", "Important"),
    "warning": CalloutMapping("warning", "triangle-alert", "Warning"),
    "caution": CalloutMapping("caution", "circle-alert", "Caution"),
    "danger": CalloutMapping("caution", "circle-x", "Danger"),
    "info": CalloutMapping("note", "info", "Info"),
    "question": CalloutMapping("important", "circle-help", "Question"),
    "success": CalloutMapping("tip", "circle-check", "Success"),
    "failure": CalloutMapping("caution", "circle-x", "Failure"),
    "bug": CalloutMapping("caution", "bug", "Bug"),
    "example": CalloutMapping("tip", "code", "Example"),
    "quote": CalloutMapping("note", "quote", "Quote"),
    "abstract": CalloutMapping("important", "file-text", "Abstract"),
    "summary": CalloutMapping("important", "file-text", "Summary"),
    "tldr": CalloutMapping("important", "file-text", "TL;DR"),
}

TOGGLE_ICON = (
    '<svg class="callout-toggle-icon" width="16" height="16" viewBox="0 0 24 24" fill="none" '
    'stroke="currentColor" stroke-width="2" stroke-linecap="round" stroke-linejoin="round">'
    '<polyline points="6,9 12,15 18,9"></polyline></svg>'
)

CLOSING_MARKUP = "</div></div>"


@dataclass
class Callout:
    """A parsed callout marker."""

    mapping: CalloutMapping
    collapse_state: CollapseState = CollapseState.NONE
    custom_title: Optional[str] = None

    @property
    def title(self) -> str:
        return self.custom_title or self.mapping.title

    @property
    def is_collapsible(self) -> bool:
        return self.collapse_state is not CollapseState.NONE

    @property
    def is_collapsed(self) -> bool:
        return self.collapse_state is CollapseState.COLLAPSED

    @property
    def class_names(self) -> List[str]:
        names = ["callout", f"callout-{self.mapping.type}"]
        if self.is_collapsible:
            names.append("callout-collapsible")
        if self.is_collapsed:
            names.append("callout-collapsed")
        return names


def get_callout_mapping(callout_type: str) -> CalloutMapping:
    """Mapping for a callout type; unknown types render as notes under their own title."""
    mapping = CALLOUT_MAPPINGS.get(callout_type.lower())
    if mapping is not None:
        return mapping
    return CalloutMapping(
        type=DEFAULT_TYPE,
        icon=DEFAULT_ICON,
        title=callout_type[:1].upper() + callout_type[1:],
    )


def parse_callout_marker(text: str) -> Optional[Tuple[Callout, str]]:
    """Parse ``[!type]`` at the start of a text run.

    Returns:
        (callout, remaining text) or None if the text is no callout marker
    """
    match = CALLOUT_PATTERN.match(text)
    if not match:
        return None

    callout_type, collapse, custom_title = match.groups()
    callout = Callout(
        mapping=get_callout_mapping(callout_type),
        collapse_state=CollapseState(collapse),
        custom_title=custom_title.strip() if custom_title and custom_title.strip() else None,
    )
    return callout, text[match.end():].strip()


def icon_svg(icon: str) -> str:
    path = ICON_PATHS.get(icon, ICON_PATHS[DEFAULT_ICON])
    return (
        '<svg width="16" height="16" viewBox="0 0 24 24" fill="none" stroke="currentColor" '
        'stroke-width="2" stroke-linecap="round" stroke-linejoin="round" '
        f'class="callout-icon">{path}</svg>'
    )


def opening_markup(callout: Callout) -> str:
    toggle = ""
    if callout.is_collapsible:
        expanded = "false" if callout.is_collapsed else "true"
        toggle = (
            f'<button class="callout-toggle" aria-expanded="{expanded}" '
            f'aria-label="Toggle callout content">{TOGGLE_ICON}</button>'
        )
    content_style = ' style="display:none"' if callout.is_collapsed else ""

    return (
        f'<div class="{" ".join(callout.class_names)}">\n'
        '<div class="callout-title">\n'
        f"{icon_svg(callout.mapping.icon)}\n"
        f"<span>{html.escape(callout.title)}</span>\n"
        f"{toggle}\n"
        "</div>\n"
        f'<div class="callout-content"{content_style}>'
    )


class CalloutTransformer:
    """Replaces callout blockquotes, innermost first."""

    def __init__(self):
        self.callouts_created = 0

    def transform(self, tree: Node) -> Node:
        rewrite(tree, self._visit, post_order=True)
        return tree

    def _visit(self, node: Node, ancestors: Ancestors) -> Optional[List[Node]]:
        if node.type != "blockquote" or not node.children:
            return None

        paragraph = node.children[0]
        if paragraph.type != "paragraph" or not paragraph.children:
            return None
        first_text = paragraph.children[0]
        if first_text.type != "text" or not isinstance(first_text.value, str):
            return None

        parsed = parse_callout_marker(first_text.value)
        if parsed is None:
            return None
        callout, remaining = parsed

        children = list(node.children)
        if remaining:
            first_text.value = remaining
        else:
            paragraph.children.pop(0)
            if not paragraph.children:
                children.pop(0)

        logger.debug(f"Callout '{callout.mapping.type}' with title '{callout.title}'")
        self.callouts_created += 1
        return [html_node(opening_markup(callout))] + children + [html_node(CLOSING_MARKUP)]


def transform_callouts(tree: Node) -> Node:
    return CalloutTransformer().transform(tree)
