"""Traversal and in-place rewriting of document trees."""

from typing import Callable, Iterator, List, Optional, Sequence, Tuple

from .models import Node


Ancestors = Tuple[Node, ...]
Visitor = Callable[[Node, Ancestors], Optional[List[Node]]]


def walk(node: Node, ancestors: Ancestors = ()) -> Iterator[Tuple[Node, Ancestors]]:
    """Yield every node below (and including) ``node`` with its ancestor chain."""
    yield node, ancestors
    for child in node.children or []:
        if isinstance(child, Node):
            yield from walk(child, ancestors + (node,))


def has_ancestor(ancestors: Sequence[Node], types: Sequence[str]) -> bool:
    return any(ancestor.type in types for ancestor in ancestors)


def rewrite(root: Node, visitor: Visitor, post_order: bool = False) -> int:
    """Splice visitor results into each parent's child list.

    The visitor returns None to keep a node or a list of nodes that takes its
    place at the same position. In pre-order mode replacements are not
    descended into; in post-order mode a node's children are rewritten
    before the node itself is visited. Child lists are modified in place.

    Returns:
        Number of nodes replaced
    """
    replaced = 0

    def _visit(parent: Node, ancestors: Ancestors) -> None:
        nonlocal replaced
        if not parent.children:
            return

        chain = ancestors + (parent,)
        new_children: List[Node] = []
        for child in parent.children:
            if not isinstance(child, Node):
                new_children.append(child)
                continue

            if post_order:
                _visit(child, chain)

            replacement = visitor(child, chain)
            if replacement is None:
                if not post_order:
                    _visit(child, chain)
                new_children.append(child)
            else:
                replaced += 1
                new_children.extend(replacement)

        parent.children[:] = new_children

    _visit(root, ())
    return replaced
