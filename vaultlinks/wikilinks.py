"""Obsidian-style ``[[wikilinks]]`` in document trees.

Wikilinks only ever point at posts:

- ``[[Post Title]]`` -> ``/posts/post-title``
- ``[[Post Title|Custom Text]]`` -> same URL, custom display text
- ``[[posts/folder/index]]`` -> ``/posts/folder``
- ``[[Post Title#Some Heading]]`` -> ``/posts/post-title#some-heading``
- ``![[image.png]]`` -> image node, URL left for the embed pass

Targets with a ``/`` that are not under ``posts/`` stay literal text, the
same way Obsidian would not resolve them to a post.
"""

from typing import List, Optional

from .config import PipelineConfig
from .corpus import Corpus
from .logger import logger
from .models import Collection, Node, ResolvedRoute, text_node
from .routes import strip_folder_index
from .scanner import BracketMatch, scan_wikilinks
from .tree import Ancestors, has_ancestor, rewrite
from .utils import slugify_path, split_anchor


POSTS = Collection.POSTS.value
POSTS_PREFIX = POSTS + "/"

# Text below these nodes is never scanned
SKIP_ANCESTORS = ("inlineCode", "code", "link")


def resolve_wikilink_target(link: str, corpus: Optional[Corpus] = None) -> Optional[ResolvedRoute]:
    """Route of a wikilink target (anchor already removed).

    Returns:
        ResolvedRoute in the posts collection, or None when the target is
        empty or points outside posts
    """
    link = link.strip()
    if link.startswith(POSTS_PREFIX):
        path = strip_folder_index(link[len(POSTS_PREFIX):].strip("/"), POSTS, corpus)
        if not path:
            return None
        post = corpus.find(POSTS, path) if corpus is not None else None
        if post is not None:
            path = post.slug
        return ResolvedRoute(url=f"/{POSTS}/{path}", collection=POSTS, slug=slugify_path(path))

    if not link or "/" in link:
        return None

    post = corpus.find_post(link) if corpus is not None else None
    slug = post.slug if post is not None else slugify_path(link)
    if not slug:
        return None
    return ResolvedRoute(url=f"/{POSTS}/{slug}", collection=POSTS, slug=slugify_path(slug))


class WikilinkTransformer:
    """Replaces wikilinks in text nodes with link and image nodes."""

    def __init__(self, corpus: Optional[Corpus] = None, config: Optional[PipelineConfig] = None):
        self.corpus = corpus
        self.config = config or PipelineConfig()
        self.links_created = 0
        self.images_created = 0

    def transform(self, tree: Node) -> Node:
        """Rewrite the tree in place and return it."""
        rewrite(tree, self._visit)
        return tree

    def _visit(self, node: Node, ancestors: Ancestors) -> Optional[List[Node]]:
        if node.type != "text":
            return None
        if has_ancestor(ancestors, SKIP_ANCESTORS):
            return None
        if not isinstance(node.value, str):
            logger.debug(f"Skipping text node with {type(node.value).__name__} value")
            return None
        return self.split_text(node.value)

    def split_text(self, text: str) -> Optional[List[Node]]:
        """Split one text value into text, link and image nodes.

        Returns:
            Replacement nodes in document order, or None when the text holds
            no usable wikilink
        """
        matches = scan_wikilinks(text)
        if not matches:
            return None

        pieces: List[Node] = []
        last = 0
        for match in matches:
            replacement = self.build_node(match)
            if replacement is None:
                # Stays part of the surrounding text
                continue
            if match.start > last:
                pieces.append(text_node(text[last:match.start]))
            pieces.append(replacement)
            last = match.end

        if last == 0:
            return None
        if last < len(text):
            pieces.append(text_node(text[last:]))
        return pieces

    def build_node(self, match: BracketMatch) -> Optional[Node]:
        reference = match.reference
        if reference.is_image:
            self.images_created += 1
            return Node(
                type="image",
                url=reference.raw_target,
                alt=reference.display_text or "",
                title=None,
            )

        link, raw_anchor = split_anchor(reference.raw_target)
        link = link.strip()

        if not link:
            # [[#Heading]] links within the same document
            if not reference.anchor:
                return None
            url = f"#{reference.anchor}"
            wikilink_data = ""
            fallback_text = (raw_anchor or "").strip()
        else:
            route = resolve_wikilink_target(link, self.corpus)
            if route is None:
                logger.debug(f"Leaving wikilink '{reference.raw_target}' unresolved: not a post reference")
                return None
            url = route.url
            if reference.anchor:
                url += f"#{reference.anchor}"
            if link.startswith(POSTS_PREFIX):
                wikilink_data = route.url[len(POSTS_PREFIX) + 1:]
            else:
                wikilink_data = link
            fallback_text = link

        self.links_created += 1
        return Node(
            type="link",
            url=url,
            title=None,
            children=[text_node(reference.display_text or fallback_text)],
            properties={
                "className": [self.config.wikilink_class],
                "data-wikilink": wikilink_data,
                "data-display-override": reference.display_text,
            },
        )


def transform_wikilinks(
    tree: Node,
    corpus: Optional[Corpus] = None,
    config: Optional[PipelineConfig] = None,
) -> Node:
    """Apply :class:`WikilinkTransformer` to a tree."""
    return WikilinkTransformer(corpus, config).transform(tree)
