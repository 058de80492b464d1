"""Internal ``[text](target)`` links in document trees."""

from typing import List, Optional

from .config import PipelineConfig
from .corpus import Corpus
from .logger import logger
from .models import Node
from .routes import is_internal_link, resolve_route
from .tree import Ancestors, rewrite


POSTS_URL_PREFIX = "/posts/"
WIKILINK_PROPERTY = "data-wikilink"


class StandardLinkTransformer:
    """Rewrites internal link URLs to site routes.

    Links produced by the wikilink pass are left alone. Only the ``url`` and
    class list change; link children are never touched.
    """

    def __init__(self, corpus: Optional[Corpus] = None, config: Optional[PipelineConfig] = None):
        self.corpus = corpus
        self.config = config or PipelineConfig()
        self.links_rewritten = 0
        self.unresolved: List[str] = []

    def transform(self, tree: Node) -> Node:
        rewrite(tree, self._visit)
        return tree

    def _visit(self, node: Node, ancestors: Ancestors) -> Optional[List[Node]]:
        if node.type != "link" or WIKILINK_PROPERTY in node.properties:
            return None
        if not isinstance(node.url, str) or not is_internal_link(node.url):
            return None

        route = resolve_route(node.url, self.corpus)
        if route is None:
            logger.debug(f"No route for internal link '{node.url}'")
            self.unresolved.append(node.url)
            return None

        if route.url != node.url:
            logger.debug(f"Rewrote link '{node.url}' -> '{route.url}'")
            node.url = route.url
        if route.url.startswith(POSTS_URL_PREFIX):
            node.add_class(self.config.wikilink_class)
        self.links_rewritten += 1
        return None


def transform_standard_links(
    tree: Node,
    corpus: Optional[Corpus] = None,
    config: Optional[PipelineConfig] = None,
) -> Node:
    return StandardLinkTransformer(corpus, config).transform(tree)
