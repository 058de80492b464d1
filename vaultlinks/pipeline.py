"""Per-document transform pipeline."""

from typing import Optional, Tuple

from .callouts import CalloutTransformer
from .config import PipelineConfig
from .corpus import Corpus, strip_frontmatter
from .embeds import EmbedTransformer, add_image_captions
from .logger import logger
from .models import Collection, Document, Node, TransformResult
from .parser import parse_markdown
from .standard_links import POSTS_URL_PREFIX, StandardLinkTransformer
from .tree import walk
from .wikilinks import WikilinkTransformer


class MarkdownPipeline:
    """Runs every tree transform over one document.

    Pass order: wikilinks, standard links, attachment paths and embeds,
    image captions, callouts.
    """

    def __init__(self, corpus: Optional[Corpus] = None, config: Optional[PipelineConfig] = None):
        """Initialize pipeline.

        Args:
            corpus: Read-only corpus snapshot used for link resolution
            config: Pipeline configuration
        """
        self.corpus = corpus
        self.config = config or PipelineConfig()

    def transform_tree(self, tree: Node, document: Optional[Document] = None) -> TransformResult:
        """Transform a document tree in place.

        Args:
            tree: Root node of the document
            document: Document the tree belongs to, needed for attachment paths

        Returns:
            Counts of rewritten nodes and any warnings
        """
        result = TransformResult()

        wikilinks = WikilinkTransformer(self.corpus, self.config)
        wikilinks.transform(tree)
        result.wikilinks = wikilinks.links_created
        result.images = wikilinks.images_created

        standard_links = StandardLinkTransformer(self.corpus, self.config)
        standard_links.transform(tree)
        result.standard_links = standard_links.links_rewritten
        for url in standard_links.unresolved:
            result.warnings.append(f"Unresolved internal link: {url}")

        embeds = EmbedTransformer(document, self.config)
        embeds.transform(tree)
        result.embeds = embeds.embeds_created

        if self.config.enable_image_captions:
            add_image_captions(tree)

        if self.config.enable_callouts:
            callouts = CalloutTransformer()
            callouts.transform(tree)
            result.callouts = callouts.callouts_created

        if self.corpus is not None and document is not None:
            self._check_wikilink_targets(tree, result)

        name = document.id if document is not None else "<tree>"
        if not result.changed:
            logger.debug(f"{name}: nothing to rewrite")
        else:
            logger.debug(
                f"{name}: {result.wikilinks} wikilinks, {result.standard_links} links, "
                f"{result.embeds} embeds, {result.callouts} callouts"
            )
        return result

    def transform_text(self, text: str, document: Optional[Document] = None) -> Tuple[Node, TransformResult]:
        """Parse Markdown (frontmatter is stripped) and transform the tree."""
        tree = parse_markdown(strip_frontmatter(text))
        return tree, self.transform_tree(tree, document)

    def transform_document(self, document: Document) -> Tuple[Node, TransformResult]:
        return self.transform_text(document.body, document)

    def _check_wikilink_targets(self, tree: Node, result: TransformResult) -> None:
        for node, _ in walk(tree):
            target = node.properties.get("data-wikilink") if node.type == "link" else None
            if not target:
                continue
            slug = node.url.split("#", 1)[0][len(POSTS_URL_PREFIX):]
            if self.corpus.find(Collection.POSTS.value, slug) is None:
                message = f"Wikilink target not found: {target}"
                logger.warning(message)
                result.warnings.append(message)
