"""vaultlinks - Obsidian-style links, embeds, callouts and backlinks for static sites."""

__version__ = "0.1.0"
__title__ = "VaultLinks"
__license__ = "MIT"

from .backlinks import build_backlink_index, find_linked_mentions, validate_wikilinks
from .callouts import transform_callouts
from .config import PipelineConfig, load_config
from .corpus import Corpus, load_corpus
from .embeds import transform_embeds
from .models import Document, DocumentLocation, LinkedMention, Node
from .parser import parse_markdown
from .pipeline import MarkdownPipeline
from .routes import is_internal_link, resolve_route
from .standard_links import transform_standard_links
from .wikilinks import transform_wikilinks

__all__ = [
    "MarkdownPipeline",
    "PipelineConfig",
    "load_config",
    "Corpus",
    "load_corpus",
    "Document",
    "DocumentLocation",
    "LinkedMention",
    "Node",
    "parse_markdown",
    "transform_wikilinks",
    "transform_standard_links",
    "transform_embeds",
    "transform_callouts",
    "is_internal_link",
    "resolve_route",
    "build_backlink_index",
    "find_linked_mentions",
    "validate_wikilinks",
    "__version__",
    "__title__",
]
