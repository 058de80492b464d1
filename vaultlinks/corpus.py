"""Read-only document corpus and the content directory loader."""

from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

import frontmatter
import yaml

from .errors import CorpusError
from .logger import logger
from .models import COLLECTIONS, INDEX_MARKER, Collection, Document
from .utils import MARKDOWN_EXTENSIONS, slugify_path, yield_files


DEFAULT_EXCLUDES = [r"^\.", r"^_"]


class Corpus:
    """Immutable snapshot of every document, indexed per collection.

    Passed explicitly into every transform and resolve call.
    """

    def __init__(self, documents: Iterable[Document] = ()) -> None:
        self._documents: Tuple[Document, ...] = tuple(documents)
        by_collection: Dict[str, List[Document]] = {name: [] for name in COLLECTIONS}
        self._by_slug: Dict[Tuple[str, str], Document] = {}
        self._by_key: Dict[Tuple[str, str], Document] = {}
        self.collisions: List[Tuple[str, str, str]] = []

        for document in self._documents:
            by_collection.setdefault(document.collection, []).append(document)
            self._by_slug.setdefault((document.collection, document.slug), document)

            key = (document.collection, slugify_path(document.slug))
            existing = self._by_key.get(key)
            if existing is None:
                self._by_key[key] = document
            elif existing.id != document.id:
                # First document wins the normalized slug
                self.collisions.append((document.collection, existing.id, document.id))
                logger.warning(
                    f"Slug collision in {document.collection}: '{document.id}' and "
                    f"'{existing.id}' both normalize to '{key[1]}'"
                )

        self._by_collection: Dict[str, Tuple[Document, ...]] = {
            name: tuple(docs) for name, docs in by_collection.items()
        }

    def __iter__(self) -> Iterator[Document]:
        return iter(self._documents)

    def __len__(self) -> int:
        return len(self._documents)

    def for_each_document(self, collection: str) -> Tuple[Document, ...]:
        """Documents of one collection, in load order."""
        return self._by_collection.get(collection, ())

    @property
    def posts(self) -> Tuple[Document, ...]:
        return self.for_each_document(Collection.POSTS.value)

    def get(self, collection: str, slug: str) -> Optional[Document]:
        """Exact slug lookup."""
        return self._by_slug.get((collection, slug))

    def find(self, collection: str, slug: str) -> Optional[Document]:
        """Lookup by normalized slug."""
        return self._by_key.get((collection, slugify_path(slug)))

    def find_post(self, link_text: str) -> Optional[Document]:
        """Resolve a wikilink target against posts: slug first, then title."""
        target = slugify_path(link_text)
        if not target:
            return None
        post = self.find(Collection.POSTS.value, target)
        if post is not None:
            return post
        for candidate in self.posts:
            if slugify_path(candidate.title) == target:
                return candidate
        return None


def load_corpus(
    content_dir: Path,
    collections: Sequence[str] = COLLECTIONS,
    include_drafts: bool = False,
    excludes: Optional[List[str]] = None,
) -> Corpus:
    """Load every markdown document below ``<content_dir>/<collection>/``.

    Args:
        content_dir: Content root holding one folder per collection
        collections: Collections to load; missing folders are skipped
        include_drafts: Keep documents whose frontmatter sets ``draft: true``
        excludes: Regex patterns for file and folder names to skip

    Returns:
        Corpus snapshot

    Raises:
        CorpusError: If the content directory does not exist
    """
    content_dir = Path(content_dir)
    if not content_dir.is_dir():
        raise CorpusError(f"Content directory not found: {content_dir}")

    if excludes is None:
        excludes = DEFAULT_EXCLUDES

    documents: List[Document] = []
    drafts = 0
    for collection in collections:
        collection_dir = content_dir / collection
        if not collection_dir.is_dir():
            logger.debug(f"No '{collection}' folder in {content_dir}")
            continue

        for file_path in yield_files(collection_dir, MARKDOWN_EXTENSIONS, excludes=excludes):
            document = _load_document(file_path, collection_dir, collection)
            if document is None:
                continue
            if document.is_draft and not include_drafts:
                drafts += 1
                continue
            documents.append(document)

    logger.info(f"Loaded {len(documents)} documents from {content_dir} ({drafts} drafts skipped)")
    return Corpus(documents)


def _load_document(file_path: Path, collection_dir: Path, collection: str) -> Optional[Document]:
    try:
        body = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Failed to read {file_path}: {e}")
        return None

    document_id = file_path.relative_to(collection_dir).with_suffix("").as_posix()
    metadata = parse_frontmatter(body, str(file_path))

    slug = metadata.get("slug")
    if not isinstance(slug, str) or not slug.strip():
        slug = _slug_from_id(document_id)

    return Document(
        id=document_id,
        slug=slug.strip().strip("/"),
        collection=collection,
        body=body,
        frontmatter=metadata,
    )


def parse_frontmatter(text: str, source: str = "<string>") -> Dict[str, Any]:
    """Frontmatter metadata of a document; empty when it cannot be parsed."""
    try:
        metadata, _ = frontmatter.parse(text)
    except (yaml.YAMLError, ValueError, TypeError) as e:
        logger.warning(f"Invalid frontmatter in {source}: {e}")
        return {}
    return dict(metadata)


def strip_frontmatter(text: str) -> str:
    """Document body without its frontmatter block."""
    try:
        _, content = frontmatter.parse(text)
    except (yaml.YAMLError, ValueError, TypeError) as e:
        logger.warning(f"Invalid frontmatter, using raw body: {e}")
        return text
    return content


def _slug_from_id(document_id: str) -> str:
    if document_id.endswith("/" + INDEX_MARKER):
        document_id = document_id[: -len(INDEX_MARKER) - 1]
    return slugify_path(document_id) or INDEX_MARKER
