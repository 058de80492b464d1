"""Linked mentions (backlinks) and wikilink audits over a corpus.

Document bodies are scanned as raw text with the same rules the tree
transformers apply, with fenced blocks and inline code excluded.
"""

import re
from typing import Dict, Iterable, List, Optional, Sequence, Union

from .code_block_detector import code_spans
from .config import PipelineConfig
from .corpus import Corpus, strip_frontmatter
from .logger import logger
from .models import Collection, Document, LinkedMention, WikilinkAudit, WikilinkMatch
from .routes import is_internal_link, resolve_route
from .scanner import Span, scan_markdown_links, scan_wikilinks
from .utils import slugify_path, split_anchor
from .wikilinks import resolve_wikilink_target


POSTS = Collection.POSTS.value

_NEWLINES = re.compile(r"\n+")


def extract_wikilinks(
    body: str,
    corpus: Optional[Corpus] = None,
    spans: Optional[Sequence[Span]] = None,
) -> List[WikilinkMatch]:
    """Post references written as ``[[...]]``, in document order.

    Image wikilinks, same-page anchors and targets outside posts are skipped.
    ``spans`` are the body's code regions, detected when not given.
    """
    if spans is None:
        spans = code_spans(body)
    matches = []
    for found in scan_wikilinks(body, spans):
        reference = found.reference
        if reference.is_image:
            continue
        link, _ = split_anchor(reference.raw_target)
        link = link.strip()
        route = resolve_wikilink_target(link, corpus)
        if route is None:
            continue
        matches.append(WikilinkMatch(
            link=link,
            display=reference.display_text or link,
            slug=route.slug,
            start=found.start,
            end=found.end,
        ))
    return matches


def extract_standard_links(
    body: str,
    corpus: Optional[Corpus] = None,
    spans: Optional[Sequence[Span]] = None,
) -> List[WikilinkMatch]:
    """Post references written as ``[text](target)``, in document order."""
    if spans is None:
        spans = code_spans(body)
    matches = []
    for found in scan_markdown_links(body, spans):
        reference = found.reference
        if reference.is_image or not is_internal_link(reference.raw_target):
            continue
        route = resolve_route(reference.raw_target, corpus)
        if route is None or route.collection != POSTS or not route.slug:
            continue
        link, _ = split_anchor(reference.raw_target)
        link = link.strip()
        matches.append(WikilinkMatch(
            link=link,
            display=reference.display_text or link,
            slug=route.slug,
            start=found.start,
            end=found.end,
        ))
    return matches


def extract_all_internal_links(body: str, corpus: Optional[Corpus] = None) -> List[WikilinkMatch]:
    """Wikilinks then standard links, one entry per target slug."""
    seen = set()
    unique = []
    spans = code_spans(body)
    matches = extract_wikilinks(body, corpus, spans) + extract_standard_links(body, corpus, spans)
    for match in matches:
        if match.slug in seen:
            continue
        seen.add(match.slug)
        unique.append(match)
    return unique


def create_excerpt(content: str, start: int, end: int, context: int = 100) -> str:
    """Plain text around ``content[start:end]``.

    The window reaches ``context`` characters to each side. A word cut by
    the window edge is dropped, newline runs become single spaces.
    """
    window_start = max(0, start - context)
    window_end = min(len(content), end + context)
    excerpt = content[window_start:window_end]

    if window_start > 0 and not content[window_start - 1].isspace():
        # Never trim into the reference itself
        lead = excerpt[:start - window_start]
        cut = _first_space(lead)
        if cut is not None:
            excerpt = excerpt[cut:]
            window_start += cut

    if window_end < len(content) and not content[window_end].isspace():
        tail_from = end - window_start
        cut = _last_space(excerpt, tail_from)
        if cut is not None:
            excerpt = excerpt[:cut]

    return _NEWLINES.sub(" ", excerpt).strip()


def _first_space(text: str) -> Optional[int]:
    for i, char in enumerate(text):
        if char.isspace():
            return i
    return None


def _last_space(text: str, lower_bound: int) -> Optional[int]:
    for i in range(len(text) - 1, lower_bound - 1, -1):
        if text[i].isspace():
            return i
    return None


def find_linked_mentions(
    documents: Iterable[Document],
    target_slug: str,
    config: Optional[PipelineConfig] = None,
    corpus: Optional[Corpus] = None,
) -> List[LinkedMention]:
    """Documents referencing the post ``target_slug``.

    Args:
        documents: Candidate referencing documents
        target_slug: Slug of the referenced post
        config: Excerpt settings
        corpus: Used to resolve title-style wikilinks to real slugs

    Returns:
        One LinkedMention per referencing document, excerpt taken around its
        first reference to the target
    """
    config = config or PipelineConfig()
    target = slugify_path(target_slug)
    if not target:
        return []

    mentions = []
    for document in documents:
        if document.collection == POSTS and slugify_path(document.slug) == target:
            continue

        body = strip_frontmatter(document.body)
        for match in extract_all_internal_links(body, corpus):
            if match.slug == target:
                mentions.append(LinkedMention(
                    title=document.title,
                    slug=document.slug,
                    excerpt=create_excerpt(body, match.start, match.end, config.excerpt_context),
                ))
                break

    logger.debug(f"Found {len(mentions)} linked mentions of '{target_slug}'")
    return mentions


def build_backlink_index(corpus: Corpus, config: Optional[PipelineConfig] = None) -> Dict[str, List[LinkedMention]]:
    """Linked mentions of every post, from one pass over the source bodies.

    Returns:
        Mapping of post slug to its mentions; posts nobody links get an
        empty list
    """
    config = config or PipelineConfig()
    post_slugs: Dict[str, str] = {}
    for post in corpus.posts:
        post_slugs.setdefault(slugify_path(post.slug), post.slug)
    index: Dict[str, List[LinkedMention]] = {slug: [] for slug in post_slugs.values()}

    for collection in config.mention_collections:
        for document in corpus.for_each_document(collection):
            body = strip_frontmatter(document.body)
            own_key = slugify_path(document.slug) if collection == POSTS else None
            for match in extract_all_internal_links(body, corpus):
                if match.slug == own_key:
                    continue
                post_slug = post_slugs.get(match.slug)
                if post_slug is None:
                    continue
                index[post_slug].append(LinkedMention(
                    title=document.title,
                    slug=document.slug,
                    excerpt=create_excerpt(body, match.start, match.end, config.excerpt_context),
                ))

    total = sum(len(mentions) for mentions in index.values())
    logger.info(f"Built backlink index: {total} mentions across {len(index)} posts")
    return index


def validate_wikilinks(posts: Union[Corpus, Sequence[Document]], body: str) -> WikilinkAudit:
    """Split a body's wikilinks by whether they resolve to an existing post."""
    corpus = posts if isinstance(posts, Corpus) else Corpus(posts)
    audit = WikilinkAudit()
    for match in extract_wikilinks(strip_frontmatter(body), corpus):
        if corpus.find(POSTS, match.slug) is not None:
            audit.valid.append(match)
        else:
            audit.invalid.append(match)
    return audit


def audit_corpus(corpus: Corpus) -> Dict[str, WikilinkAudit]:
    """Wikilink audit of every post, keyed by post slug."""
    audits = {}
    for post in corpus.posts:
        audit = validate_wikilinks(corpus, post.body)
        if audit.invalid:
            logger.warning(f"{post.id}: {len(audit.invalid)} unresolved wikilink(s)")
        audits[post.slug] = audit
    return audits
