"""Link classification and URL-to-route mapping.

Maps the targets authors write (``posts/foo.md``, ``/pages/about``,
``special/home``, ``my-post``) to the routes the site serves.
"""

import re
import urllib.parse
from typing import Optional, Tuple

from .corpus import Corpus
from .models import COLLECTIONS, INDEX_MARKER, SPECIAL, Collection, ResolvedRoute
from .utils import slugify_anchor, slugify_path, split_anchor


_SCHEME_PATTERN = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*:")
# Trailing file extension such as ".pdf" or ".png" (".2" in "v1.2" is not one)
_FILE_EXTENSION_PATTERN = re.compile(r"\.[A-Za-z][A-Za-z0-9]{0,4}$")

ROUTE_PREFIXES = (SPECIAL,) + COLLECTIONS

SPECIAL_ROUTES = {
    "home": "/",
    "404": "/404",
    "projects": "/projects",
    "docs": "/docs",
}


def is_external_link(uri: str) -> bool:
    """Check if URI carries a scheme (``https:``, ``mailto:``, ...) or is protocol-relative."""
    uri = uri.strip()
    return bool(_SCHEME_PATTERN.match(uri)) or uri.startswith("//")


def is_internal_link(url: str) -> bool:
    """Decide whether a link target points at site content.

    Internal targets are ``.md`` files, collection or ``special`` prefixed
    paths (with or without a leading ``/``) and bare slugs without ``/``.
    A bare target only counts as a slug when it carries no query, no ``@``
    and no file extension, so ``report.pdf`` or ``me@example.com`` stay as
    they are.
    """
    url = url.strip()
    if not url or url.startswith("#") or is_external_link(url):
        return False

    link, _ = split_anchor(url)
    link = _strip_relative_prefix(link)
    if not link:
        return False
    if link.lower().endswith(".md"):
        return True
    if _split_prefix(link)[0] is not None:
        return True
    return "/" not in link and is_slug_shaped(link)


def is_slug_shaped(link: str) -> bool:
    """Check that a target without ``/`` reads as a post slug."""
    if "?" in link or "@" in link:
        return False
    return _FILE_EXTENSION_PATTERN.search(link) is None


def strip_folder_index(path: str, collection: str, corpus: Optional[Corpus] = None) -> str:
    """Turn ``<slug>/index`` into ``<slug>``.

    Only the exact two-segment shape is stripped; nested index files keep
    their path. When a corpus is given and the collection really holds a
    document whose slug is ``<slug>/index``, the path is kept too.
    """
    parts = path.split("/")
    if len(parts) != 2 or parts[1] != INDEX_MARKER or not parts[0]:
        return path
    if corpus is not None and corpus.get(collection, path) is not None:
        return path
    return parts[0]


def resolve_route(target: str, corpus: Optional[Corpus] = None) -> Optional[ResolvedRoute]:
    """Map an internal link target to its site route.

    Args:
        target: Raw link target, possibly with ``.md`` suffix and ``#anchor``
        corpus: Read-only corpus used for folder-index checks and to pick
            the canonical slug of a known document

    Returns:
        ResolvedRoute, or None if the target is external or matches no rule
    """
    if not is_internal_link(target):
        return None

    link, raw_anchor = split_anchor(target.strip())
    path = _strip_relative_prefix(link.strip())
    has_md_suffix = path.lower().endswith(".md")
    if has_md_suffix:
        path = path[:-3]

    prefix, rest = _split_prefix(path)
    if prefix == SPECIAL:
        route = ResolvedRoute(url=_special_url(rest), collection=SPECIAL, slug=slugify_path(rest))
    elif prefix is not None:
        route = _collection_route(prefix, rest.strip("/"), corpus)
    elif path.startswith("/"):
        return None
    elif has_md_suffix or "/" not in path:
        route = _collection_route(Collection.POSTS.value, path.strip("/"), corpus)
    else:
        return None

    if route is None:
        return None

    anchor = slugify_anchor(raw_anchor) if raw_anchor else ""
    if anchor and "#" not in route.url:
        route = ResolvedRoute(url=f"{route.url}#{anchor}", collection=route.collection, slug=route.slug)
    return route


def _collection_route(collection: str, rest: str, corpus: Optional[Corpus]) -> Optional[ResolvedRoute]:
    rest = strip_folder_index(rest, collection, corpus)
    slug = slugify_path(urllib.parse.unquote(rest))

    if corpus is not None and slug:
        document = corpus.find(collection, slug)
        if document is not None:
            rest = document.slug

    if collection == Collection.PAGES.value:
        if not rest or rest == INDEX_MARKER:
            return ResolvedRoute(url="/", collection=collection, slug=INDEX_MARKER)
        return ResolvedRoute(url=f"/{rest}", collection=collection, slug=slug)

    if not rest:
        if collection == Collection.POSTS.value:
            return None
        return ResolvedRoute(url=f"/{collection}", collection=collection, slug="")
    return ResolvedRoute(url=f"/{collection}/{rest}", collection=collection, slug=slug)


def _special_url(name: str) -> str:
    name = name.strip("/")
    return SPECIAL_ROUTES.get(name, f"/{name}")


def _split_prefix(path: str) -> Tuple[Optional[str], str]:
    """Split ``posts/x`` or ``/posts/x`` into (``posts``, ``x``)."""
    stripped = path[1:] if path.startswith("/") else path
    head, sep, rest = stripped.partition("/")
    if sep and head in ROUTE_PREFIXES:
        return head, rest
    return None, path


def _strip_relative_prefix(link: str) -> str:
    while link.startswith("./"):
        link = link[2:]
    return link
