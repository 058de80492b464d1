"""Data models for vaultlinks."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional


INDEX_MARKER = "index"


class Collection(Enum):
    """Content collections served by the site."""
    POSTS = "posts"
    PAGES = "pages"
    PROJECTS = "projects"
    DOCS = "docs"


COLLECTIONS = tuple(c.value for c in Collection)
SPECIAL = "special"


class LocationKind(Enum):
    """Where a document's attachments live."""
    FOLDER_BASED = "folder"  # posts/my-post/index.md
    FILE_BASED = "file"      # posts/my-post.md


class CollapseState(Enum):
    """Initial state of a callout."""
    NONE = ""
    EXPANDED = "+"
    COLLAPSED = "-"


@dataclass
class Node:
    """A node of the document tree.

    The vocabulary follows mdast: ``root``, ``paragraph``, ``heading``,
    ``blockquote``, ``list``, ``listItem``, ``text``, ``emphasis``,
    ``strong``, ``inlineCode``, ``code``, ``link``, ``image``, ``html``,
    ``break`` and ``thematicBreak``. ``properties`` holds presentation
    metadata handed to the renderer as element attributes.
    """

    type: str
    value: Optional[str] = None
    children: Optional[List["Node"]] = None
    url: Optional[str] = None
    title: Optional[str] = None
    alt: Optional[str] = None
    lang: Optional[str] = None
    depth: Optional[int] = None
    ordered: Optional[bool] = None
    properties: Dict[str, Any] = field(default_factory=dict)

    @property
    def class_names(self) -> List[str]:
        names = self.properties.get("className") or []
        if isinstance(names, str):
            return [names]
        return list(names)

    def add_class(self, name: str) -> None:
        """Append a class name, keeping the existing ones."""
        names = self.class_names
        if name not in names:
            names.append(name)
        self.properties["className"] = names

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a plain dictionary, dropping unset fields."""
        data: Dict[str, Any] = {"type": self.type}
        for name in ("value", "url", "title", "alt", "lang", "depth", "ordered"):
            attr = getattr(self, name)
            if attr is not None:
                data[name] = attr
        if self.properties:
            data["properties"] = dict(self.properties)
        if self.children is not None:
            data["children"] = [child.to_dict() for child in self.children]
        return data


def text_node(value: str) -> Node:
    return Node(type="text", value=value)


def html_node(value: str) -> Node:
    return Node(type="html", value=value)


@dataclass(frozen=True)
class DocumentLocation:
    """Folder-based or file-based placement of a document.

    Folder-based documents (``<collection>/<slug>/index.md``) own a directory
    and keep their attachments beside them; file-based documents share the
    collection's attachments folder.
    """

    kind: LocationKind
    slug: Optional[str] = None

    @classmethod
    def folder_based(cls, slug: str) -> "DocumentLocation":
        return cls(LocationKind.FOLDER_BASED, slug)

    @classmethod
    def file_based(cls) -> "DocumentLocation":
        return cls(LocationKind.FILE_BASED)

    @classmethod
    def from_id(cls, document_id: str, slug: str) -> "DocumentLocation":
        """Infer the location from a content id such as ``my-post/index``."""
        document_id = document_id.replace("\\", "/")
        if document_id == INDEX_MARKER or document_id.endswith("/" + INDEX_MARKER):
            return cls.folder_based(slug)
        return cls.file_based()

    @property
    def is_folder_based(self) -> bool:
        return self.kind is LocationKind.FOLDER_BASED


@dataclass(frozen=True)
class Document:
    """One content entry supplied by the content-loading layer."""

    id: str
    slug: str
    collection: str
    body: str = ""
    frontmatter: Mapping[str, Any] = field(default_factory=dict, compare=False, hash=False)
    location: Optional[DocumentLocation] = None

    def __post_init__(self) -> None:
        if self.location is None:
            object.__setattr__(self, "location", DocumentLocation.from_id(self.id, self.slug))

    @property
    def is_folder_based(self) -> bool:
        return self.location.is_folder_based

    @property
    def title(self) -> str:
        title = self.frontmatter.get("title")
        if isinstance(title, str) and title.strip():
            return title.strip()
        return self.slug

    @property
    def is_draft(self) -> bool:
        return self.frontmatter.get("draft") is True


@dataclass(frozen=True)
class LinkReference:
    """A reference parsed from ``[[...]]`` or ``[text](url)`` syntax."""

    raw_target: str
    display_text: Optional[str] = None
    anchor: Optional[str] = None
    is_image: bool = False


@dataclass(frozen=True)
class ResolvedRoute:
    """Canonical site path for a reference."""

    url: str
    collection: Optional[str] = None
    slug: Optional[str] = None


@dataclass
class WikilinkMatch:
    """A reference extracted from raw text, for backlinks and audits."""

    link: str
    display: str
    slug: str
    start: int = -1
    end: int = -1

    def to_dict(self) -> Dict[str, str]:
        return {"link": self.link, "display": self.display, "slug": self.slug}


@dataclass
class WikilinkAudit:
    """Wikilinks of one document split by whether they resolve to a post."""

    valid: List[WikilinkMatch] = field(default_factory=list)
    invalid: List[WikilinkMatch] = field(default_factory=list)


@dataclass(frozen=True)
class CalloutMapping:
    """Presentation of a callout type."""

    type: str
    icon: str
    title: str


@dataclass
class LinkedMention:
    """A document referencing a target post."""

    title: str
    slug: str
    excerpt: str

    def to_dict(self) -> Dict[str, str]:
        return {"title": self.title, "slug": self.slug, "excerpt": self.excerpt}


@dataclass
class TransformResult:
    """Statistics of one document's transform pass."""

    wikilinks: int = 0
    images: int = 0
    standard_links: int = 0
    embeds: int = 0
    callouts: int = 0
    warnings: List[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return any((self.wikilinks, self.images, self.standard_links, self.embeds, self.callouts))
