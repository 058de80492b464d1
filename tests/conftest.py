"""
Shared test fixtures.
"""

import textwrap
from pathlib import Path
from typing import Dict, List

import pytest

from vaultlinks.corpus import Corpus
from vaultlinks.models import Document, Node
from vaultlinks.tree import walk


def write_file(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(content), encoding="utf-8")
    return path


def paragraph(*children: Node) -> Node:
    return Node(type="paragraph", children=list(children))


def root(*children: Node) -> Node:
    return Node(type="root", children=list(children))


def find_nodes(tree: Node, node_type: str) -> List[Node]:
    return [node for node, _ in walk(tree) if node.type == node_type]


@pytest.fixture
def sample_documents() -> List[Document]:
    """A small site with posts, pages and a folder-based post."""
    return [
        Document(
            id="getting-started",
            slug="getting-started",
            collection="posts",
            body="---\ntitle: Getting Started\n---\nFirst steps.\n",
            frontmatter={"title": "Getting Started"},
        ),
        Document(
            id="intro",
            slug="intro",
            collection="posts",
            body="---\ntitle: Welcome Aboard\n---\nHello.\n",
            frontmatter={"title": "Welcome Aboard"},
        ),
        Document(
            id="travel/index",
            slug="travel",
            collection="posts",
            body="Photos from the trip.\n",
            frontmatter={"title": "Travel"},
        ),
        Document(
            id="about",
            slug="about",
            collection="pages",
            body="About this site.\n",
            frontmatter={"title": "About"},
        ),
        Document(
            id="toolkit",
            slug="toolkit",
            collection="projects",
            body="A project.\n",
            frontmatter={"title": "Toolkit"},
        ),
    ]


@pytest.fixture
def corpus(sample_documents: List[Document]) -> Corpus:
    return Corpus(sample_documents)


@pytest.fixture
def content_dir(tmp_path: Path) -> Path:
    """Content root on disk: <root>/<collection>/**/*.md."""
    root_dir = tmp_path / "content"
    files: Dict[str, str] = {
        "posts/target-post.md": """\
            ---
            title: Target Post
            ---
            The post everybody links to.
            """,
        "posts/a.md": """\
            ---
            title: Post A
            ---
            Before the link, see [[Target Post]] for the details.
            """,
        "posts/b.md": """\
            ---
            title: Post B
            ---
            Another reference to [[Target Post|the target]] here.
            And a broken one: [[Missing Post]].
            """,
        "posts/travel/index.md": """\
            ---
            title: Travel
            ---
            ![[attachments/map.png]]

            > [!tip] Pack light
            > Only carry what you need.
            """,
        "posts/draft.md": """\
            ---
            title: Draft
            draft: true
            ---
            Links to [[Target Post]] but is unpublished.
            """,
        "pages/about.md": """\
            ---
            title: About
            ---
            Read [the intro](posts/target-post.md).
            """,
        "posts/_templates/skip.md": "Ignored template.\n",
    }
    for relative, content in files.items():
        write_file(root_dir / relative, content)
    return root_dir
