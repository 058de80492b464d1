"""
Tests for the corpus snapshot and the content directory loader.
"""

from pathlib import Path

import pytest
from conftest import write_file

from vaultlinks.corpus import Corpus, load_corpus, parse_frontmatter, strip_frontmatter
from vaultlinks.errors import CorpusError
from vaultlinks.models import Document, DocumentLocation, LocationKind


class TestDocument:

    def test_location_from_id(self):
        assert Document(id="trip/index", slug="trip", collection="posts").location == DocumentLocation.folder_based("trip")
        assert Document(id="index", slug="home", collection="pages").is_folder_based
        assert Document(id="notes", slug="notes", collection="posts").location.kind is LocationKind.FILE_BASED
        assert not Document(id="notes/indexing", slug="x", collection="posts").is_folder_based

    def test_title_falls_back_to_slug(self):
        assert Document(id="a", slug="a", collection="posts").title == "a"
        assert Document(id="a", slug="a", collection="posts", frontmatter={"title": " A "}).title == "A"

    def test_frozen(self):
        document = Document(id="a", slug="a", collection="posts")
        with pytest.raises(AttributeError):
            document.slug = "b"


class TestCorpus:

    def test_lookup(self, corpus):
        assert corpus.get("posts", "intro").title == "Welcome Aboard"
        assert corpus.get("posts", "Intro") is None
        assert corpus.find("posts", "Intro").slug == "intro"
        assert corpus.find("pages", "intro") is None

    def test_find_post_slug_then_title(self, corpus):
        assert corpus.find_post("getting started").slug == "getting-started"
        assert corpus.find_post("Welcome Aboard").slug == "intro"
        assert corpus.find_post("Nope") is None
        assert corpus.find_post("") is None

    def test_collections(self, corpus):
        assert [d.slug for d in corpus.posts] == ["getting-started", "intro", "travel"]
        assert [d.slug for d in corpus.for_each_document("pages")] == ["about"]
        assert corpus.for_each_document("unknown") == ()
        assert len(corpus) == 5

    def test_collisions_first_wins(self):
        first = Document(id="my-post", slug="my-post", collection="posts")
        second = Document(id="My Post", slug="My Post", collection="posts")
        corpus = Corpus([first, second])
        assert corpus.find("posts", "my post") is first
        assert corpus.get("posts", "My Post") is second
        assert corpus.collisions == [("posts", "my-post", "My Post")]


class TestLoadCorpus:

    def test_loads_collections(self, content_dir: Path):
        corpus = load_corpus(content_dir)
        assert sorted(d.slug for d in corpus.posts) == ["a", "b", "target-post", "travel"]
        assert [d.slug for d in corpus.for_each_document("pages")] == ["about"]

    def test_folder_based_documents(self, content_dir: Path):
        travel = load_corpus(content_dir).get("posts", "travel")
        assert travel.id == "travel/index"
        assert travel.location == DocumentLocation.folder_based("travel")
        assert travel.title == "Travel"

    def test_drafts(self, content_dir: Path):
        assert load_corpus(content_dir).get("posts", "draft") is None
        assert load_corpus(content_dir, include_drafts=True).get("posts", "draft") is not None

    def test_underscore_folders_excluded(self, content_dir: Path):
        assert all("_templates" not in d.id for d in load_corpus(content_dir))

    def test_frontmatter_slug_wins(self, tmp_path: Path):
        write_file(tmp_path / "posts" / "File Name.md", "---\nslug: custom/slug\n---\nBody\n")
        write_file(tmp_path / "posts" / "Other Name.md", "Body\n")
        corpus = load_corpus(tmp_path)
        assert sorted(d.slug for d in corpus.posts) == ["custom/slug", "other-name"]

    def test_invalid_frontmatter_keeps_document(self, tmp_path: Path):
        write_file(tmp_path / "posts" / "broken.md", "---\ntitle: [unclosed\n---\nBody\n")
        (document,) = load_corpus(tmp_path).posts
        assert document.slug == "broken"
        assert document.frontmatter == {}

    def test_missing_directory(self, tmp_path: Path):
        with pytest.raises(CorpusError):
            load_corpus(tmp_path / "nope")


class TestFrontmatter:

    def test_parse_and_strip(self):
        text = "---\ntitle: Hello\ntags: [a, b]\n---\nBody text\n"
        assert parse_frontmatter(text) == {"title": "Hello", "tags": ["a", "b"]}
        assert strip_frontmatter(text).strip() == "Body text"

    def test_toml_frontmatter(self):
        text = '+++\ntitle = "Hello"\n+++\nBody\n'
        assert parse_frontmatter(text) == {"title": "Hello"}

    def test_no_frontmatter(self):
        assert parse_frontmatter("Just text") == {}
        assert strip_frontmatter("Just text") == "Just text"
