"""
Tests for the standard link transformer.
"""

from conftest import paragraph, root

from vaultlinks.models import Node, text_node
from vaultlinks.standard_links import StandardLinkTransformer, transform_standard_links


def link(url, *, classes=None, properties=None):
    props = dict(properties or {})
    if classes:
        props["className"] = list(classes)
    return Node(type="link", url=url, children=[text_node("label")], properties=props)


def run(*links):
    tree = root(paragraph(*links))
    transform_standard_links(tree)
    return links


class TestStandardLinkTransformer:

    def test_special_targets(self):
        home, missing = run(link("special/home"), link("special/404"))
        assert home.url == "/"
        assert missing.url == "/404"

    def test_post_links_get_wikilink_class(self):
        (node,) = run(link("posts/my-post.md", classes=["fancy"]))
        assert node.url == "/posts/my-post"
        assert node.class_names == ["fancy", "wikilink"]

    def test_class_not_duplicated(self):
        (node,) = run(link("my-post", classes=["wikilink"]))
        assert node.class_names == ["wikilink"]

    def test_pages_and_projects_no_class(self):
        page, project = run(link("pages/about.md"), link("/projects/toolkit"))
        assert page.url == "/about"
        assert project.url == "/projects/toolkit"
        assert "wikilink" not in page.class_names
        assert "wikilink" not in project.class_names

    def test_anchor_reattached_once(self):
        (node,) = run(link("posts/guide.md#Part Two"))
        assert node.url == "/posts/guide#part-two"

    def test_external_and_anchor_links_untouched(self):
        external, anchor = run(link("https://example.com/posts/x"), link("#top"))
        assert external.url == "https://example.com/posts/x"
        assert anchor.url == "#top"
        assert external.class_names == []

    def test_wikilink_nodes_skipped(self):
        (node,) = run(link("/posts/already", properties={"data-wikilink": "Already"}))
        assert node.url == "/posts/already"
        assert "className" not in node.properties

    def test_children_untouched(self):
        (node,) = run(link("posts/x.md"))
        assert node.children[0].value == "label"

    def test_unresolvable_internal_link_left_alone(self):
        tree = root(paragraph(link("/unknown/target.md")))
        transformer = StandardLinkTransformer()
        transformer.transform(tree)
        assert tree.children[0].children[0].url == "/unknown/target.md"
        assert transformer.unresolved == ["/unknown/target.md"]

    def test_corpus_slug(self, corpus):
        node = link("posts/Getting Started.md")
        transform_standard_links(root(paragraph(node)), corpus)
        assert node.url == "/posts/getting-started"

    def test_local_files_and_queries_untouched(self):
        links = run(link("report.pdf"), link("photo.png"), link("me@example.com"), link("?page=2"))
        assert [node.url for node in links] == ["report.pdf", "photo.png", "me@example.com", "?page=2"]
        assert all(node.class_names == [] for node in links)

    def test_local_file_not_reported_unresolved(self):
        tree = root(paragraph(link("report.pdf")))
        transformer = StandardLinkTransformer()
        transformer.transform(tree)
        assert transformer.unresolved == []
        assert transformer.links_rewritten == 0

    def test_dotted_slug_still_a_post(self):
        (node,) = run(link("release-v1.2"))
        assert node.url == "/posts/release-v1.2"
