"""
Tests for link extraction, linked mentions and wikilink audits.
"""

import textwrap

from vaultlinks import backlinks
from vaultlinks.backlinks import (
    audit_corpus,
    build_backlink_index,
    create_excerpt,
    extract_all_internal_links,
    extract_standard_links,
    extract_wikilinks,
    find_linked_mentions,
    validate_wikilinks,
)
from vaultlinks.code_block_detector import code_spans
from vaultlinks.config import PipelineConfig
from vaultlinks.corpus import Corpus
from vaultlinks.models import Document


def post(slug, body, title=None, collection="posts"):
    frontmatter = {"title": title} if title else {}
    return Document(id=slug, slug=slug, collection=collection, body=body, frontmatter=frontmatter)


class TestExtraction:

    def test_wikilinks(self):
        body = "See [[Getting Started]], [[Guide#Setup|the guide]] and ![[pic.png]]."
        matches = extract_wikilinks(body)
        assert [m.slug for m in matches] == ["getting-started", "guide"]
        assert matches[1].display == "the guide"
        assert matches[1].link == "Guide"
        assert body[matches[0].start:matches[0].end] == "[[Getting Started]]"

    def test_wikilinks_skip_non_posts_and_anchors(self):
        assert extract_wikilinks("[[projects/foo]] [[#Heading]] [[docs/x]]") == []

    def test_code_never_extracted(self):
        body = textwrap.dedent("""\
            Inline `[[In Code]]` and `[x](posts/in-code.md)`.

            ```
            [[Fenced]] [y](posts/fenced.md)
            ```

            ~~~
            [[Tilde]]
            ~~~
            """)
        assert extract_wikilinks(body) == []
        assert extract_standard_links(body) == []

    def test_html_tags_inside_inline_code_do_not_hide_links(self):
        body = "Write `<code>` first, see [[Target Post]], then close with `</code>`."
        assert [m.slug for m in extract_wikilinks(body)] == ["target-post"]

    def test_code_regions_detected_once_per_body(self, monkeypatch):
        calls = []

        def counting_code_spans(text):
            calls.append(text)
            return code_spans(text)

        monkeypatch.setattr(backlinks, "code_spans", counting_code_spans)
        body = "[[Target Post]] and [other](posts/other.md) `[[x]]`"
        matches = extract_all_internal_links(body)
        assert [m.slug for m in matches] == ["target-post", "other"]
        assert calls == [body]

    def test_standard_links_only_posts(self):
        body = "[a](posts/one.md) [b](pages/about.md) [c](two) [d](https://x.com) ![e](posts/pic.md)"
        assert [m.slug for m in extract_standard_links(body)] == ["one", "two"]

    def test_dedupe_by_slug_wikilinks_first(self):
        body = "[std](posts/target-post.md) then [[Target Post]] and [[Other]]"
        matches = extract_all_internal_links(body)
        assert [m.slug for m in matches] == ["target-post", "other"]
        assert matches[0].link == "Target Post"

    def test_corpus_maps_titles_to_slugs(self):
        corpus = Corpus([post("intro", "", title="Welcome Aboard")])
        (match,) = extract_wikilinks("[[Welcome Aboard]]", corpus)
        assert match.slug == "intro"


class TestCreateExcerpt:

    def test_short_content_kept_whole(self):
        content = "Line one\n\nsee [[Target]] here"
        start = content.index("[[")
        assert create_excerpt(content, start, start + 10) == "Line one see [[Target]] here"

    def test_partial_words_trimmed_at_cut_edges(self):
        content = "abcdefghij " * 20 + "[[Target]]" + " klmnopqrst" * 20
        start = content.index("[[")
        end = start + len("[[Target]]")
        excerpt = create_excerpt(content, start, end, context=25)
        assert "[[Target]]" in excerpt
        words = excerpt.split(" ")
        assert all(word in ("abcdefghij", "[[Target]]", "klmnopqrst") for word in words)

    def test_match_never_trimmed(self):
        content = "x" * 50 + "[[A]]"
        excerpt = create_excerpt(content, 50, 55, context=10)
        assert excerpt.endswith("[[A]]")


class TestLinkedMentions:

    def test_two_documents_link_target(self):
        documents = [
            post("target-post", "The target.", title="Target Post"),
            post("a", "---\ntitle: A\n---\nIntro text about [[Target Post]] and more.", title="A"),
            post("b", "Also [[Target Post|see this]] here.\nSecond [[Target Post]].", title="B"),
            post("c", "No links at all.", title="C"),
        ]
        mentions = find_linked_mentions(documents, "target-post")
        assert [m.slug for m in mentions] == ["a", "b"]
        assert mentions[0].title == "A"
        assert "[[Target Post]]" in mentions[0].excerpt
        assert "title: A" not in mentions[0].excerpt
        assert "[[Target Post|see this]]" in mentions[1].excerpt

    def test_standard_links_count(self):
        documents = [post("a", "Read [this](posts/target-post.md) first.")]
        (mention,) = find_linked_mentions(documents, "Target Post")
        assert mention.slug == "a"

    def test_self_links_ignored(self):
        documents = [post("target-post", "I link to [[Target Post]] myself.")]
        assert find_linked_mentions(documents, "target-post") == []

    def test_excerpt_context_from_config(self):
        documents = [post("a", "word " * 50 + "[[Target Post]]" + " word" * 50)]
        (mention,) = find_linked_mentions(documents, "target-post", PipelineConfig(excerpt_context=10))
        assert len(mention.excerpt) <= 10 + len("[[Target Post]]") + 10


class TestBacklinkIndex:

    def test_index_covers_every_post(self):
        corpus = Corpus([
            post("target-post", "Body", title="Target Post"),
            post("a", "Link [[Target Post]] and [[Nobody]]", title="A"),
            post("b", "Link [back](posts/a.md)", title="B"),
            post("about", "[[Target Post]] from a page", collection="pages"),
        ])
        index = build_backlink_index(corpus)
        assert set(index) == {"target-post", "a", "b"}
        assert [m.slug for m in index["target-post"]] == ["a"]
        assert [m.slug for m in index["a"]] == ["b"]
        assert index["b"] == []

    def test_mention_collections(self):
        corpus = Corpus([
            post("target-post", "Body", title="Target Post"),
            post("about", "[[Target Post]] from a page", collection="pages"),
        ])
        config = PipelineConfig(mention_collections=("posts", "pages"))
        index = build_backlink_index(corpus, config)
        assert [m.slug for m in index["target-post"]] == ["about"]


class TestValidateWikilinks:

    def test_valid_and_invalid(self):
        posts = [post("getting-started", "", title="Getting Started"), post("intro", "", title="Welcome Aboard")]
        audit = validate_wikilinks(posts, "[[Getting Started]] [[Welcome Aboard]] [[Missing]]")
        assert [m.slug for m in audit.valid] == ["getting-started", "intro"]
        assert [m.link for m in audit.invalid] == ["Missing"]

    def test_audit_corpus(self):
        corpus = Corpus([post("a", "[[B]] [[Ghost]]"), post("b", "no links")])
        audits = audit_corpus(corpus)
        assert [m.slug for m in audits["a"].invalid] == ["ghost"]
        assert audits["b"].valid == [] and audits["b"].invalid == []
