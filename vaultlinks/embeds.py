"""Media embeds, attachment paths and image captions.

Image nodes pointing at audio, video, PDF or SVG files and image or link
nodes pointing at YouTube / Twitter(X) URLs are replaced by raw ``html``
nodes. The replacement carries no ``url``, so a second pass finds nothing
left to match.
"""

import html
import posixpath
import re
import urllib.parse
from typing import List, Optional

from .config import PipelineConfig
from .logger import logger
from .models import Document, Node, html_node
from .routes import is_external_link
from .tree import Ancestors, rewrite, walk


AUDIO_EXTENSIONS = [".mp3", ".wav", ".ogg", ".m4a", ".3gp", ".flac", ".aac"]
VIDEO_EXTENSIONS = [".mp4", ".webm", ".ogv", ".mov", ".mkv", ".avi"]
PDF_EXTENSIONS = [".pdf"]
SVG_EXTENSIONS = [".svg"]

YOUTUBE_PATTERNS = [
    re.compile(r"^https?://(?:www\.)?youtube\.com/watch\?v=([^&\n?#]+)"),
    re.compile(r"^https?://youtu\.be/([^&\n?#]+)"),
    re.compile(r"^https?://(?:www\.)?youtube\.com/embed/([^&\n?#]+)"),
]

TWITTER_PATTERNS = [
    re.compile(r"^https?://(?:www\.)?twitter\.com/\w+/status/(\d+)"),
    re.compile(r"^https?://(?:www\.)?x\.com/\w+/status/(\d+)"),
]

YOUTUBE_TITLE = "YouTube video player"


def file_extension(url: str) -> str:
    """Lower-cased extension of the URL path, query and fragment ignored."""
    path = urllib.parse.urlsplit(url).path
    return posixpath.splitext(path)[1].lower()


def is_web_url(url: str) -> bool:
    return urllib.parse.urlsplit(url.strip()).scheme.lower() in ("http", "https")


def youtube_video_id(url: str) -> Optional[str]:
    for pattern in YOUTUBE_PATTERNS:
        match = pattern.match(url)
        if match:
            return match.group(1)
    return None


def twitter_post_id(url: str) -> Optional[str]:
    for pattern in TWITTER_PATTERNS:
        match = pattern.match(url)
        if match:
            return match.group(1)
    return None


def resolve_attachment_url(url: str, document: Optional[Document], config: Optional[PipelineConfig] = None) -> str:
    """Map a document-relative image path to the URL it is served from.

    Folder-based documents serve every relative path from their own folder
    (``/<collection>/<slug>/<path>``). File-based documents share one
    attachment folder per collection, so only paths inside it are mapped
    (``/<collection>/attachments/<rest>``). Absolute and external URLs are
    returned unchanged.
    """
    if document is None or not url:
        return url
    if url.startswith("/") or url.startswith("#") or is_external_link(url):
        return url

    config = config or PipelineConfig()
    path = url
    while path.startswith("./"):
        path = path[2:]

    if document.location.is_folder_based:
        return f"/{document.collection}/{document.location.slug}/{path}"

    attachments = config.attachment_folder_name.strip("/") + "/"
    if path.startswith(attachments):
        return f"/{document.collection}/{path}"
    return url


def audio_markup(src: str) -> str:
    return (
        '<div class="audio-embed">\n'
        f'  <audio class="audio-player" controls src="{html.escape(src)}"></audio>\n'
        "</div>"
    )


def video_markup(src: str) -> str:
    return (
        '<div class="video-embed">\n'
        f'  <video class="video-player" controls src="{html.escape(src)}"></video>\n'
        "</div>"
    )


def pdf_markup(src: str, filename: str) -> str:
    src = html.escape(src)
    return (
        '<div class="pdf-embed">\n'
        f'  <iframe class="pdf-viewer" src="{src}"></iframe>\n'
        '  <div class="pdf-info">\n'
        f'    <span class="pdf-filename">{html.escape(filename)}</span>\n'
        f'    <a href="{src}" download class="pdf-download-link" target="_blank" '
        'rel="noopener noreferrer">Download PDF</a>\n'
        "  </div>\n"
        "</div>"
    )


def svg_markup(src: str, alt: str) -> str:
    return (
        '<div class="svg-embed">\n'
        f'  <img src="{html.escape(src)}" alt="{html.escape(alt)}" class="svg-image" />\n'
        "</div>"
    )


def tweet_markup(post_id: str) -> str:
    return (
        '<blockquote class="twitter-tweet" data-twitter-embed data-theme="preferred_color_scheme" '
        f'data-conversation="none"><a href="https://twitter.com/user/status/{html.escape(post_id)}">'
        "</a></blockquote>"
    )


def youtube_markup(video_id: str, title: Optional[str] = None) -> str:
    src = f"https://www.youtube.com/embed/{urllib.parse.quote(video_id, safe='-_')}?rel=0&modestbranding=1"
    return (
        '<div class="youtube-embed">\n'
        "  <iframe\n"
        f'    src="{html.escape(src)}"\n'
        f'    title="{html.escape(title or YOUTUBE_TITLE)}"\n'
        "    allowfullscreen\n"
        '    loading="lazy"\n'
        "  ></iframe>\n"
        "</div>"
    )


def image_embed_markup(url: str, alt: str = "", original_url: Optional[str] = None) -> Optional[str]:
    """Embed markup for an image node's (resolved) URL, or None.

    Args:
        url: Resolved URL the markup points at
        alt: Alt text of the image node
        original_url: URL as written, used for the PDF filename label
    """
    extension = file_extension(url)
    if extension in AUDIO_EXTENSIONS:
        return audio_markup(url)
    if extension in VIDEO_EXTENSIONS:
        return video_markup(url)
    if extension in PDF_EXTENSIONS:
        filename = (original_url or url).rstrip("/").split("/")[-1] or "document.pdf"
        return pdf_markup(url, filename)
    if extension in SVG_EXTENSIONS:
        return svg_markup(url, alt)

    if is_web_url(url):
        post_id = twitter_post_id(url)
        if post_id:
            return tweet_markup(post_id)
        video_id = youtube_video_id(url)
        if video_id:
            return youtube_markup(video_id, alt)
    return None


def link_embed_markup(url: str, title: Optional[str] = None) -> Optional[str]:
    """Links only embed YouTube videos."""
    video_id = youtube_video_id(url)
    if video_id:
        return youtube_markup(video_id, title)
    return None


class EmbedTransformer:
    """Resolves attachment paths and replaces media nodes with embed markup."""

    def __init__(self, document: Optional[Document] = None, config: Optional[PipelineConfig] = None):
        self.document = document
        self.config = config or PipelineConfig()
        self.embeds_created = 0
        self.images_resolved = 0

    def transform(self, tree: Node) -> Node:
        rewrite(tree, self._visit)
        return tree

    def _visit(self, node: Node, ancestors: Ancestors) -> Optional[List[Node]]:
        if not isinstance(node.url, str) or not node.url:
            return None

        if node.type == "image":
            original_url = node.url
            resolved = resolve_attachment_url(original_url, self.document, self.config)
            if resolved != original_url:
                logger.debug(f"Resolved attachment '{original_url}' -> '{resolved}'")
                self.images_resolved += 1
                node.url = resolved
            if not self.config.enable_embeds:
                return None
            markup = image_embed_markup(resolved, node.alt or "", original_url)
        elif node.type == "link" and self.config.enable_embeds:
            markup = link_embed_markup(node.url, node.title)
        else:
            return None

        if markup is None:
            return None
        self.embeds_created += 1
        return [html_node(markup)]


def transform_embeds(
    tree: Node,
    document: Optional[Document] = None,
    config: Optional[PipelineConfig] = None,
) -> Node:
    return EmbedTransformer(document, config).transform(tree)


def add_image_captions(tree: Node) -> int:
    """Copy image titles into ``data-caption`` / ``title`` properties.

    Returns:
        Number of captioned images
    """
    captioned = 0
    for node, _ in walk(tree):
        if node.type == "image" and node.title:
            node.properties["data-caption"] = node.title
            node.properties["title"] = node.title
            captioned += 1
    return captioned
