"""Command-line interface for vaultlinks."""

import argparse
import json
import sys
import traceback
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from . import __title__, __version__
from .backlinks import audit_corpus, find_linked_mentions
from .config import PipelineConfig, find_config, load_config
from .corpus import Corpus, load_corpus
from .errors import VaultLinksError
from .logger import setup_logger
from .models import COLLECTIONS
from .pipeline import MarkdownPipeline


def create_parser() -> argparse.ArgumentParser:
    """Create and configure argument parser.

    Returns:
        Configured ArgumentParser instance
    """
    description = f"""{__title__} ver {__version__}

Resolve Obsidian-style wikilinks, internal links, embeds and callouts in a
content directory laid out as <root>/<collection>/**/*.md, and compute
linked mentions between posts.

Examples:
  # Print the transformed tree of posts/getting-started
  vaultlinks transform ./content posts getting-started

  # Linked mentions of a post, as YAML
  vaultlinks --format yaml mentions ./content getting-started

  # Fail when any post has a wikilink to a missing post
  vaultlinks audit ./content --strict
"""

    parser = argparse.ArgumentParser(
        prog=__title__.lower(),
        description=description,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--verbose", "-v",
        help="Enable verbose logging",
        action="store_true",
    )

    parser.add_argument(
        "--config",
        help="Path to a vaultlinks.toml / vaultlinks.yml file (default: looked up in CONTENT_DIR)",
        type=Path,
        metavar="FILE",
    )

    parser.add_argument(
        "--format",
        help="Output format (default: json)",
        choices=["json", "yaml"],
        default="json",
        dest="output_format",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"{__title__} {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    transform = subparsers.add_parser("transform", help="Print the transformed tree of one document")
    transform.add_argument("content_dir", help="Content root directory", type=Path)
    transform.add_argument("collection", help="Collection of the document", choices=list(COLLECTIONS))
    transform.add_argument("slug", help="Slug of the document")

    mentions = subparsers.add_parser("mentions", help="Print linked mentions of a post")
    mentions.add_argument("content_dir", help="Content root directory", type=Path)
    mentions.add_argument("slug", help="Slug of the referenced post")

    audit = subparsers.add_parser("audit", help="Print valid and invalid wikilinks of every post")
    audit.add_argument("content_dir", help="Content root directory", type=Path)
    audit.add_argument(
        "--strict",
        help="Exit with status 1 when invalid wikilinks exist",
        action="store_true",
    )

    return parser


def resolve_config(args: argparse.Namespace) -> PipelineConfig:
    """Config from --config, a config file in the content directory, or defaults."""
    config_path = args.config or find_config(args.content_dir)
    if config_path is None:
        return PipelineConfig()
    return load_config(config_path)


def dump_output(data: Any, output_format: str) -> str:
    if output_format == "yaml":
        return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
    return json.dumps(data, indent=2, ensure_ascii=False)


def run_transform(args: argparse.Namespace, corpus: Corpus, config: PipelineConfig) -> Dict[str, Any]:
    document = corpus.get(args.collection, args.slug) or corpus.find(args.collection, args.slug)
    if document is None:
        raise VaultLinksError(f"No document '{args.slug}' in {args.collection}")

    tree, result = MarkdownPipeline(corpus, config).transform_document(document)
    return {
        "id": document.id,
        "slug": document.slug,
        "collection": document.collection,
        "result": {
            "wikilinks": result.wikilinks,
            "images": result.images,
            "standard_links": result.standard_links,
            "embeds": result.embeds,
            "callouts": result.callouts,
            "warnings": result.warnings,
        },
        "tree": tree.to_dict(),
    }


def run_mentions(args: argparse.Namespace, corpus: Corpus, config: PipelineConfig) -> List[Dict[str, str]]:
    sources = [
        document
        for collection in config.mention_collections
        for document in corpus.for_each_document(collection)
    ]
    mentions = find_linked_mentions(sources, args.slug, config, corpus)
    return [mention.to_dict() for mention in mentions]


def run_audit(corpus: Corpus) -> Dict[str, Dict[str, List[Dict[str, str]]]]:
    return {
        slug: {
            "valid": [match.to_dict() for match in audit.valid],
            "invalid": [match.to_dict() for match in audit.invalid],
        }
        for slug, audit in audit_corpus(corpus).items()
    }


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI.

    Returns:
        Process exit status
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    # Logs go to stderr so stdout stays parseable
    setup_logger(level="DEBUG" if args.verbose else "WARNING", stream=sys.stderr)

    try:
        config = resolve_config(args)
        corpus = load_corpus(args.content_dir, include_drafts=config.include_drafts)

        if args.command == "transform":
            output = run_transform(args, corpus, config)
        elif args.command == "mentions":
            output = run_mentions(args, corpus, config)
        else:
            output = run_audit(corpus)

        print(dump_output(output, args.output_format))

        if args.command == "audit" and args.strict:
            if any(entry["invalid"] for entry in output.values()):
                return 1
        return 0

    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return 1
    except VaultLinksError as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.verbose:
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
