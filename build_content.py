#!/usr/bin/env python3
"""
Build JSON manifests from the markdown content tree.

Each collection (blog posts, projects) is a directory holding one
subdirectory per item:

    blog/posts/
      day-1-solo-founder/
        index.md        - frontmatter + markdown body
        assets/         - optional images referenced from the body
      tech-stack-decision/
        index.md

Every item is parsed, normalized and written to one JSON array per
collection, newest first, for the browser to fetch.

Usage:
    python build_content.py [--config PATH] [--content-dir PATH] [--output PATH]

Produces:
    data/
      blog-posts.json   - all blog posts
      projects.json     - all projects
      dev-docs.json     - developer documentation (when dev/docs exists)
"""

import argparse
import json
import math
import os
import re
import sys
import tempfile
import time
from datetime import datetime
from pathlib import Path
from typing import Any

from frontmatter import (
    FrontmatterError,
    flag_field,
    parse_date,
    parse_document,
    tags_field,
    text_field,
)
from site_config import CollectionConfig, ConfigError, SiteConfig, load_config


EXCERPT_LENGTH = 200
WORDS_PER_MINUTE = 200
SKIP_DIRS = ('template',)
ABSOLUTE_URL_RE = re.compile(r'^(https?:)?//', re.IGNORECASE)


class ContentRootError(OSError):
    """Raised when a collection's root directory cannot be read."""


# ---------------------------------------------------------------------------
# Field derivation
# ---------------------------------------------------------------------------

def _truncate(text: str, limit: int = EXCERPT_LENGTH) -> str:
    if len(text) > limit:
        return text[:limit] + '...'
    return text


def derive_excerpt(body: str) -> str:
    """First non-empty, non-heading line of the body, capped at 200 chars."""
    for line in body.strip().splitlines():
        line = line.strip()
        if line and not line.startswith('#'):
            return _truncate(line)
    return _truncate(body.strip())


def resolve_image(path: str, url_base: str, slug: str) -> str:
    """Root a relative image path under the item's own directory."""
    if not path:
        return ''
    if ABSOLUTE_URL_RE.match(path) or path.startswith('/'):
        return path
    if path.startswith('./'):
        path = path[2:]
    return f"{url_base}/{slug}/{path}"


def reading_time(body: str) -> int:
    words = len(body.split())
    return max(1, math.ceil(words / WORDS_PER_MINUTE))


# ---------------------------------------------------------------------------
# Item loading
# ---------------------------------------------------------------------------

def build_item(item_dir: Path, collection: CollectionConfig, config: SiteConfig,
               build_date: str) -> dict[str, Any]:
    """Read one item directory into a manifest entry.

    Raises FileNotFoundError if there is no index.md and FrontmatterError if
    the frontmatter is malformed.
    """
    index_path = item_dir / 'index.md'
    if not index_path.is_file():
        raise FileNotFoundError(f"No index.md in {item_dir}")

    content = index_path.read_text(encoding='utf-8')
    fields, body = parse_document(content)

    slug = item_dir.name
    url_base = collection.url_base
    title = text_field(fields, 'title') or 'Untitled'
    tags = tags_field(fields)
    excerpt = derive_excerpt(body)
    image = text_field(fields, 'image') or text_field(fields, 'coverImage')

    if collection.kind == 'post':
        item = {
            'slug': slug,
            'title': title,
            'date': text_field(fields, 'date') or build_date,
            'tags': tags,
            'author': text_field(fields, 'author') or config.default_author,
            'excerpt': excerpt,
            'coverImage': resolve_image(
                text_field(fields, 'coverImage') or text_field(fields, 'image'), url_base, slug
            ),
        }
    elif collection.kind == 'doc':
        item = {
            'slug': slug,
            'title': title,
            'date': text_field(fields, 'date'),
            'tags': tags,
            'excerpt': excerpt,
        }
    else:
        item = {
            'slug': slug,
            'title': title,
            'description': text_field(fields, 'description'),
            'date': text_field(fields, 'date'),
            'tags': tags,
            'excerpt': excerpt,
            'demo': text_field(fields, 'demo'),
            'github': text_field(fields, 'github'),
            'image': resolve_image(image, url_base, slug),
        }

    tldr = text_field(fields, 'tldr')
    if tldr:
        item['tldr'] = tldr

    item['featured'] = flag_field(fields, 'featured')
    item['readingTime'] = reading_time(body)
    item['assetsPath'] = f"{url_base}/{slug}/"
    item['content'] = body
    return item


def sort_items(items: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Newest first; undated or unparseable dates go last in input order."""
    dated = []
    undated = []
    for item in items:
        parsed = parse_date(item.get('date'))
        if parsed is None:
            undated.append(item)
        else:
            dated.append((parsed, item))

    dated.sort(key=lambda pair: pair[0], reverse=True)
    return [item for _, item in dated] + undated


def build_collection(collection: CollectionConfig, config: SiteConfig,
                     build_date: str | None = None) -> list[dict[str, Any]]:
    """Scan one collection directory and return its sorted items."""
    root = config.content_dir / collection.source
    if not root.is_dir():
        raise ContentRootError(f"Content directory not found: {root}")

    build_date = build_date or datetime.now().strftime('%Y-%m-%d')

    try:
        entries = sorted(p for p in root.iterdir() if p.is_dir())
    except OSError as e:
        raise ContentRootError(f"Could not read {root}: {e}") from e

    print(f"Scanning {len(entries)} directories in {root}...")

    items = []
    for item_dir in entries:
        name = item_dir.name
        if name.startswith(('.', '_')) or name in SKIP_DIRS:
            continue

        try:
            item = build_item(item_dir, collection, config, build_date)
        except FileNotFoundError:
            print(f"  Warning: Skipping {name}: no index.md")
            continue
        except FrontmatterError as e:
            print(f"  Warning: Skipping {name}: invalid frontmatter ({e})")
            continue
        except (OSError, UnicodeDecodeError) as e:
            print(f"  Warning: Could not read {item_dir / 'index.md'}: {e}")
            continue

        items.append(item)
        print(f"  Added: {item['title'][:50]}")

    return sort_items(items)


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------

def write_manifest(items: list[dict[str, Any]], path: Path) -> None:
    """Write a manifest atomically: temp file in the same directory, then replace."""
    path.parent.mkdir(parents=True, exist_ok=True)

    with tempfile.NamedTemporaryFile(
        mode='w',
        encoding='utf-8',
        prefix=f".{path.stem}_",
        suffix='.json',
        dir=str(path.parent),
        delete=False,
    ) as tf:
        tmp_path = Path(tf.name)
        json.dump(items, tf, indent=2, ensure_ascii=False)
        tf.write('\n')

    try:
        os.replace(tmp_path, path)
    except OSError:
        tmp_path.unlink(missing_ok=True)
        raise


def build_content(config: SiteConfig, build_date: str | None = None) -> dict[str, list[dict[str, Any]]]:
    """Build every configured collection and write its manifest."""
    # Fail before writing anything if a required collection root is missing
    missing = set()
    for name, collection in config.collections.items():
        root = config.content_dir / collection.source
        if root.is_dir():
            continue
        if not collection.optional:
            raise ContentRootError(f"Content directory not found: {root}")
        missing.add(name)

    results = {}
    for name, collection in config.collections.items():
        if name in missing:
            print(f"=== Skipping {name}: {config.content_dir / collection.source} not found ===")
            print()
            continue
        print(f"=== Building {name} ===")
        items = build_collection(collection, config, build_date)
        out_path = config.output_dir / collection.manifest
        write_manifest(items, out_path)
        print(f"  Written: {out_path} ({len(items)} {collection.noun})")
        print()
        results[name] = items
    return results


# ---------------------------------------------------------------------------
# Reporting
# ---------------------------------------------------------------------------

def validate_items(name: str, items: list[dict[str, Any]]) -> list[str]:
    """Check for common authoring issues."""
    issues = []
    for item in items:
        slug = item.get('slug', 'unknown')
        if item.get('title') == 'Untitled':
            issues.append(f"{name}/{slug}: Missing title")
        if parse_date(item.get('date')) is None:
            issues.append(f"{name}/{slug}: Missing or unparseable date")
        if not item.get('tags'):
            issues.append(f"{name}/{slug}: No tags assigned")
    return issues


def print_tag_stats(name: str, items: list[dict[str, Any]]) -> None:
    counts: dict[str, int] = {}
    for item in items:
        for tag in dict.fromkeys(item['tags']):
            counts[tag] = counts.get(tag, 0) + 1

    print(f"\n--- {name}: tag statistics ---")
    print(f"Items: {len(items)}")
    print(f"Unique tags: {len(counts)}")
    for tag, count in sorted(counts.items(), key=lambda kv: (-kv[1], kv[0])):
        print(f"  {tag}: {count}")


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description='Build JSON manifests from the markdown content tree.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python build_content.py
    python build_content.py --output ./public/data
    python build_content.py --config site.yaml --validate
        """,
    )
    parser.add_argument(
        '--config',
        type=Path,
        default=None,
        help='Path to site.yaml (default: ./site.yaml if present, else built-in defaults)',
    )
    parser.add_argument(
        '--content-dir',
        type=Path,
        default=None,
        help='Root directory of the content tree (overrides config)',
    )
    parser.add_argument(
        '--output',
        type=Path,
        default=None,
        help='Output directory for the JSON manifests (overrides config)',
    )
    parser.add_argument(
        '--validate',
        action='store_true',
        help='Report items with missing titles, dates or tags',
    )
    parser.add_argument(
        '--stats',
        action='store_true',
        help='Print tag statistics per collection',
    )

    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigError as e:
        print(f"Error: {e}")
        return 1

    if args.content_dir is not None:
        config.content_dir = args.content_dir
    if args.output is not None:
        config.output_dir = args.output

    print(f"Content directory: {config.content_dir}")
    print(f"Output directory:  {config.output_dir}")
    print()

    start_time = time.time()
    try:
        results = build_content(config)
    except ContentRootError as e:
        print(f"Error: {e}")
        return 1

    elapsed = time.time() - start_time
    print("=" * 50)
    print(f"  Build complete in {elapsed:.1f}s")
    for name, items in results.items():
        print(f"  {name}: {len(items)}")
    print("=" * 50)

    if args.validate:
        issues = []
        for name, items in results.items():
            issues.extend(validate_items(name, items))
        if issues:
            print("\n--- Validation Issues ---")
            for issue in issues:
                print(f"  {issue}")
        else:
            print("\nNo validation issues found.")

    if args.stats:
        for name, items in results.items():
            print_tag_stats(name, items)

    return 0


if __name__ == '__main__':
    sys.exit(main())
