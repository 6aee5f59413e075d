"""
Site configuration.

Settings live in an optional ``site.yaml`` next to the content tree. Anything
not set there falls back to the defaults below, which match the layout the
site has always used:

    content_dir: .
    output_dir: data
    default_author: Tian Pretorius
    items_per_page: 10
    collections:
      posts:
        source: blog/posts
        manifest: blog-posts.json
        kind: post
        default_sort: date-desc
      projects:
        source: projects/posts
        manifest: projects.json
        kind: project
      dev:
        source: dev/docs
        manifest: dev-docs.json
        kind: doc
        default_sort: title-asc
        search_content: true
        optional: true

An optional collection whose source directory is missing is skipped by the
builder instead of failing the build.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml


DEFAULT_CONFIG_PATH = Path('site.yaml')

DEFAULT_COLLECTIONS = {
    'posts': {
        'source': 'blog/posts',
        'manifest': 'blog-posts.json',
        'kind': 'post',
        'noun': 'posts',
        'detail_param': 'post',
        'list_path': 'blog.html',
    },
    'projects': {
        'source': 'projects/posts',
        'manifest': 'projects.json',
        'kind': 'project',
        'noun': 'projects',
        'detail_param': 'project',
        'list_path': 'projects.html',
    },
    'dev': {
        'source': 'dev/docs',
        'manifest': 'dev-docs.json',
        'kind': 'doc',
        'noun': 'docs',
        'detail_param': 'doc',
        'list_path': 'dev.html',
        'default_sort': 'title-asc',
        'search_content': True,
        'optional': True,
    },
}

KINDS = ('post', 'project', 'doc')
SORT_MODES = ('date-desc', 'date-asc', 'title-asc', 'title-desc')


class ConfigError(ValueError):
    """Raised for an unreadable or invalid site.yaml."""


@dataclass
class CollectionConfig:
    name: str
    source: str
    manifest: str
    kind: str = 'post'
    noun: str = 'items'
    detail_param: str = 'item'
    list_path: str = 'index.html'
    default_sort: str = 'date-desc'
    search_content: bool = False
    optional: bool = False

    @property
    def url_base(self) -> str:
        """Base path items of this collection are served from."""
        return self.source.strip('/')


@dataclass
class SiteConfig:
    content_dir: Path = Path('.')
    output_dir: Path = Path('data')
    default_author: str = 'Tian Pretorius'
    items_per_page: int = 10
    site_content: str = 'site-content.json'
    collections: dict[str, CollectionConfig] = field(default_factory=dict)

    def collection(self, name: str) -> CollectionConfig:
        try:
            return self.collections[name]
        except KeyError:
            raise ConfigError(f"Unknown collection: {name}") from None


def _collection_from_dict(name: str, raw: dict[str, Any]) -> CollectionConfig:
    if not isinstance(raw, dict):
        raise ConfigError(f"collections.{name} must be a mapping")
    merged = dict(DEFAULT_COLLECTIONS.get(name, {}))
    merged.update(raw)

    for key in ('source', 'manifest'):
        if not merged.get(key):
            raise ConfigError(f"collections.{name}.{key} is required")

    kind = merged.get('kind', 'post')
    if kind not in KINDS:
        raise ConfigError(f"collections.{name}.kind must be one of {', '.join(KINDS)}")
    default_sort = merged.get('default_sort', 'date-desc')
    if default_sort not in SORT_MODES:
        raise ConfigError(f"collections.{name}.default_sort must be one of {', '.join(SORT_MODES)}")

    return CollectionConfig(
        name=name,
        source=str(merged['source']),
        manifest=str(merged['manifest']),
        kind=kind,
        noun=str(merged.get('noun', name)),
        detail_param=str(merged.get('detail_param', kind)),
        list_path=str(merged.get('list_path', 'index.html')),
        default_sort=default_sort,
        search_content=bool(merged.get('search_content', False)),
        optional=bool(merged.get('optional', False)),
    )


def config_from_dict(raw: dict[str, Any] | None, base_dir: Path | None = None) -> SiteConfig:
    """Build a SiteConfig from parsed YAML. Relative paths resolve against base_dir."""
    raw = raw or {}
    if not isinstance(raw, dict):
        raise ConfigError("site config must be a mapping")
    base_dir = base_dir or Path('.')

    items_per_page = raw.get('items_per_page', 10)
    if not isinstance(items_per_page, int) or isinstance(items_per_page, bool) or items_per_page < 1:
        raise ConfigError("items_per_page must be a positive integer")

    raw_collections = raw.get('collections') or DEFAULT_COLLECTIONS
    if not isinstance(raw_collections, dict):
        raise ConfigError("collections must be a mapping")
    collections = {
        name: _collection_from_dict(name, raw_collection or {})
        for name, raw_collection in raw_collections.items()
    }

    return SiteConfig(
        content_dir=base_dir / str(raw.get('content_dir', '.')),
        output_dir=base_dir / str(raw.get('output_dir', 'data')),
        default_author=str(raw.get('default_author', 'Tian Pretorius')),
        items_per_page=items_per_page,
        site_content=str(raw.get('site_content', 'site-content.json')),
        collections=collections,
    )


def load_config(path: Path | None = None) -> SiteConfig:
    """Load site.yaml. A missing default file means built-in defaults."""
    config_path = path or DEFAULT_CONFIG_PATH
    if not config_path.exists():
        if path is not None:
            raise ConfigError(f"Config file not found: {config_path}")
        return config_from_dict(None)

    try:
        raw = yaml.safe_load(config_path.read_text(encoding='utf-8'))
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    return config_from_dict(raw, base_dir=config_path.parent)
