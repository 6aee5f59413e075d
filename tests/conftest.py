from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Any

import pytest

from dom import Page
from fetchers import FetchError
from site_config import SiteConfig, config_from_dict


class StubFetcher:
    """Serves canned manifests; a FetchError value is raised instead of returned."""

    def __init__(self, responses: dict[str, Any]):
        self.responses = responses
        self.calls: list[str] = []

    def fetch_json(self, path: str) -> Any:
        self.calls.append(path)
        if path not in self.responses:
            raise FetchError("HTTP error! status: 404", status=404)
        value = self.responses[path]
        if isinstance(value, FetchError):
            raise value
        return value


def make_items(count: int = 12, go_every: int = 4) -> list[dict[str, Any]]:
    """`count` posts, newest first, dated 2024-01-<count> down to 2024-01-01."""
    items = []
    for n in range(count, 0, -1):
        tags = ['python']
        if n % go_every == 0:
            tags.append('go')
        items.append({
            'slug': f'post-{n:02d}',
            'title': f'Post {n:02d}',
            'date': f'2024-01-{n:02d}',
            'tags': tags,
            'author': 'Tian Pretorius',
            'excerpt': f'Excerpt for post {n}',
            'coverImage': '',
            'featured': n in (12, 7),
            'readingTime': 1,
            'assetsPath': f'blog/posts/post-{n:02d}/',
            'content': f'# Post {n:02d}\n\nBody of post {n}.\n',
        })
    return items


DOCS = [
    {
        'slug': 'setup', 'title': 'Setup', 'date': '', 'tags': ['tooling'],
        'excerpt': 'Getting a working checkout.', 'featured': False, 'readingTime': 1,
        'assetsPath': 'dev/docs/setup/',
        'content': '# Setup\n\n## Install\n\nRun the bootstrap script.\n\n## Verify\n\nRun the tests.\n',
    },
    {
        'slug': 'architecture', 'title': 'Architecture', 'date': '', 'tags': ['design'],
        'excerpt': 'How the pieces fit.', 'featured': False, 'readingTime': 2,
        'assetsPath': 'dev/docs/architecture/',
        'content': '# Architecture\n\nManifests are written atomically with os.replace.\n',
    },
    {
        'slug': 'deploy', 'title': 'deploy checklist', 'date': '', 'tags': ['ops'],
        'excerpt': 'Before shipping.', 'featured': False, 'readingTime': 1,
        'assetsPath': 'dev/docs/deploy/',
        'content': '# deploy checklist\n\nTag the release.\n',
    },
]


def write_item(root: Path, slug: str, text: str) -> Path:
    item_dir = root / slug
    item_dir.mkdir(parents=True, exist_ok=True)
    index = item_dir / 'index.md'
    index.write_text(textwrap.dedent(text).lstrip(), encoding='utf-8')
    return index


@pytest.fixture
def site_config(tmp_path: Path) -> SiteConfig:
    content = tmp_path / 'site'
    (content / 'blog' / 'posts').mkdir(parents=True)
    (content / 'projects' / 'posts').mkdir(parents=True)
    return config_from_dict({'content_dir': str(content), 'output_dir': str(tmp_path / 'data')})


@pytest.fixture
def posts_config(site_config: SiteConfig):
    return site_config.collection('posts')


@pytest.fixture
def projects_config(site_config: SiteConfig):
    return site_config.collection('projects')


@pytest.fixture
def page() -> Page:
    return Page('/blog.html')


@pytest.fixture
def items() -> list[dict[str, Any]]:
    return make_items()


@pytest.fixture
def dev_config(site_config: SiteConfig):
    return site_config.collection('dev')
