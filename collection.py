"""
List view for one collection (blog posts or projects).

A CollectionController owns the view state of a single collection: the items
loaded from its manifest, the filtered and sorted subset, and the pagination
cursor. Every operation recomputes what it needs, clamps the page and
re-renders the list and pagination regions of the page.
"""

import html
import locale
import logging
import math
import unicodedata
from dataclasses import dataclass, field
from typing import Any, Callable

from fetchers import FetchError
from frontmatter import parse_date
from site_config import SORT_MODES, CollectionConfig


logger = logging.getLogger(__name__)

WINDOW_SIZE = 5


# ---------------------------------------------------------------------------
# View state
# ---------------------------------------------------------------------------

@dataclass
class ViewState:
    all_items: list[dict[str, Any]] = field(default_factory=list)
    filtered_items: list[dict[str, Any]] = field(default_factory=list)
    current_page: int = 1
    items_per_page: int = 10
    current_sort: str = 'date-desc'
    active_tag: str | None = None
    search_query: str = ''
    status: str = 'idle'

    @property
    def total_pages(self) -> int:
        return math.ceil(len(self.filtered_items) / self.items_per_page)

    def clamp_page(self) -> None:
        self.current_page = min(max(1, self.current_page), max(1, self.total_pages))

    def page_bounds(self) -> tuple[int, int]:
        start = (self.current_page - 1) * self.items_per_page
        end = min(start + self.items_per_page, len(self.filtered_items))
        return start, end

    def page_items(self) -> list[dict[str, Any]]:
        start, end = self.page_bounds()
        return self.filtered_items[start:end]


# ---------------------------------------------------------------------------
# Sorting
# ---------------------------------------------------------------------------

def title_key(item: dict[str, Any]) -> str:
    """Collation key: accents folded onto their base letter, then casefolded."""
    decomposed = unicodedata.normalize('NFKD', str(item.get('title', '')))
    base = ''.join(ch for ch in decomposed if not unicodedata.combining(ch))
    return locale.strxfrm(base.casefold())


def sort_items(items: list[dict[str, Any]], mode: str) -> list[dict[str, Any]]:
    """Stable sort by mode. Undated items stay last for both date orders."""
    if mode not in SORT_MODES:
        raise ValueError(f"Unknown sort mode: {mode!r}")

    if mode in ('title-asc', 'title-desc'):
        return sorted(items, key=title_key, reverse=(mode == 'title-desc'))

    dated = []
    undated = []
    for item in items:
        parsed = parse_date(item.get('date'))
        if parsed is None:
            undated.append(item)
        else:
            dated.append((parsed, item))
    dated.sort(key=lambda pair: pair[0], reverse=(mode == 'date-desc'))
    return [item for _, item in dated] + undated


# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------

def page_window(current: int, total: int, size: int = WINDOW_SIZE) -> list[int]:
    """Up to `size` consecutive pages centred on current, kept inside [1, total]."""
    if total < 1:
        return []
    start = max(1, current - size // 2)
    end = min(total, start + size - 1)
    start = max(1, end - size + 1)
    return list(range(start, end + 1))


@dataclass
class PaginationModel:
    current_page: int
    total_pages: int
    total_items: int
    start: int
    end: int
    pages: list[int | None]

    @property
    def previous_disabled(self) -> bool:
        return self.current_page <= 1

    @property
    def next_disabled(self) -> bool:
        return self.current_page >= self.total_pages


def build_pagination(state: ViewState) -> PaginationModel | None:
    """Pagination controls for the current state, or None when there is nothing to page."""
    total_items = len(state.filtered_items)
    if total_items == 0:
        return None

    current = state.current_page
    total = state.total_pages
    window = page_window(current, total)

    # None marks an ellipsis gap
    pages: list[int | None] = []
    if window[0] > 1:
        pages.append(1)
        if window[0] > 2:
            pages.append(None)
    pages.extend(window)
    if window[-1] < total:
        if window[-1] < total - 1:
            pages.append(None)
        pages.append(total)

    start, end = state.page_bounds()
    return PaginationModel(current, total, total_items, start, end, pages)


def render_pagination(model: PaginationModel, noun: str) -> str:
    parts = [
        f'<p class="pagination-info">Showing {model.start + 1}-{model.end} '
        f'of {model.total_items} {html.escape(noun)}</p>',
        '<div class="pagination-buttons">',
    ]

    disabled = ' disabled' if model.previous_disabled else ''
    parts.append(
        f'<button class="pagination-btn pagination-prev{disabled}" '
        f'data-page="{model.current_page - 1}"{disabled}>Previous</button>'
    )
    for page in model.pages:
        if page is None:
            parts.append('<span class="pagination-ellipsis">...</span>')
            continue
        active = ' active' if page == model.current_page else ''
        parts.append(f'<button class="pagination-btn{active}" data-page="{page}">{page}</button>')

    disabled = ' disabled' if model.next_disabled else ''
    parts.append(
        f'<button class="pagination-btn pagination-next{disabled}" '
        f'data-page="{model.current_page + 1}"{disabled}>Next</button>'
    )
    parts.append('</div>')
    return '\n'.join(parts)


# ---------------------------------------------------------------------------
# Cards
# ---------------------------------------------------------------------------

def format_date(value: str | None) -> str:
    parsed = parse_date(value)
    if parsed is None:
        return value or ''
    return f"{parsed:%B} {parsed.day}, {parsed.year}"


def _tag_chips(tags: list[str], css_class: str) -> str:
    return ''.join(
        f'<span class="{css_class}" data-tag="{html.escape(tag)}">{html.escape(tag)}</span>'
        for tag in tags
    )


def render_post_card(item: dict[str, Any], collection: CollectionConfig) -> str:
    slug = html.escape(item['slug'])
    href = f"{collection.list_path}?{collection.detail_param}={slug}"
    parsed = parse_date(item.get('date'))
    datetime_attr = f' datetime="{parsed.isoformat()}"' if parsed else ''
    return (
        f'<article class="card post-card" data-slug="{slug}" '
        f'data-tags="{html.escape(",".join(item.get("tags", [])))}">'
        f'<div class="post-meta"><time{datetime_attr}>{html.escape(format_date(item.get("date")))}</time>'
        f'<span class="post-reading-time">{item.get("readingTime", 1)} min read</span></div>'
        f'<h2 class="post-title"><a href="{href}">{html.escape(item.get("title", ""))}</a></h2>'
        f'<p class="post-excerpt">{html.escape(item.get("excerpt", ""))}</p>'
        f'<div class="post-tags">{_tag_chips(item.get("tags", []), "tag")}</div>'
        f'</article>'
    )


def render_project_card(item: dict[str, Any], collection: CollectionConfig) -> str:
    slug = html.escape(item['slug'])
    title = html.escape(item.get('title', ''))
    image = ''
    if item.get('image'):
        image = f'<div class="project-image"><img src="{html.escape(item["image"])}" alt="{title}"></div>'

    links = []
    if item.get('demo'):
        links.append(f'<a class="project-link" href="{html.escape(item["demo"])}" '
                     f'target="_blank" rel="noopener noreferrer">Demo</a>')
    if item.get('github'):
        links.append(f'<a class="project-link" href="{html.escape(item["github"])}" '
                     f'target="_blank" rel="noopener noreferrer">Code</a>')

    return (
        f'<article class="project-card" data-slug="{slug}">'
        f'{image}'
        f'<div class="project-content">'
        f'<h3 class="project-title">{title}</h3>'
        f'<p class="project-description">{html.escape(item.get("description") or item.get("excerpt", ""))}</p>'
        f'<div class="project-tags">{_tag_chips(item.get("tags", []), "project-tag")}</div>'
        f'{"".join(links)}'
        f'</div>'
        f'</article>'
    )


def render_doc_card(item: dict[str, Any], collection: CollectionConfig) -> str:
    slug = html.escape(item['slug'])
    chips = '<span class="project-tag">documentation</span>' + _tag_chips(item.get('tags', []), 'project-tag')
    return (
        f'<article class="project-card doc-card" data-slug="{slug}">'
        f'<div class="project-content">'
        f'<h3 class="project-title">{html.escape(item.get("title", ""))}</h3>'
        f'<p class="project-description">{html.escape(item.get("excerpt", ""))}</p>'
        f'<div class="project-tags">{chips}</div>'
        f'</div>'
        f'</article>'
    )


CARD_RENDERERS = {
    'post': render_post_card,
    'project': render_project_card,
    'doc': render_doc_card,
}


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------

class CollectionController:
    """Owns the view state of one collection and keeps its list view in sync."""

    def __init__(self, collection: CollectionConfig, fetcher, page,
                 items_per_page: int = 10,
                 on_navigate: Callable[[str], None] | None = None,
                 compose_filters: bool = False):
        if items_per_page < 1:
            raise ValueError("items_per_page must be at least 1")
        self.collection = collection
        self.fetcher = fetcher
        self.page = page
        self.on_navigate = on_navigate
        self.compose_filters = compose_filters
        self.state = ViewState(items_per_page=items_per_page, current_sort=collection.default_sort)
        self.list_region = f"{collection.name}-list"
        self.pagination_region = f"{collection.name}-pagination"
        self._render_card = CARD_RENDERERS[collection.kind]
        self._request_token = 0

    @property
    def error_message(self) -> str:
        return f"Error loading {self.collection.noun}. Please try again later."

    @property
    def empty_message(self) -> str:
        return f"No {self.collection.noun} found matching your criteria."

    # -- loading ----------------------------------------------------------

    def load(self) -> bool:
        """Fetch the manifest and render the first page. Returns False on failure."""
        self._request_token += 1
        token = self._request_token
        self.state.status = 'loading'
        self.page.mount(self.list_region, f'<p class="loading">Loading {html.escape(self.collection.noun)}...</p>')

        try:
            items = self.fetcher.fetch_json(self.collection.manifest)
            if not isinstance(items, list):
                raise FetchError(f"Manifest {self.collection.manifest} is not a list")
        except FetchError as e:
            if token != self._request_token:
                return False
            logger.error("Error loading %s: %s", self.collection.manifest, e)
            self.state.status = 'error'
            self.state.all_items = []
            self.state.filtered_items = []
            self.page.mount(self.list_region, f'<p class="no-results">{html.escape(self.error_message)}</p>')
            self.page.mount(self.pagination_region, '')
            self.page.hide(self.pagination_region)
            return False

        if token != self._request_token:
            logger.debug("Discarding stale response for %s", self.collection.manifest)
            return False

        logger.info("Loaded %d %s", len(items), self.collection.noun)
        self.state.all_items = list(items)
        self.state.active_tag = None
        self.state.search_query = ''
        self.state.status = 'ready'
        self.state.current_page = 1
        self._apply()
        self.render()
        return True

    @property
    def ready(self) -> bool:
        return self.state.status == 'ready'

    # -- state transitions ------------------------------------------------

    def _matches(self, item: dict[str, Any]) -> bool:
        tag = self.state.active_tag
        if tag is not None and tag not in item.get('tags', []):
            return False

        query = self.state.search_query.casefold()
        if query:
            haystacks = [item.get('title', ''), item.get('excerpt', ''), item.get('description', '')]
            haystacks.extend(item.get('tags', []))
            if self.collection.search_content:
                haystacks.append(item.get('content', ''))
            if not any(query in str(text).casefold() for text in haystacks):
                return False
        return True

    def _apply(self) -> None:
        filtered = [item for item in self.state.all_items if self._matches(item)]
        self.state.filtered_items = sort_items(filtered, self.state.current_sort)
        self.state.clamp_page()

    def set_filter(self, tag: str | None) -> None:
        if tag is None or tag == '' or tag.lower() == 'all':
            tag = None
        self.state.active_tag = tag
        if not self.compose_filters:
            self.state.search_query = ''
        self.state.current_page = 1
        self._apply()
        self.render()

    def set_search(self, query: str) -> None:
        query = (query or '').strip()
        self.state.search_query = query
        if not self.compose_filters:
            self.state.active_tag = None
        self.state.current_page = 1
        self._apply()
        self.render()

    def set_sort(self, mode: str) -> None:
        if mode not in SORT_MODES:
            raise ValueError(f"Unknown sort mode: {mode!r}")
        self.state.current_sort = mode
        self.state.filtered_items = sort_items(self.state.filtered_items, mode)
        self.state.current_page = 1
        self.state.clamp_page()
        self.render()

    def set_page(self, number: int) -> None:
        target = min(max(1, number), max(1, self.state.total_pages))
        if target == self.state.current_page:
            return
        self.state.current_page = target
        self.render()
        self.page.scroll_into_view(self.list_region)

    def set_items_per_page(self, count: int) -> None:
        if count < 1:
            raise ValueError("items_per_page must be at least 1")
        self.state.items_per_page = count
        self.state.current_page = 1
        self.state.clamp_page()
        self.render()

    def click(self, slug: str, tag: str | None = None) -> None:
        """A click on a card. Clicks on an embedded tag chip filter instead of navigating."""
        if tag is not None:
            self.set_filter(tag)
            return
        if self.on_navigate is not None:
            self.on_navigate(slug)

    # -- rendering --------------------------------------------------------

    def render(self) -> None:
        if not self.ready:
            return
        self.state.clamp_page()

        items = self.state.page_items()
        if not items:
            self.page.mount(self.list_region, f'<p class="no-results">{html.escape(self.empty_message)}</p>')
        else:
            cards = [self._render_card(item, self.collection) for item in items]
            self.page.mount(self.list_region, '\n'.join(cards))

        model = build_pagination(self.state)
        if model is None:
            self.page.mount(self.pagination_region, '')
            self.page.hide(self.pagination_region)
        else:
            self.page.mount(self.pagination_region, render_pagination(model, self.collection.noun))
            self.page.show(self.pagination_region)

    def pagination(self) -> PaginationModel | None:
        return build_pagination(self.state)

    # -- lookups ----------------------------------------------------------

    def find(self, slug: str) -> dict[str, Any] | None:
        for item in self.state.all_items:
            if item.get('slug') == slug:
                return item
        return None

    def all_tags(self) -> list[str]:
        tags = {tag for item in self.state.all_items for tag in item.get('tags', [])}
        return sorted(tags, key=str.casefold)

    def featured(self, limit: int = 3) -> list[dict[str, Any]]:
        return [item for item in self.state.all_items if item.get('featured')][:limit]

    def latest(self, limit: int = 3) -> list[dict[str, Any]]:
        return sort_items(self.state.all_items, 'date-desc')[:limit]
