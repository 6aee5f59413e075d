"""
Table of contents and scroll spy for rendered detail pages.

The contents are derived from the rendered HTML, not authored: every H2
starts a section and owns the H3s that follow it up to the next H2. The same
component serves blog posts, projects and any other detail view; callers
pass the region holding the content and the scroll offsets.
"""

import html
import logging
from dataclasses import dataclass, field

from bs4 import BeautifulSoup

from markdown_render import find_headings, unique_heading_ids


logger = logging.getLogger(__name__)

SPY_OFFSET = 100
SCROLL_OFFSET = 80

EXPAND_ICON = (
    '<svg class="toc-expand-icon" viewBox="0 0 24 24" fill="none" stroke="currentColor" '
    'stroke-width="2"><polyline points="9 18 15 12 9 6"></polyline></svg>'
)


@dataclass
class TocEntry:
    id: str
    text: str
    level: int
    children: list['TocEntry'] = field(default_factory=list)


@dataclass
class TableOfContents:
    entries: list[TocEntry]
    tree: list[TocEntry]

    def __bool__(self) -> bool:
        return bool(self.entries)

    @property
    def ids(self) -> list[str]:
        return [entry.id for entry in self.entries]

    def find(self, entry_id: str) -> TocEntry | None:
        for entry in self.entries:
            if entry.id == entry_id:
                return entry
        return None


def build_toc(html_fragment: str) -> TableOfContents:
    """Walk the H2/H3 headings of a fragment in document order."""
    soup = BeautifulSoup(html_fragment, 'html.parser')
    headings = find_headings(soup)
    texts = [heading.get_text().strip() for heading in headings]
    ids = unique_heading_ids(texts)

    entries = []
    tree = []
    current_h2 = None
    for heading, text, entry_id in zip(headings, texts, ids):
        entry = TocEntry(id=entry_id, text=text, level=int(heading.name[1]))
        entries.append(entry)
        if entry.level == 2:
            current_h2 = entry
            tree.append(entry)
        elif current_h2 is not None:
            current_h2.children.append(entry)
        else:
            # H3 before any H2
            tree.append(entry)

    return TableOfContents(entries=entries, tree=tree)


def render_toc(toc: TableOfContents, active_id: str | None = None,
               expanded: set[str] | None = None) -> str:
    """Nested <li> markup for the TOC list."""
    expanded = expanded or set()

    def link(entry: TocEntry, icon: str = '') -> str:
        active = ' active' if entry.id == active_id else ''
        return (
            f'<a href="#{entry.id}" class="toc-link{active}" data-heading-id="{entry.id}">'
            f'{icon}<span>{html.escape(entry.text)}</span></a>'
        )

    parts = []
    for entry in toc.tree:
        if entry.level == 3:
            parts.append(f'<li class="toc-item toc-h3">{link(entry)}</li>')
            continue

        classes = ['toc-item', 'toc-h2']
        if entry.children:
            classes.append('has-children')
        if entry.id in expanded:
            classes.append('expanded')
        icon = EXPAND_ICON if entry.children else ''

        item = f'<li class="{" ".join(classes)}" data-h2-id="{entry.id}">{link(entry, icon)}'
        if entry.children:
            children = ''.join(f'<li class="toc-item toc-h3">{link(child)}</li>' for child in entry.children)
            item += f'<ul class="toc-h3-list">{children}</ul>'
        parts.append(item + '</li>')

    return '\n'.join(parts)


def render_toc_sidebar(toc: TableOfContents, active_id: str | None = None,
                       expanded: set[str] | None = None) -> str:
    return (
        '<nav class="toc-container"><details class="toc-details" open>'
        '<summary class="toc-summary"><span class="toc-title">Contents</span></summary>'
        f'<ul class="toc-list">{render_toc(toc, active_id, expanded)}</ul>'
        '</details></nav>'
    )


class ScrollSpy:
    """Keeps the active TOC entry in step with the scroll position.

    Scroll events are coalesced: at most one recomputation is queued per
    animation frame, and it reads heading offsets from the page at that point.
    """

    def __init__(self, page, toc: TableOfContents, toc_region: str,
                 spy_offset: int = SPY_OFFSET, scroll_offset: int = SCROLL_OFFSET):
        self.page = page
        self.toc = toc
        self.toc_region = toc_region
        self.spy_offset = spy_offset
        self.scroll_offset = scroll_offset
        self.active_id: str | None = None
        self.expanded: set[str] = set()
        self._ticking = False

    def render(self) -> None:
        self.page.mount(self.toc_region, render_toc_sidebar(self.toc, self.active_id, self.expanded))

    def _set_active(self, entry_id: str | None) -> None:
        if entry_id == self.active_id:
            return
        self.active_id = entry_id
        self.render()

    def current_heading(self, scroll_y: int) -> str | None:
        """Id of the last heading whose top is at or above scroll_y + offset."""
        threshold = scroll_y + self.spy_offset
        active = None
        for entry in self.toc.entries:
            top = self.page.offset_top(entry.id)
            if top is not None and top <= threshold:
                active = entry.id
        return active

    def update(self) -> None:
        active = self.current_heading(self.page.scroll_y)
        if active is not None:
            self._set_active(active)

    def on_scroll(self) -> None:
        if self._ticking:
            return
        self._ticking = True

        def frame():
            self._ticking = False
            self.update()

        self.page.request_animation_frame(frame)

    def click(self, entry_id: str) -> bool:
        """Smooth-scroll to a heading and mark its entry active straight away."""
        if self.toc.find(entry_id) is None:
            return False
        top = self.page.offset_top(entry_id)
        if top is None:
            logger.warning("Heading not found on page: %s", entry_id)
            return False
        self.page.scroll_to(top - self.scroll_offset, smooth=True)
        self._set_active(entry_id)
        return True

    def toggle(self, h2_id: str) -> None:
        """Expand or collapse an H2 entry that has children."""
        entry = self.toc.find(h2_id)
        if entry is None or not entry.children:
            return
        if h2_id in self.expanded:
            self.expanded.discard(h2_id)
        else:
            self.expanded.add(h2_id)
        self.render()
