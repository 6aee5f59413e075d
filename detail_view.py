"""
Detail view for a single item.

The item comes from the collection that is already loaded, so showing a
detail page never fetches. The body is rendered to HTML, mounted, and then
the heading ids and the table of contents are wired up against the mounted
content.
"""

import html
import logging
from typing import Any

from collection import CollectionController, format_date
from markdown_render import assign_heading_ids, make_converter, render_item_body
from toc import SCROLL_OFFSET, SPY_OFFSET, ScrollSpy, build_toc


logger = logging.getLogger(__name__)

_DEFAULT = object()

KIND_LABELS = {'post': 'Post', 'project': 'Project', 'doc': 'Document'}
DOC_DESCRIPTION = 'Technical documentation and implementation details.'


class DetailView:
    def __init__(self, controller: CollectionController, converter: Any = _DEFAULT,
                 spy_offset: int = SPY_OFFSET, scroll_offset: int = SCROLL_OFFSET):
        self.controller = controller
        self.page = controller.page
        self.collection = controller.collection
        self.converter = make_converter() if converter is _DEFAULT else converter
        self.spy_offset = spy_offset
        self.scroll_offset = scroll_offset

        name = self.collection.name
        self.detail_region = f"{name}-detail"
        self.content_region = f"{name}-content"
        self.toc_region = f"{name}-toc"
        self.list_regions = [controller.list_region, controller.pagination_region, f"{name}-filters"]

        self.current: dict[str, Any] | None = None
        self.spy: ScrollSpy | None = None
        self.page.hide(self.detail_region)

    @property
    def not_found_message(self) -> str:
        label = KIND_LABELS.get(self.collection.kind, self.collection.kind.capitalize())
        return f"{label} not found."

    # -- header -----------------------------------------------------------

    def render_header(self, item: dict[str, Any]) -> str:
        parts = [
            '<div class="detail-header">',
            f'<button class="back-button" data-action="back">Back to {html.escape(self.collection.noun.capitalize())}</button>',
            f'<h1>{html.escape(item.get("title", ""))}</h1>',
        ]

        if self.collection.kind == 'post':
            meta = [html.escape(format_date(item.get('date')))]
            if item.get('author'):
                meta.append(html.escape(item['author']))
            meta.append(f"{item.get('readingTime', 1)} min read")
            parts.append(f'<div class="post-meta">{" &middot; ".join(m for m in meta if m)}</div>')
        elif self.collection.kind == 'doc':
            parts.append(f'<p class="project-detail-description">{DOC_DESCRIPTION}</p>')
        else:
            if item.get('description'):
                parts.append(f'<p class="project-detail-description">{html.escape(item["description"])}</p>')
            links = []
            if item.get('demo'):
                links.append(f'<a class="btn" href="{html.escape(item["demo"])}" target="_blank" '
                             f'rel="noopener noreferrer">Live Demo</a>')
            if item.get('github'):
                links.append(f'<a class="btn" href="{html.escape(item["github"])}" target="_blank" '
                             f'rel="noopener noreferrer">View Code</a>')
            if links:
                parts.append(f'<div class="project-links">{"".join(links)}</div>')

        tags = ''.join(
            f'<span class="tag" data-tag="{html.escape(tag)}">{html.escape(tag)}</span>'
            for tag in item.get('tags', [])
        )
        if tags:
            parts.append(f'<div class="detail-tags">{tags}</div>')

        if item.get('tldr'):
            parts.append(
                '<details class="tldr"><summary>TL;DR</summary>'
                f'<p>{html.escape(item["tldr"])}</p></details>'
            )

        parts.append('</div>')
        return '\n'.join(parts)

    # -- show / hide ------------------------------------------------------

    def show(self, slug: str) -> bool:
        """Render the item with this slug. Returns False if it is not in the collection."""
        for region in self.list_regions:
            self.page.hide(region)
        self.page.show(self.detail_region)

        item = self.controller.find(slug)
        if item is None:
            logger.warning("%s not found: %s", self.collection.kind, slug)
            self.current = None
            self.spy = None
            self.page.mount(self.detail_region, f'<p class="no-results">{html.escape(self.not_found_message)}</p>')
            self.page.mount(self.content_region, '')
            self.page.mount(self.toc_region, '')
            return False

        self.current = item
        body_html = render_item_body(item, self.converter)
        toc = build_toc(body_html)

        self.page.mount(self.detail_region, self.render_header(item))
        self.page.mount(self.content_region, body_html)

        if toc:
            # ids go onto the mounted headings so #anchors resolve
            self.page.mount(self.content_region, assign_heading_ids(self.page.html(self.content_region)))
            self.spy = ScrollSpy(self.page, toc, self.toc_region,
                                 spy_offset=self.spy_offset, scroll_offset=self.scroll_offset)
            self.spy.render()
            self.page.show(self.toc_region)
        else:
            self.spy = None
            self.page.mount(self.toc_region, '')
            self.page.hide(self.toc_region)

        self.page.scroll_to(0)
        return True

    def hide(self) -> None:
        self.current = None
        self.spy = None
        self.page.hide(self.detail_region)
        self.page.hide(self.toc_region)
        for region in self.list_regions:
            self.page.show(region)
        # pagination stays hidden when there is nothing to page
        if self.controller.pagination() is None:
            self.page.hide(self.controller.pagination_region)
        self.page.scroll_to(0)

    # -- events -----------------------------------------------------------

    def on_scroll(self) -> None:
        if self.spy is not None:
            self.spy.on_scroll()

    def click_toc(self, entry_id: str) -> bool:
        if self.spy is None:
            return False
        return self.spy.click(entry_id)
