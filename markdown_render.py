"""
Markdown to HTML for item detail pages.

The title of an item is shown in the page header, so the first top-level
heading of the body is dropped before conversion. Relative image paths in
the rendered HTML are rebased onto the item's asset directory.
"""

import logging
import re

import markdown
from bs4 import BeautifulSoup


logger = logging.getLogger(__name__)

# GitHub-flavoured input with single newlines kept as <br>
MARKDOWN_EXTENSIONS = ['fenced_code', 'tables', 'sane_lists', 'nl2br']

# only an H1 on the first non-blank line counts as the title
LEADING_H1_RE = re.compile(r'\A\s*#[ \t]+[^\n]*')
ABSOLUTE_SRC_RE = re.compile(r'^([a-z][a-z0-9+.-]*:|//)', re.IGNORECASE)
SLUG_STRIP_RE = re.compile(r'[^a-z0-9]+')


def make_converter() -> markdown.Markdown:
    return markdown.Markdown(extensions=MARKDOWN_EXTENSIONS, output_format='html')


def strip_title(text: str) -> str:
    """Remove a leading '# ' heading line. Later lines, code included, are untouched."""
    return LEADING_H1_RE.sub('', text, count=1)


def to_html(text: str, converter: markdown.Markdown | None) -> str:
    """Convert markdown with the given converter.

    Without a converter, or if conversion fails, the raw markdown comes back
    unchanged so the page still shows something.
    """
    if converter is None:
        logger.error("Markdown renderer not available; showing raw markdown")
        return text
    try:
        converter.reset()
        return converter.convert(text)
    except Exception:
        logger.exception("Markdown conversion failed; showing raw markdown")
        return text


def rewrite_image_paths(html_fragment: str, base_path: str) -> str:
    """Prefix base_path onto <img src> values that are neither absolute nor rooted."""
    if not base_path:
        return html_fragment

    soup = BeautifulSoup(html_fragment, 'html.parser')
    changed = False
    for img in soup.find_all('img'):
        src = img.get('src', '').strip()
        if not src or ABSOLUTE_SRC_RE.match(src) or src.startswith('/'):
            continue
        if src.startswith('./'):
            src = src[2:]
        img['src'] = base_path.rstrip('/') + '/' + src
        changed = True

    return str(soup) if changed else html_fragment


def render_item_body(item: dict, converter: markdown.Markdown | None) -> str:
    """Full body pipeline for one item: strip title, convert, rebase images."""
    body = strip_title(item.get('content', ''))
    rendered = to_html(body, converter)
    return rewrite_image_paths(rendered, item.get('assetsPath', ''))


# ---------------------------------------------------------------------------
# Heading ids
# ---------------------------------------------------------------------------

def heading_id(text: str) -> str:
    """Slug-style id: lowercase, non-alphanumeric runs to '-', ends trimmed.

    >>> heading_id('Hello, World!')
    'hello-world'
    """
    return SLUG_STRIP_RE.sub('-', text.lower()).strip('-')


def unique_heading_ids(texts: list[str]) -> list[str]:
    """Ids for headings in document order; repeats get -1, -2, ... suffixes."""
    seen: dict[str, int] = {}
    ids = []
    for text in texts:
        base = heading_id(text) or 'section'
        candidate = base
        while candidate in seen:
            seen[base] += 1
            candidate = f"{base}-{seen[base]}"
        seen.setdefault(candidate, 0)
        ids.append(candidate)
    return ids


def find_headings(soup: BeautifulSoup) -> list:
    return soup.find_all(['h2', 'h3'])


def assign_heading_ids(html_fragment: str) -> str:
    """Set id attributes on the H2/H3 elements of a fragment."""
    soup = BeautifulSoup(html_fragment, 'html.parser')
    headings = find_headings(soup)
    if not headings:
        return html_fragment
    ids = unique_heading_ids([h.get_text().strip() for h in headings])
    for heading, element_id in zip(headings, ids):
        heading['id'] = element_id
    return str(soup)
