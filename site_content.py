"""
Site copy loaded from site-content.json.

Headings, intro text, navigation links and footer text live in one JSON
document so they can be edited without touching markup. Values are looked
up by dot path, e.g. ``hero.greeting`` or ``navigation.links``.

The render_* methods turn the structured parts (about sections, skills,
experience, contact methods, footer, homepage blocks) into markup. Every
string from the document is escaped before it is mounted.
"""

import html
import logging
from typing import Any

from bs4 import BeautifulSoup

from fetchers import FetchError


logger = logging.getLogger(__name__)


class SiteContent:
    def __init__(self, fetcher, path: str = 'site-content.json'):
        self.fetcher = fetcher
        self.path = path
        self.data: dict[str, Any] | None = None

    def load(self) -> dict[str, Any] | None:
        """Fetch once and cache. Returns None if the document could not be loaded."""
        if self.data is not None:
            return self.data
        try:
            data = self.fetcher.fetch_json(self.path)
        except FetchError as e:
            logger.error("Error loading site content: %s", e)
            return None
        if not isinstance(data, dict):
            logger.error("Site content in %s is not an object", self.path)
            return None
        self.data = data
        logger.info("Site content loaded")
        return self.data

    def get(self, path: str) -> Any:
        if self.data is None:
            logger.warning("Content not loaded yet; call load() first")
            return None

        value: Any = self.data
        for key in path.split('.'):
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                logger.warning("Content path not found: %s", path)
                return None
        return value

    def populate(self, page, region: str, path: str, as_html: bool = False) -> bool:
        value = self.get(path)
        if value is None:
            return False
        text = str(value)
        page.mount(region, text if as_html else html.escape(text))
        return True

    def populate_many(self, page, mappings: dict[str, Any]) -> int:
        """Fill several regions. Values are a path, or a dict with 'path' and 'html'."""
        filled = 0
        for region, target in mappings.items():
            if isinstance(target, str):
                filled += self.populate(page, region, target)
            else:
                filled += self.populate(page, region, target['path'], as_html=target.get('html', False))
        return filled

    def render_navigation(self, page, current: str = '', region: str = 'nav-menu') -> bool:
        nav = self.get('navigation')
        if not isinstance(nav, dict):
            return False

        links = []
        for link in nav.get('links', []):
            url = link.get('url', '')
            is_active = current == url or (current == '' and url == 'index.html')
            css = 'nav-link active' if is_active else 'nav-link'
            links.append(
                f'<li><a href="{html.escape(url)}" class="{css}">{html.escape(link.get("text", ""))}</a></li>'
            )
        if nav.get('resumeLink'):
            links.append(
                f'<li><a href="{html.escape(nav["resumeLink"])}" class="nav-link resume-link" download>'
                f'{html.escape(nav.get("resumeText", "Resume"))}</a></li>'
            )

        page.mount(region, ''.join(links))
        if nav.get('brandName'):
            page.mount('brand-name', html.escape(nav['brandName']))
        return True

    # -- structured sections ----------------------------------------------

    def render_about_sections(self, page, region: str) -> bool:
        sections = self.get('about.sections')
        if not isinstance(sections, list):
            return False

        blocks = []
        for section in sections:
            paragraphs = section.get('content') or []
            if isinstance(paragraphs, str):
                paragraphs = [paragraphs]
            if section.get('intro'):
                paragraphs = [*paragraphs, section['intro']]
            body = ''.join(f'<p>{_esc(p)}</p>' for p in paragraphs)
            if section.get('list'):
                items = ''.join(f'<li>{_esc(entry)}</li>' for entry in section['list'])
                body += f'<ul class="about-list">{items}</ul>'
            blocks.append(f'<div class="about-section"><h2>{_esc(section.get("title"))}</h2>{body}</div>')

        page.mount(region, ''.join(blocks))
        return True

    def render_skills(self, page, region: str) -> bool:
        skills = self.get('about.sidebar.skills.tags')
        if not isinstance(skills, list):
            return False
        page.mount(region, _tech_tags(skills))
        return True

    def render_experience(self, page, region: str) -> bool:
        experience = self.get('about.sidebar.experience.items')
        if not isinstance(experience, list):
            return False
        page.mount(region, ''.join(
            '<div class="experience-item">'
            f'<h4>{_esc(exp.get("title"))}</h4>'
            f'<p class="experience-duration">{_esc(exp.get("duration"))}</p>'
            f'<p class="experience-desc">{_esc(exp.get("description"))}</p>'
            '</div>'
            for exp in experience
        ))
        return True

    def render_contact_methods(self, page, region: str) -> bool:
        methods = self.get('contact.methods')
        if not isinstance(methods, list):
            return False
        page.mount(region, ''.join(
            f'<a href="{_esc(method.get("link"))}" class="contact-method" target="_blank" rel="noopener noreferrer">'
            f'<div class="contact-icon">{_esc(method.get("icon"))}</div>'
            f'<div class="contact-info"><h4>{_esc(method.get("title"))}</h4><p>{_esc(method.get("value"))}</p></div>'
            '</a>'
            for method in methods
        ))
        return True

    def render_contact_info_cards(self, page, region: str) -> bool:
        cards = self.get('contact.infoCards')
        if not isinstance(cards, list):
            return False
        page.mount(region, ''.join(
            '<div class="contact-info-card">'
            f'<div class="info-card-icon">{INFO_CARD_ICONS.get(card.get("icon"), "")}</div>'
            f'<h3>{_esc(card.get("title"))}</h3>'
            f'<p>{_esc(card.get("value"))}</p>'
            '</div>'
            for card in cards
        ))
        return True

    def render_footer(self, page, region: str) -> bool:
        footer = self.get('footer')
        if not isinstance(footer, dict):
            return False

        links = []
        for link in footer.get('links', []):
            url = link.get('url', '')
            external = ' target="_blank" rel="noopener noreferrer"' if url.startswith('http') else ''
            links.append(f'<a href="{_esc(url)}"{external}>{_esc(link.get("text"))}</a>')

        page.mount(region, (
            '<div class="footer-content">'
            f'<div class="footer-left"><p>{_esc(footer.get("copyright"))}</p></div>'
            f'<div class="footer-right">{"".join(links)}</div>'
            '</div>'
        ))
        return True

    # -- homepage -----------------------------------------------------------

    def render_home_about_preview(self, page, region: str) -> bool:
        preview = self.get('homepage.aboutPreview')
        if not isinstance(preview, dict):
            return False
        paragraphs = ''.join(f'<p>{_esc(p)}</p>' for p in preview.get('paragraphs', []))
        page.mount(region, (
            f'<p class="about-intro">{_esc(preview.get("intro"))}</p>'
            f'{paragraphs}'
            f'<div class="about-cta"><a href="{_esc(preview.get("ctaLink"))}" class="btn-secondary">'
            f'{_esc(preview.get("ctaText"))}</a></div>'
        ))
        return True

    def render_home_skills(self, page, region: str) -> bool:
        skills = self.get('homepage.skills')
        if not isinstance(skills, dict):
            return False
        categories = ''.join(
            '<div class="skill-category">'
            f'<h4>{_esc(category.get("name"))}</h4>'
            f'<div class="tech-tags">{_tech_tags(category.get("tags", []))}</div>'
            '</div>'
            for category in skills.get('categories', [])
        )
        page.mount(region, f'<h3>{_esc(skills.get("title"))}</h3><div class="skills-grid">{categories}</div>')
        return True

    def populate_section_headers(self, page, mappings: dict[str, str]) -> int:
        """Set .section-number and .section-title inside each region from homepage.sections.<key>."""
        filled = 0
        for region, key in mappings.items():
            if region not in page.regions:
                continue
            section = self.get(f'homepage.sections.{key}')
            if not isinstance(section, dict):
                continue

            soup = BeautifulSoup(page.html(region), 'html.parser')
            number = soup.select_one('.section-number')
            title = soup.select_one('.section-title')
            if number is not None:
                number.string = str(section.get('number', ''))
            if title is not None:
                title.string = str(section.get('title', ''))
            page.mount(region, str(soup))
            filled += 1
        return filled


def _esc(value: Any) -> str:
    return html.escape('' if value is None else str(value))


def _tech_tags(tags: list) -> str:
    return ''.join(f'<span class="tech-tag">{_esc(tag)}</span>' for tag in tags)


_SVG_OPEN = ('<svg width="20" height="20" viewBox="0 0 24 24" fill="none" '
             'stroke="currentColor" stroke-width="2">')

INFO_CARD_ICONS = {
    'location': (_SVG_OPEN
                 + '<path d="M12 22s-8-4.5-8-11.8A8 8 0 0 1 12 2a8 8 0 0 1 8 8.2c0 7.3-8 11.8-8 11.8z"/>'
                 + '<circle cx="12" cy="10" r="3"/></svg>'),
    'clock': (_SVG_OPEN
              + '<circle cx="12" cy="12" r="10"/><polyline points="12 6 12 12 16 14"/></svg>'),
    'briefcase': (_SVG_OPEN
                  + '<rect x="2" y="7" width="20" height="14" rx="2" ry="2"/>'
                  + '<path d="M16 21V5a2 2 0 0 0-2-2h-4a2 2 0 0 0-2 2v16"/></svg>'),
}
