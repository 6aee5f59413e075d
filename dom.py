"""
Render target for the viewer.

The viewer never touches a browser directly. Controllers write HTML into
named regions of a Page, ask it to scroll, read element offsets from it and
push URLs onto its History. Page keeps all of that in memory, which is what
the tests and the preview tooling use; a browser binding only has to offer
the same methods.
"""

from typing import Any, Callable
from urllib.parse import parse_qs, urljoin, urlsplit

from bs4 import BeautifulSoup


class History:
    """Session history with pushState/popstate semantics."""

    def __init__(self, url: str = '/'):
        self._entries: list[tuple[Any, str]] = [(None, url)]
        self._index = 0
        self._listeners: list[Callable[[Any], None]] = []

    @property
    def state(self) -> Any:
        return self._entries[self._index][0]

    @property
    def url(self) -> str:
        return self._entries[self._index][1]

    @property
    def query(self) -> dict[str, str]:
        """First value of each query parameter in the current URL."""
        parsed = parse_qs(urlsplit(self.url).query)
        return {key: values[0] for key, values in parsed.items() if values}

    def __len__(self) -> int:
        return len(self._entries)

    def push_state(self, state: Any, url: str) -> None:
        # A push drops any forward entries, as in a browser.
        del self._entries[self._index + 1:]
        self._entries.append((state, urljoin(self.url, url)))
        self._index += 1

    def replace_state(self, state: Any, url: str) -> None:
        self._entries[self._index] = (state, urljoin(self.url, url))

    def add_listener(self, callback: Callable[[Any], None]) -> None:
        self._listeners.append(callback)

    def go(self, delta: int) -> bool:
        target = self._index + delta
        if delta == 0 or not 0 <= target < len(self._entries):
            return False
        self._index = target
        for callback in list(self._listeners):
            callback(self.state)
        return True

    def back(self) -> bool:
        return self.go(-1)

    def forward(self) -> bool:
        return self.go(1)


class Page:
    """In-memory document: regions of HTML plus scroll and layout state."""

    def __init__(self, url: str = '/'):
        self.regions: dict[str, str] = {}
        self.hidden: set[str] = set()
        self.offsets: dict[str, int] = {}
        self.scroll_y = 0
        self.scroll_calls: list[tuple[int, bool]] = []
        self.scrolled_into_view: list[str] = []
        self.history = History(url)
        self._frames: list[Callable[[], None]] = []

    # -- content ----------------------------------------------------------

    def mount(self, region: str, html: str) -> None:
        self.regions[region] = html

    def html(self, region: str) -> str:
        return self.regions.get(region, '')

    def text(self, region: str) -> str:
        return BeautifulSoup(self.html(region), 'html.parser').get_text(' ', strip=True)

    def soup(self, region: str) -> BeautifulSoup:
        return BeautifulSoup(self.html(region), 'html.parser')

    # -- visibility -------------------------------------------------------

    def hide(self, region: str) -> None:
        self.hidden.add(region)

    def show(self, region: str) -> None:
        self.hidden.discard(region)

    def is_hidden(self, region: str) -> bool:
        return region in self.hidden

    # -- scrolling and layout ---------------------------------------------

    def scroll_to(self, top: int, smooth: bool = False) -> None:
        self.scroll_y = max(0, int(top))
        self.scroll_calls.append((self.scroll_y, smooth))

    def scroll_into_view(self, region: str) -> None:
        self.scrolled_into_view.append(region)

    def offset_top(self, element_id: str) -> int | None:
        return self.offsets.get(element_id)

    def set_layout(self, offsets: dict[str, int]) -> None:
        """Record element offsets as a layout engine would report them."""
        self.offsets.update(offsets)

    # -- animation frames -------------------------------------------------

    def request_animation_frame(self, callback: Callable[[], None]) -> None:
        self._frames.append(callback)

    def run_animation_frames(self) -> int:
        """Run callbacks queued for the next frame. Returns how many ran."""
        frames, self._frames = self._frames, []
        for callback in frames:
            callback()
        return len(frames)
