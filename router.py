"""
URL handling for a collection page.

List and detail views map onto history entries one to one: opening an item
pushes ``?post=<slug>`` (or ``?project=<slug>``), going back to the list
pushes the list path, and back/forward restore whichever view the entry
belongs to. ``?tag=<tag>`` on the initial URL pre-applies a tag filter.
"""

from urllib.parse import quote

from collection import CollectionController
from detail_view import DetailView


class ContentRouter:
    def __init__(self, controller: CollectionController, detail: DetailView):
        self.controller = controller
        self.detail = detail
        self.page = controller.page
        self.history = self.page.history
        self.param = controller.collection.detail_param
        self.list_path = controller.collection.list_path

        controller.on_navigate = self.open
        self.history.add_listener(self.on_pop_state)

    def start(self) -> bool:
        """Load the collection, then honour the query string of the current URL."""
        if not self.controller.load():
            return False

        query = self.history.query
        slug = query.get(self.param)
        if slug:
            self.detail.show(slug)
            self.history.replace_state({self.param: slug}, self._detail_url(slug))
        elif query.get('tag'):
            self.controller.set_filter(query['tag'])
        return True

    def _detail_url(self, slug: str) -> str:
        return f"{self.list_path}?{self.param}={quote(slug)}"

    def open(self, slug: str) -> bool:
        shown = self.detail.show(slug)
        if shown:
            self.history.push_state({self.param: slug}, self._detail_url(slug))
        return shown

    def close(self) -> None:
        self.detail.hide()
        self.history.push_state({}, self.list_path)

    def filter_by_tag(self, tag: str) -> None:
        """A tag chip clicked on a detail page: back to the filtered list."""
        if self.detail.current is not None:
            self.close()
        self.controller.set_filter(tag)

    def on_pop_state(self, state) -> None:
        slug = state.get(self.param) if isinstance(state, dict) else None
        if slug:
            self.detail.show(slug)
        else:
            self.detail.hide()
