import pytest

from dom import Page
from toc import ScrollSpy, build_toc, render_toc


SAMPLE = '<h2>A</h2><p>a</p><h3>B</h3><h3>C</h3><h2>D</h2><p>d</p>'


class TestBuildToc:
    def test_nesting(self) -> None:
        toc = build_toc(SAMPLE)

        assert [entry.id for entry in toc.tree] == ['a', 'd']
        assert [child.id for child in toc.tree[0].children] == ['b', 'c']
        assert toc.tree[1].children == []
        assert toc.ids == ['a', 'b', 'c', 'd']

    def test_h3_before_any_h2_is_top_level(self) -> None:
        toc = build_toc('<h3>Preface</h3><h2>Main</h2><h3>Detail</h3>')
        assert [(entry.id, entry.level) for entry in toc.tree] == [('preface', 3), ('main', 2)]
        assert [child.id for child in toc.tree[1].children] == ['detail']

    def test_duplicate_headings(self) -> None:
        toc = build_toc('<h2>Notes</h2><h3>Notes</h3><h2>Notes</h2>')
        assert toc.ids == ['notes', 'notes-1', 'notes-2']

    def test_no_headings(self) -> None:
        toc = build_toc('<p>Nothing here</p><h4>Too deep</h4>')
        assert not toc
        assert toc.tree == []

    def test_render(self) -> None:
        page = Page()
        page.mount('toc', render_toc(build_toc(SAMPLE), active_id='b', expanded={'a'}))
        soup = page.soup('toc')

        parent = soup.select_one('li[data-h2-id="a"]')
        assert 'has-children' in parent['class']
        assert 'expanded' in parent['class']
        assert 'has-children' not in soup.select_one('li[data-h2-id="d"]')['class']
        assert [a['data-heading-id'] for a in parent.select('.toc-h3-list a')] == ['b', 'c']
        assert [a['data-heading-id'] for a in soup.select('a.toc-link.active')] == ['b']


@pytest.fixture
def spy() -> ScrollSpy:
    page = Page()
    page.set_layout({'a': 0, 'b': 500, 'c': 900, 'd': 1500})
    scroll_spy = ScrollSpy(page, build_toc(SAMPLE), 'posts-toc')
    scroll_spy.render()
    return scroll_spy


class TestScrollSpy:
    def test_current_heading(self, spy) -> None:
        assert spy.current_heading(0) == 'a'
        assert spy.current_heading(399) == 'a'
        assert spy.current_heading(400) == 'b'
        assert spy.current_heading(5000) == 'd'

    def test_nothing_above_threshold(self) -> None:
        page = Page()
        page.set_layout({'a': 300, 'b': 500, 'c': 900, 'd': 1500})
        scroll_spy = ScrollSpy(page, build_toc(SAMPLE), 'posts-toc')
        scroll_spy.update()
        assert scroll_spy.active_id is None

    def test_scroll_events_are_coalesced(self, spy) -> None:
        spy.page.scroll_to(850)
        spy.on_scroll()
        spy.on_scroll()
        spy.on_scroll()

        assert spy.active_id is None
        assert spy.page.run_animation_frames() == 1
        assert spy.active_id == 'c'
        active = spy.page.soup('posts-toc').select('a.toc-link.active')
        assert [a['data-heading-id'] for a in active] == ['c']

    def test_new_frame_after_previous_ran(self, spy) -> None:
        spy.on_scroll()
        spy.page.run_animation_frames()
        spy.page.scroll_to(1450)
        spy.on_scroll()
        assert spy.page.run_animation_frames() == 1
        assert spy.active_id == 'd'

    def test_click_scrolls_with_offset(self, spy) -> None:
        assert spy.click('c')
        assert spy.page.scroll_calls[-1] == (820, True)
        assert spy.active_id == 'c'

    def test_click_near_top_clamps_to_zero(self, spy) -> None:
        assert spy.click('a')
        assert spy.page.scroll_calls[-1] == (0, True)

    def test_click_unknown_entry(self, spy) -> None:
        assert spy.click('zzz') is False
        assert spy.page.scroll_calls == []

    def test_toggle(self, spy) -> None:
        spy.toggle('a')
        assert 'expanded' in spy.page.soup('posts-toc').select_one('li[data-h2-id="a"]')['class']
        spy.toggle('a')
        assert 'expanded' not in spy.page.soup('posts-toc').select_one('li[data-h2-id="a"]')['class']

    def test_toggle_without_children_is_ignored(self, spy) -> None:
        spy.toggle('d')
        assert spy.expanded == set()
