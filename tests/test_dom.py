from dom import History, Page


class TestHistory:
    def test_push_and_query(self) -> None:
        history = History('http://localhost/blog.html')
        history.push_state({'post': 'hello'}, 'blog.html?post=hello')

        assert history.url == 'http://localhost/blog.html?post=hello'
        assert history.query == {'post': 'hello'}
        assert history.state == {'post': 'hello'}
        assert len(history) == 2

    def test_back_and_forward_notify_listeners(self) -> None:
        history = History('/blog.html')
        seen = []
        history.add_listener(seen.append)
        history.push_state({'post': 'a'}, '/blog.html?post=a')

        assert history.back()
        assert history.forward()
        assert not history.forward()
        assert seen == [None, {'post': 'a'}]

    def test_push_drops_forward_entries(self) -> None:
        history = History('/')
        history.push_state(1, '/one')
        history.push_state(2, '/two')
        history.back()
        history.push_state(3, '/three')

        assert len(history) == 3
        assert history.url == '/three'
        assert not history.forward()

    def test_replace_keeps_length(self) -> None:
        history = History('/blog.html?post=a')
        history.replace_state({'post': 'a'}, '/blog.html?post=a')
        assert len(history) == 1
        assert history.state == {'post': 'a'}


class TestPage:
    def test_regions(self) -> None:
        page = Page()
        page.mount('list', '<p>Hello <b>there</b></p>')
        assert page.text('list') == 'Hello there'
        assert page.html('missing') == ''

    def test_visibility(self) -> None:
        page = Page()
        page.hide('toc')
        assert page.is_hidden('toc')
        page.show('toc')
        assert not page.is_hidden('toc')

    def test_scroll_to_never_negative(self) -> None:
        page = Page()
        page.scroll_to(-50, smooth=True)
        assert page.scroll_y == 0
        assert page.scroll_calls == [(0, True)]

    def test_animation_frames_run_once(self) -> None:
        page = Page()
        ran = []
        page.request_animation_frame(lambda: ran.append(1))
        assert page.run_animation_frames() == 1
        assert page.run_animation_frames() == 0
        assert ran == [1]
