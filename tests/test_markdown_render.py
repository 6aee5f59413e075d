import pytest
from bs4 import BeautifulSoup

from markdown_render import (
    assign_heading_ids,
    heading_id,
    make_converter,
    render_item_body,
    rewrite_image_paths,
    strip_title,
    to_html,
    unique_heading_ids,
)


class TestHeadingIds:
    @pytest.mark.parametrize('text, expected', [
        ('Hello, World!', 'hello-world'),
        ('  --Foo--  ', 'foo'),
        ('Step 2: Deploy', 'step-2-deploy'),
        ('!!!', ''),
    ])
    def test_heading_id(self, text, expected) -> None:
        assert heading_id(text) == expected

    def test_repeats_get_suffixes(self) -> None:
        assert unique_heading_ids(['Intro', 'Intro', 'Intro']) == ['intro', 'intro-1', 'intro-2']

    def test_suffix_does_not_collide_with_literal_heading(self) -> None:
        assert unique_heading_ids(['A', 'A 1', 'A']) == ['a', 'a-1', 'a-2']

    def test_empty_slug_falls_back(self) -> None:
        assert unique_heading_ids(['???', '...']) == ['section', 'section-1']

    def test_assign_heading_ids(self) -> None:
        html = assign_heading_ids('<h2>Intro</h2><p>x</p><h3>Part</h3><h2>Intro</h2>')
        soup = BeautifulSoup(html, 'html.parser')
        assert [h['id'] for h in soup.find_all(['h2', 'h3'])] == ['intro', 'part', 'intro-1']

    def test_assign_without_headings_is_unchanged(self) -> None:
        assert assign_heading_ids('<p>plain</p>') == '<p>plain</p>'


class TestConversion:
    def test_strip_title_removes_first_h1_only(self) -> None:
        assert strip_title('# Title\n\nBody\n\n# Another') == '\n\nBody\n\n# Another'

    def test_strip_title_leaves_h2(self) -> None:
        assert strip_title('## Not a title\n') == '## Not a title\n'

    def test_strip_title_skips_leading_blank_lines(self) -> None:
        assert strip_title('\n\n# Title\nBody') == '\nBody'

    def test_strip_title_only_looks_at_first_line(self) -> None:
        text = 'Intro.\n\n# Later heading\n'
        assert strip_title(text) == text

    def test_basic_markdown(self) -> None:
        html = to_html('Some **bold** text', make_converter())
        assert '<strong>bold</strong>' in html

    def test_tables_and_fenced_code(self) -> None:
        converter = make_converter()
        table = to_html('| a | b |\n|---|---|\n| 1 | 2 |', converter)
        code = to_html('```python\nx = 1\n```', converter)
        assert '<table>' in table
        assert 'class="language-python"' in code

    def test_single_newline_is_a_line_break(self) -> None:
        assert '<br' in to_html('line one\nline two', make_converter())

    def test_without_converter_returns_raw(self) -> None:
        assert to_html('## Raw', None) == '## Raw'

    def test_converter_failure_returns_raw(self) -> None:
        class Broken:
            def reset(self):
                pass

            def convert(self, text):
                raise RuntimeError('boom')

        assert to_html('**x**', Broken()) == '**x**'


class TestImagePaths:
    def test_relative_paths_are_rebased(self) -> None:
        html = rewrite_image_paths(
            '<p><img src="assets/a.png" alt="a"><img src="./b.png" alt="b"></p>', 'blog/posts/x/'
        )
        srcs = [img['src'] for img in BeautifulSoup(html, 'html.parser').find_all('img')]
        assert srcs == ['blog/posts/x/assets/a.png', 'blog/posts/x/b.png']

    @pytest.mark.parametrize('src', [
        'https://example.com/a.png',
        '//cdn.example.com/a.png',
        '/static/a.png',
        'data:image/png;base64,AAAA',
    ])
    def test_absolute_paths_are_kept(self, src) -> None:
        fragment = f'<img src="{src}"/>'
        assert rewrite_image_paths(fragment, 'blog/posts/x/') == fragment

    def test_no_base_path(self) -> None:
        assert rewrite_image_paths('<img src="a.png"/>', '') == '<img src="a.png"/>'


class TestRenderItemBody:
    def test_pipeline(self) -> None:
        item = {
            'content': '# Title\n\nIntro.\n\n![Chart](assets/chart.png)\n\n## Results\n',
            'assetsPath': 'blog/posts/report/',
        }
        soup = BeautifulSoup(render_item_body(item, make_converter()), 'html.parser')

        assert soup.find('h1') is None
        assert soup.find('h2').get_text() == 'Results'
        assert soup.find('img')['src'] == 'blog/posts/report/assets/chart.png'

    def test_comment_in_leading_code_block_survives(self) -> None:
        item = {
            'content': '```bash\n# install deps\npip install x\n```\n\nAfter.\n',
            'assetsPath': '',
        }
        soup = BeautifulSoup(render_item_body(item, make_converter()), 'html.parser')

        assert '# install deps' in soup.find('code').get_text()
        assert soup.find('p').get_text() == 'After.'
