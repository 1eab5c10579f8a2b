"""Tests for html_renderer.py - block dispatch to HTML."""

from __future__ import annotations

import pytest

from docblocks.doc.blocks_models import (
    BulletedListBlock,
    CodeBlock,
    HeadingBlock,
    ImageAlignment,
    ImageBlock,
    NumberedListBlock,
    ParagraphBlock,
    QuoteBlock,
    SubheadingBlock,
    TextFormatting,
    UnknownBlock,
)
from docblocks.doc.document import Document
from docblocks.doc.html_renderer import render_block_html, render_blocks_html, render_document_html


class TestHeadings:
    """Heading tags follow the stored level, clamped to h1-h6."""

    def test_heading(self) -> None:
        assert render_block_html(HeadingBlock(id="h", content="Title")) == "<h1>Title</h1>"

    def test_subheading_level(self) -> None:
        assert render_block_html(SubheadingBlock(id="s", content="Part", level=2)) == "<h2>Part</h2>"

    @pytest.mark.parametrize("level", [0, 7, 42])
    def test_out_of_range_level_renders_h1(self, level: int) -> None:
        assert render_block_html(HeadingBlock(id="h", content="X", level=level)) == "<h1>X</h1>"

    def test_empty_heading_renders_nothing(self) -> None:
        assert render_block_html(HeadingBlock(id="h", content="")) == ""


class TestText:
    """Paragraphs and quotes."""

    def test_paragraph_is_escaped(self) -> None:
        html = render_block_html(ParagraphBlock(id="p", content="a < b & c"))
        assert html == "<p>a &lt; b &amp; c</p>"

    def test_formatting_wraps(self) -> None:
        block = ParagraphBlock(
            id="p",
            content="x",
            formatting=TextFormatting(bold=True, italic=True, underline=True),
        )
        assert render_block_html(block) == "<p><strong><em><u>x</u></em></strong></p>"

    def test_quote(self) -> None:
        block = QuoteBlock(id="q", content="Wise", formatting=TextFormatting(italic=True))
        assert render_block_html(block) == "<blockquote><em>Wise</em></blockquote>"


class TestLists:
    """Bulleted and numbered lists."""

    def test_bulleted(self) -> None:
        html = render_block_html(BulletedListBlock(id="l", items=("a", "<b>")))
        assert html == "<ul>\n<li>a</li>\n<li>&lt;b&gt;</li>\n</ul>"

    def test_numbered(self) -> None:
        html = render_block_html(NumberedListBlock(id="n", items=("one",)))
        assert html.startswith("<ol>")

    def test_empty_list(self) -> None:
        assert render_block_html(BulletedListBlock(id="l")) == ""


class TestCode:
    """Code blocks carry their language and editor extras as attributes."""

    def test_code(self) -> None:
        block = CodeBlock(
            id="c",
            content="if a < b:\n",
            language="python",
            show_line_numbers=True,
            theme="dark",
            copy_button=True,
        )
        assert render_block_html(block) == (
            "<pre data-theme=\"dark\" data-copy-button>"
            "<code class=\"language-python line-numbers\">if a &lt; b:\n</code></pre>"
        )

    def test_plain_code(self) -> None:
        assert render_block_html(CodeBlock(id="c", content="x")) == "<pre><code>x</code></pre>"


class TestImages:
    """Images render as figures."""

    def test_image(self) -> None:
        block = ImageBlock(
            id="i",
            image_url="http://x/y.png",
            alt_text="Chart",
            width="600px",
            height="400px",
            alignment=ImageAlignment.CENTER,
            caption="Growth",
        )
        assert render_block_html(block) == (
            "<figure class=\"align-center\">"
            "<img src=\"http://x/y.png\" alt=\"Chart\" style=\"width: 600px; height: 400px\">"
            "<figcaption>Growth</figcaption></figure>"
        )

    def test_image_without_url(self) -> None:
        assert render_block_html(ImageBlock(id="i", image_url="")) == ""


class TestFallbacks:
    """Blocks the renderer cannot show are skipped."""

    def test_unknown_block(self) -> None:
        assert render_block_html(UnknownBlock(id="u", raw_type="table", content="x")) == ""

    def test_blocks_skip_empty_output(self) -> None:
        html = render_blocks_html([
            ParagraphBlock(id="p", content="one"),
            UnknownBlock(id="u", raw_type="table"),
            ParagraphBlock(id="q", content="two"),
        ])
        assert html == "<p>one</p>\n<p>two</p>"

    def test_document(self) -> None:
        document = Document(
            id="d1",
            name="Guide & Co",
            description="About",
            created_at="t",
            updated_at="t",
            blocks=(ParagraphBlock(id="p", content="Body"),),
        )
        html = render_document_html(document)
        assert html.startswith("<article data-document-id=\"d1\">")
        assert "<h1>Guide &amp; Co</h1>" in html
        assert "<p class=\"description\">About</p>" in html
        assert "<p>Body</p>" in html
        assert html.endswith("</article>")
