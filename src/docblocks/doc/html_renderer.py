"""Render blocks to HTML for preview and export.

Dispatch covers every block variant. Anything the renderer cannot show (an
unknown type, an image without a URL, a text block without content) renders
as an empty string; rendering never raises for a block.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from html import escape

from .blocks_models import (
    Block,
    BulletedListBlock,
    CodeBlock,
    HeadingBlock,
    ImageBlock,
    NumberedListBlock,
    ParagraphBlock,
    QuoteBlock,
    SubheadingBlock,
    TextFormatting,
    UnknownBlock,
)
from .document import Document

logger = logging.getLogger(__name__)


def render_document_html(document: Document) -> str:
    """Render a whole document as an ``<article>``."""
    parts = [f"<article data-document-id=\"{escape(document.id)}\">"]
    parts.append(f"<header><h1>{escape(document.name)}</h1>")
    if document.description:
        parts.append(f"<p class=\"description\">{escape(document.description)}</p>")
    parts.append("</header>")
    body = render_blocks_html(document.blocks)
    if body:
        parts.append(body)
    parts.append("</article>")
    return "\n".join(parts)


def render_blocks_html(blocks: Iterable[Block]) -> str:
    """Render blocks in order, dropping the ones that render to nothing."""
    rendered = (render_block_html(block) for block in blocks)
    return "\n".join(html for html in rendered if html)


def render_block_html(block: Block) -> str:
    """Render a single block."""
    if isinstance(block, (HeadingBlock, SubheadingBlock)):
        return _render_heading(block)
    if isinstance(block, ParagraphBlock):
        return _render_text("p", block.content, block.formatting)
    if isinstance(block, QuoteBlock):
        return _render_text("blockquote", block.content, block.formatting)
    if isinstance(block, BulletedListBlock):
        return _render_list("ul", block.items)
    if isinstance(block, NumberedListBlock):
        return _render_list("ol", block.items)
    if isinstance(block, CodeBlock):
        return _render_code(block)
    if isinstance(block, ImageBlock):
        return _render_image(block)
    if isinstance(block, UnknownBlock):
        logger.debug("Skipping block %s of unknown type %r", block.id, block.raw_type)
    return ""


def _render_heading(block: HeadingBlock | SubheadingBlock) -> str:
    if not block.content:
        return ""
    tag = f"h{block.render_level()}"
    return f"<{tag}>{escape(block.content)}</{tag}>"


def _apply_formatting(html: str, formatting: TextFormatting | None) -> str:
    if formatting is None:
        return html
    if formatting.underline:
        html = f"<u>{html}</u>"
    if formatting.italic:
        html = f"<em>{html}</em>"
    if formatting.bold:
        html = f"<strong>{html}</strong>"
    return html


def _render_text(tag: str, content: str, formatting: TextFormatting | None) -> str:
    if not content:
        return ""
    return f"<{tag}>{_apply_formatting(escape(content), formatting)}</{tag}>"


def _render_list(tag: str, items: tuple[str, ...]) -> str:
    if not items:
        return ""
    lines = [f"<{tag}>"]
    lines.extend(f"<li>{escape(item)}</li>" for item in items)
    lines.append(f"</{tag}>")
    return "\n".join(lines)


def _render_code(block: CodeBlock) -> str:
    if not block.content:
        return ""
    classes = []
    if block.language:
        classes.append(f"language-{block.language}")
    if block.show_line_numbers:
        classes.append("line-numbers")
    class_attr = f" class=\"{escape(' '.join(classes))}\"" if classes else ""

    attrs = ""
    if block.theme:
        attrs += f" data-theme=\"{escape(block.theme)}\""
    if block.collapsible:
        attrs += " data-collapsible"
    if block.copy_button:
        attrs += " data-copy-button"
    return f"<pre{attrs}><code{class_attr}>{escape(block.content)}</code></pre>"


def _render_image(block: ImageBlock) -> str:
    if not block.image_url:
        return ""
    style = []
    if block.width:
        style.append(f"width: {block.width}")
    if block.height:
        style.append(f"height: {block.height}")
    style_attr = f" style=\"{escape('; '.join(style))}\"" if style else ""
    align_attr = f" class=\"align-{block.alignment.value}\"" if block.alignment else ""

    img = f"<img src=\"{escape(block.image_url)}\" alt=\"{escape(block.alt_text or '')}\"{style_attr}>"
    caption = f"<figcaption>{escape(block.caption)}</figcaption>" if block.caption else ""
    return f"<figure{align_attr}>{img}{caption}</figure>"
