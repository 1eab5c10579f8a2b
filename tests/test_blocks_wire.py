"""Tests for blocks_wire.py - document JSON and storage row shapes."""

from __future__ import annotations

import json

from docblocks.doc.blocks_models import (
    BulletedListBlock,
    CodeBlock,
    HeadingBlock,
    ImageAlignment,
    ImageBlock,
    NumberedListBlock,
    ParagraphBlock,
    QuoteBlock,
    TextFormatting,
    UnknownBlock,
)
from docblocks.doc.blocks_wire import (
    block_from_dict,
    block_from_row,
    block_to_dict,
    block_to_row,
    blocks_from_list,
    decode_metadata,
    document_from_dict,
    document_to_dict,
)
from docblocks.doc.document import Document


class TestBlockFromDict:
    """Lenient decoding of the document JSON shape."""

    def test_heading(self) -> None:
        block = block_from_dict({"id": "h", "type": "heading", "content": "T", "level": 2})
        assert block == HeadingBlock(id="h", content="T", level=2)

    def test_missing_id_gets_fresh_one(self, sequential_ids) -> None:
        block = block_from_dict({"type": "paragraph", "content": "x"}, new_id=sequential_ids)
        assert block.id == "b1"

    def test_numeric_id_is_stringified(self) -> None:
        assert block_from_dict({"id": 7, "type": "paragraph"}).id == "7"

    def test_missing_content_is_empty(self) -> None:
        assert block_from_dict({"id": "p", "type": "paragraph"}).content == ""

    def test_formatting(self) -> None:
        block = block_from_dict({
            "id": "q",
            "type": "quote",
            "content": "x",
            "formatting": {"bold": True, "italic": 1},
        })
        assert isinstance(block, QuoteBlock)
        assert block.formatting == TextFormatting(bold=True, italic=True)

    def test_level_coercion(self) -> None:
        assert block_from_dict({"id": "h", "type": "heading", "level": "3"}).level == 3
        assert block_from_dict({"id": "h", "type": "heading", "level": 2.0}).level == 2
        assert block_from_dict({"id": "h", "type": "heading", "level": "big"}).level == 1
        assert block_from_dict({"id": "h", "type": "heading", "level": 12}).level == 12

    def test_list_items(self) -> None:
        block = block_from_dict({"id": "l", "type": "numbered_list", "items": ["a", 2]})
        assert block == NumberedListBlock(id="l", items=("a", "2"))

    def test_list_items_from_content(self) -> None:
        block = block_from_dict({"id": "l", "type": "bulleted_list", "content": "a\n\nb"})
        assert block == BulletedListBlock(id="l", items=("a", "b"))

    def test_code_language_keys(self) -> None:
        camel = block_from_dict({"id": "c", "type": "code", "codeLanguage": "ts"})
        plain = block_from_dict({"id": "c", "type": "code", "language": "py"})
        assert camel.language == "ts"
        assert plain.language == "py"

    def test_code_flags(self) -> None:
        block = block_from_dict({
            "id": "c",
            "type": "code",
            "content": "x",
            "showLineNumbers": True,
            "theme": "dark",
            "collapsible": True,
            "copyButton": True,
        })
        assert block == CodeBlock(
            id="c",
            content="x",
            show_line_numbers=True,
            theme="dark",
            collapsible=True,
            copy_button=True,
        )

    def test_image(self) -> None:
        block = block_from_dict({
            "id": "i",
            "type": "image",
            "imageUrl": "http://x/y.png",
            "altText": "Chart",
            "width": "600px",
            "alignment": "center",
        })
        assert block == ImageBlock(
            id="i",
            image_url="http://x/y.png",
            alt_text="Chart",
            width="600px",
            alignment=ImageAlignment.CENTER,
        )

    def test_bad_alignment_is_dropped(self) -> None:
        block = block_from_dict({"id": "i", "type": "image", "imageUrl": "u", "alignment": "middle"})
        assert block.alignment is None

    def test_unknown_type_is_kept_opaque(self) -> None:
        data = {"id": "t", "type": "table", "content": "x", "rows": [[1, 2]]}
        block = block_from_dict(data)
        assert isinstance(block, UnknownBlock)
        assert block.raw_type == "table"
        assert block.raw["rows"] == [[1, 2]]
        assert block_to_dict(block) == data

    def test_missing_type_is_unknown(self) -> None:
        block = block_from_dict({"id": "t"})
        assert isinstance(block, UnknownBlock)
        assert block.raw_type == ""


class TestBlockToDict:
    """Encoding to camelCase JSON."""

    def test_paragraph_without_formatting(self) -> None:
        assert block_to_dict(ParagraphBlock(id="p", content="x")) == {
            "id": "p",
            "type": "paragraph",
            "content": "x",
        }

    def test_code_uses_code_language(self) -> None:
        data = block_to_dict(CodeBlock(id="c", content="x", language="rust"))
        assert data["codeLanguage"] == "rust"
        assert "language" not in data

    def test_image_omits_unset_fields(self) -> None:
        data = block_to_dict(ImageBlock(id="i", image_url="u", alignment=ImageAlignment.LEFT))
        assert data == {"id": "i", "type": "image", "imageUrl": "u", "alignment": "left"}

    def test_round_trip(self) -> None:
        block = QuoteBlock(id="q", content="x", formatting=TextFormatting(underline=True))
        assert block_from_dict(block_to_dict(block)) == block


class TestBlocksFromList:
    """Decoding arrays of blocks."""

    def test_skips_non_objects(self) -> None:
        blocks = blocks_from_list([{"id": "p", "type": "paragraph"}, "junk", 3, None])
        assert [b.id for b in blocks] == ["p"]

    def test_non_list(self) -> None:
        assert blocks_from_list({"blocks": []}) == []


class TestDocumentShape:
    """Whole-document JSON."""

    def test_round_trip(self) -> None:
        document = Document(
            id="d",
            name="Guide",
            description="About",
            created_at="2024-01-01T00:00:00+00:00",
            updated_at="2024-01-02T00:00:00+00:00",
            blocks=(HeadingBlock(id="h", content="T"),),
        )
        data = document_to_dict(document)
        assert data["createdAt"] == "2024-01-01T00:00:00+00:00"
        assert data["updatedAt"] == "2024-01-02T00:00:00+00:00"
        assert document_from_dict(json.loads(json.dumps(data))) == document

    def test_missing_fields_are_filled(self) -> None:
        document = document_from_dict({"name": "Bare"})
        assert document.id
        assert document.created_at
        assert document.blocks == ()


class TestRowShape:
    """Storage rows with a metadata bag."""

    def test_heading_row(self) -> None:
        row = block_to_row(HeadingBlock(id="h", content="T", level=2), 0)
        assert row == {
            "id": "h",
            "type": "heading",
            "content": "T",
            "level": 2,
            "metadata": {},
            "position": 0,
        }

    def test_list_row(self) -> None:
        row = block_to_row(BulletedListBlock(id="l", items=("a", "b")), 3)
        assert row["content"] == "a\nb"
        assert row["metadata"] == {"items": ["a", "b"]}
        assert row["position"] == 3

    def test_code_row_uses_language(self) -> None:
        row = block_to_row(CodeBlock(id="c", content="x", language="go"), 0)
        assert row["metadata"]["language"] == "go"

    def test_image_row(self) -> None:
        row = block_to_row(ImageBlock(id="i", image_url="u", caption="C"), 0)
        assert row["content"] is None
        assert row["metadata"] == {"imageUrl": "u", "caption": "C"}

    def test_row_round_trip(self) -> None:
        blocks = [
            HeadingBlock(id="h", content="T", level=3),
            ParagraphBlock(id="p", content="x", formatting=TextFormatting(bold=True)),
            NumberedListBlock(id="n", items=("1", "2")),
            CodeBlock(id="c", content="x\n", language="py", show_line_numbers=True, theme="dark"),
            ImageBlock(id="i", image_url="u", width="10px", alignment=ImageAlignment.RIGHT),
        ]
        for position, block in enumerate(blocks):
            row = block_to_row(block, position)
            row["metadata"] = json.dumps(row["metadata"])
            assert block_from_row(row) == block

    def test_unknown_row_keeps_columns(self) -> None:
        row = {
            "id": "t",
            "type": "table",
            "content": "x",
            "level": None,
            "metadata": '{"rows": 2}',
            "position": 0,
        }
        block = block_from_row(row)
        assert isinstance(block, UnknownBlock)
        assert block.raw["metadata"] == {"rows": 2}
        assert block_to_row(block, 4)["metadata"] == {"rows": 2}

    def test_unknown_row_exports_without_row_columns(self) -> None:
        row = {
            "id": "t",
            "document_id": "doc-1",
            "type": "table",
            "content": "x",
            "level": None,
            "metadata": '{"rows": 2}',
            "position": 3,
            "created_at": "2024-01-01T00:00:00+00:00",
        }
        exported = block_to_dict(block_from_row(row))

        assert exported == {"id": "t", "type": "table", "content": "x", "rows": 2}
        assert block_from_dict(exported) == block_from_row(row)

    def test_list_row_without_items_uses_content(self) -> None:
        row = {"id": "l", "type": "bulleted_list", "content": "a\nb", "level": None, "metadata": "{}"}
        assert block_from_row(row) == BulletedListBlock(id="l", items=("a", "b"))

    def test_decode_metadata(self) -> None:
        assert decode_metadata('{"a": 1}') == {"a": 1}
        assert decode_metadata({"a": 1}) == {"a": 1}
        assert decode_metadata("not json") == {}
        assert decode_metadata("[1]") == {}
        assert decode_metadata(None) == {}
