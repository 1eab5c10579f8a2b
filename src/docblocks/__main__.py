"""docblocks - Block-based document editing from the command line.

Documents are ordered lists of typed blocks (headings, paragraphs, lists,
quotes, code, images), edited through a small plain-text dialect and stored
in a local SQLite database.

Usage:
    docblocks parse FILE                Parse dialect text into blocks JSON
    docblocks serialize FILE            Turn blocks JSON back into dialect text
    docblocks list                      List stored documents
    docblocks create NAME               Create an empty document
    docblocks show ID [--html|--text]   Print a document
    docblocks edit ID FILE              Replace a document's blocks from text
    docblocks append ID FILE            Append blocks JSON to a document
    docblocks upload-image PATH         Copy an image into the image store
    docblocks generate TEXT             Draft new blocks with the local LLM
    docblocks seed                      Load the sample documents

FILE may be "-" to read standard input.

Environment Variables:
    DOCBLOCKS_DATA_DIR      Data directory (default: ~/.docblocks)
    DOCBLOCKS_OLLAMA_URL    Ollama API URL (default: http://127.0.0.1:11434)
    DOCBLOCKS_OLLAMA_MODEL  Ollama model to use
    DOCBLOCKS_LOG_LEVEL     Logging level (default: INFO)
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from . import docs_db
from .config import LIMITS
from .content_service import ContentGenerator
from .doc.blocks_wire import block_to_dict, blocks_from_list, document_to_dict
from .doc.document import Document
from .doc.html_renderer import render_document_html
from .doc.merge import MergeMode, merge_blocks
from .doc.text_parser import parse_text
from .doc.text_serializer import serialize_blocks
from .errors import DocBlocksError, NotFoundError, ValidationError, error_response, get_error_code
from .image_store import upload_image
from .logging_setup import configure_logging
from .providers import get_provider
from .sample_documents import sample_documents
from .settings import settings

logger = logging.getLogger(__name__)


# =============================================================================
# Input / Output Helpers
# =============================================================================


def _read_input(source: str) -> str:
    """Read a text argument ("-" for stdin), enforcing the buffer size limit."""
    if source == "-":
        try:
            text = sys.stdin.read()
        except UnicodeDecodeError as e:
            raise ValidationError(f"Cannot read standard input: {e}", field="file", value=source) from e
    else:
        path = Path(source)
        if not path.is_file():
            raise ValidationError("Input file not found", field="file", value=source)
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ValidationError(f"Cannot read input file: {e}", field="file", value=source) from e

    if len(text.encode("utf-8")) > LIMITS.MAX_TEXT_BYTES:
        raise ValidationError(
            f"Input is larger than {LIMITS.MAX_TEXT_BYTES} bytes",
            field="file",
            value=source,
            constraint="max_size",
        )
    return text


def _read_blocks_json(source: str) -> list[Any]:
    """Read a JSON block array, or a document object carrying ``blocks``."""
    try:
        data = json.loads(_read_input(source))
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON: {e}", field="file", value=source) from e

    if isinstance(data, dict):
        data = data.get("blocks")
    if not isinstance(data, list):
        raise ValidationError(
            "Expected a JSON array of blocks",
            field="file",
            value=source,
            constraint="blocks_array",
        )
    return data


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def _require_document(document_id: str) -> Document:
    document = docs_db.get_document(document_id)
    if document is None:
        raise NotFoundError(
            f"Document {document_id} not found",
            resource_type="document",
            resource_id=document_id,
        )
    return document


def _summary(document: Document) -> dict[str, Any]:
    return {
        "id": document.id,
        "name": document.name,
        "description": document.description,
        "blocks": len(document.blocks),
        "updatedAt": document.updated_at,
    }


# =============================================================================
# Commands
# =============================================================================


def cmd_parse(args: argparse.Namespace) -> int:
    blocks = parse_text(_read_input(args.file))
    _print_json([block_to_dict(block) for block in blocks])
    return 0


def cmd_serialize(args: argparse.Namespace) -> int:
    blocks = blocks_from_list(_read_blocks_json(args.file))
    sys.stdout.write(serialize_blocks(blocks))
    return 0


def cmd_list(args: argparse.Namespace) -> int:
    _print_json([_summary(document) for document in docs_db.list_documents()])
    return 0


def cmd_create(args: argparse.Namespace) -> int:
    document = docs_db.create_document(args.name, args.description)
    _print_json(document_to_dict(document))
    return 0


def cmd_show(args: argparse.Namespace) -> int:
    document = _require_document(args.id)
    if args.html:
        print(render_document_html(document))
    elif args.text:
        sys.stdout.write(serialize_blocks(document.blocks))
    else:
        _print_json(document_to_dict(document))
    return 0


def cmd_edit(args: argparse.Namespace) -> int:
    document = _require_document(args.id)
    blocks = parse_text(_read_input(args.file))
    saved = docs_db.save_document(merge_blocks(document, blocks, MergeMode.REPLACE))
    _print_json(_summary(saved))
    return 0


def cmd_append(args: argparse.Namespace) -> int:
    document = _require_document(args.id)
    blocks = blocks_from_list(_read_blocks_json(args.file))
    saved = docs_db.save_document(merge_blocks(document, blocks, MergeMode.APPEND))
    _print_json(_summary(saved))
    return 0


def cmd_upload_image(args: argparse.Namespace) -> int:
    _print_json(upload_image(args.path).to_dict())
    return 0


def cmd_generate(args: argparse.Namespace) -> int:
    generator = ContentGenerator(get_provider(model=args.model))

    if args.project:
        document = _require_document(args.project)
    else:
        documents = docs_db.list_documents()
        selection = generator.select_project(documents, args.input)
        document = _require_document(selection.document_id)

    before = len(document.blocks)
    saved = docs_db.save_document(generator.integrate(document, args.input))
    logger.info("Added %d generated blocks to %s", len(saved.blocks) - before, saved.id)
    _print_json({**_summary(saved), "added": len(saved.blocks) - before})
    return 0


def cmd_seed(args: argparse.Namespace) -> int:
    if docs_db.list_documents() and not args.force:
        print("Documents already exist; use --force to add the samples anyway.", file=sys.stderr)
        return 0
    seeded = [docs_db.save_document(document) for document in sample_documents()]
    _print_json([_summary(document) for document in seeded])
    return 0


# =============================================================================
# Entry Point
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docblocks",
        description="docblocks - Block-based documents with a plain-text editing dialect",
        epilog="""
Examples:
  docblocks seed                          Load the sample documents
  docblocks parse notes.txt               Print the blocks parsed from notes.txt
  docblocks show <id> --text > doc.txt    Export a document for editing
  docblocks edit <id> doc.txt             Save the edited text back
  docblocks generate "Add a FAQ section"  Let the local model extend a document
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=settings.log_level,
        help=f"Logging level (default: {settings.log_level})",
    )
    parser.add_argument(
        "--version", "-V",
        action="version",
        version="%(prog)s 0.1.0",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("parse", help="Parse dialect text into blocks JSON")
    p.add_argument("file", help="Text file, or - for stdin")
    p.set_defaults(func=cmd_parse)

    p = sub.add_parser("serialize", help="Serialize blocks JSON into dialect text")
    p.add_argument("file", help="JSON file (block array or document), or - for stdin")
    p.set_defaults(func=cmd_serialize)

    p = sub.add_parser("list", help="List stored documents")
    p.set_defaults(func=cmd_list)

    p = sub.add_parser("create", help="Create an empty document")
    p.add_argument("name")
    p.add_argument("--description", "-d", default=None)
    p.set_defaults(func=cmd_create)

    p = sub.add_parser("show", help="Print a document")
    p.add_argument("id")
    fmt = p.add_mutually_exclusive_group()
    fmt.add_argument("--html", action="store_true", help="Render as HTML")
    fmt.add_argument("--text", action="store_true", help="Serialize to dialect text")
    p.set_defaults(func=cmd_show)

    p = sub.add_parser("edit", help="Replace a document's blocks with parsed text")
    p.add_argument("id")
    p.add_argument("file", help="Text file, or - for stdin")
    p.set_defaults(func=cmd_edit)

    p = sub.add_parser("append", help="Append blocks JSON to a document")
    p.add_argument("id")
    p.add_argument("file", help="JSON file (block array or document), or - for stdin")
    p.set_defaults(func=cmd_append)

    p = sub.add_parser("upload-image", help="Copy an image into the image store")
    p.add_argument("path", type=Path)
    p.set_defaults(func=cmd_upload_image)

    p = sub.add_parser("generate", help="Draft new blocks with the local LLM")
    p.add_argument("input", help="What to add")
    p.add_argument("--project", "-p", default=None, help="Target document id (selected by the model if omitted)")
    p.add_argument("--model", "-m", default=None, help="Ollama model (default: DOCBLOCKS_OLLAMA_MODEL)")
    p.set_defaults(func=cmd_generate)

    p = sub.add_parser("seed", help="Load the sample documents")
    p.add_argument("--force", action="store_true", help="Seed even if documents exist")
    p.set_defaults(func=cmd_seed)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the docblocks CLI."""
    args = build_parser().parse_args(argv)

    try:
        configure_logging(args.log_level)
        return args.func(args)
    except DocBlocksError as e:
        logger.debug("Command %s failed: %s", args.command, e.message)
        print(json.dumps(error_response(e).to_dict()), file=sys.stderr)
        return get_error_code(e)
    finally:
        docs_db.close_connection()


if __name__ == "__main__":
    sys.exit(main())
