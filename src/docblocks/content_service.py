"""Content generation: route user input to a document and draft new blocks.

The model's answers are untrusted input. Project selection must name one of
the offered documents; generated blocks go through the same lenient decoder
as any imported JSON and are attached with an append-mode merge, so a reused
identifier rejects the whole batch.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass

from .config import GENERATION
from .doc.blocks_models import Block
from .doc.blocks_wire import blocks_from_list, document_to_dict
from .doc.document import Document, simplify_documents
from .doc.merge import MergeMode, merge_blocks
from .errors import ContentGenerationError, ValidationError
from .providers.base import LLMProvider
from .providers.ollama import parse_json_object
from .settings import settings

logger = logging.getLogger(__name__)


PROJECT_SELECTION_PROMPT = """You sort incoming notes into documentation projects.

You receive a JSON object with:
- "projects": a list of projects, each with "id", "name" and optionally "description"
- "userInput": the new content the user wants to file

Pick the single project the input belongs to, judging by name and description.
Do not write or rewrite any content.

Reply with only this JSON object:
{"projectId": "<id of the chosen project>", "projectName": "<its name>"}"""


BLOCK_GENERATION_PROMPT = """You extend structured documents. A document is an ordered list of blocks.

Block types and their fields:
- "heading", "subheading": "content", "level" (1-6)
- "paragraph", "quote": "content", optional "formatting" {"bold", "italic", "underline"}
- "bulleted_list", "numbered_list": "items" (list of strings)
- "code": "content", optional "codeLanguage"
- "image": "imageUrl", optional "altText", "caption", "alignment" (left, center, right), "width", "height"

You receive a JSON object with "project" (the current document) and "userInput".

Rules:
- Create only NEW blocks for the new input; never repeat or edit existing blocks.
- Give every new block a fresh UUID in "id".
- Reply with only a JSON object of the form {"blocks": [ ... ]} and no other text.

Example:
{"blocks": [{"id": "0b7c9a1e-3f0e-4a53-9d9e-2c1f5e0b6a11", "type": "paragraph", "content": "New content"}]}"""


@dataclass(frozen=True)
class ProjectSelection:
    document_id: str
    name: str


class ContentGenerator:
    """Drafts document content with an LLM provider.

    Example:
        generator = ContentGenerator(get_provider())
        document = generator.integrate(document, "Add a note about retries")
    """

    def __init__(
        self,
        provider: LLMProvider,
        *,
        temperature: float = GENERATION.TEMPERATURE,
        timeout_seconds: float | None = None,
    ) -> None:
        self._provider = provider
        self._temperature = temperature
        self._timeout = timeout_seconds or settings.llm_timeout_seconds

    def select_project(self, documents: list[Document], user_input: str) -> ProjectSelection:
        """Ask the model which document ``user_input`` belongs to.

        Raises:
            ValidationError: If there are no documents to choose from.
            ContentGenerationError: If the answer does not name an offered document.
            LLMError: If the provider fails.
        """
        if not documents:
            raise ValidationError("No documents to choose from", field="documents")

        raw = self._provider.chat_json(
            system=PROJECT_SELECTION_PROMPT,
            user=json.dumps({"projects": simplify_documents(documents), "userInput": user_input}),
            timeout_seconds=self._timeout,
            temperature=self._temperature,
        )
        data = parse_json_object(raw)
        if data is None:
            raise ContentGenerationError(
                "Project selection reply is not a JSON object",
                stage="select_project",
                response_preview=raw,
            )

        by_id = {document.id: document for document in documents}
        chosen = data.get("projectId")
        if not isinstance(chosen, str) or chosen not in by_id:
            raise ContentGenerationError(
                f"Model selected an unknown project: {chosen!r}",
                stage="select_project",
                response_preview=raw,
            )

        logger.info("Selected document %s for new input", chosen)
        return ProjectSelection(document_id=chosen, name=by_id[chosen].name)

    def generate_blocks(self, document: Document, user_input: str) -> list[Block]:
        """Ask the model for new blocks to add to ``document``.

        The blocks are decoded but not yet validated against the document;
        ``integrate`` (or an append-mode merge) does that.

        Raises:
            ContentGenerationError: If the reply has no ``blocks`` array.
            LLMError: If the provider fails.
        """
        raw = self._provider.chat_json(
            system=BLOCK_GENERATION_PROMPT,
            user=json.dumps({"project": document_to_dict(document), "userInput": user_input}),
            timeout_seconds=self._timeout,
            temperature=self._temperature,
        )
        data = parse_json_object(raw)
        if data is None or not isinstance(data.get("blocks"), list):
            raise ContentGenerationError(
                "Block generation reply has no blocks array",
                stage="generate_blocks",
                response_preview=raw,
            )

        blocks = blocks_from_list(data["blocks"])
        logger.info("Model proposed %d blocks for document %s", len(blocks), document.id)
        return blocks

    def integrate(self, document: Document, user_input: str) -> Document:
        """Generate blocks and append them to ``document``.

        Raises:
            DuplicateBlockIdentifier: If a proposed id collides; nothing is appended.
            ContentGenerationError: If the reply is unusable.
            LLMError: If the provider fails.
        """
        blocks = self.generate_blocks(document, user_input)
        return merge_blocks(document, blocks, MergeMode.APPEND)
