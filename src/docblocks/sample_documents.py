"""Sample documents for a fresh data directory.

Stored in the document JSON shape without identifiers; ``sample_documents()``
decodes them so every call hands out fresh document and block ids.
"""

from __future__ import annotations

from typing import Any

from .doc.blocks_wire import document_from_dict
from .doc.document import Document

SAMPLE_DATA: list[dict[str, Any]] = [
    {
        "name": "Python Packaging Guide",
        "description": "Building, testing and publishing a modern Python package",
        "createdAt": "2024-03-15T08:00:00+00:00",
        "updatedAt": "2024-03-15T10:30:00+00:00",
        "blocks": [
            {"type": "heading", "content": "Python Packaging Guide", "level": 1},
            {
                "type": "paragraph",
                "content": "This guide walks through the layout and tooling of a small, installable Python package.",
                "formatting": {"bold": True},
            },
            {"type": "subheading", "content": "Setting Up the Project", "level": 2},
            {
                "type": "bulleted_list",
                "items": [
                    "Create a virtual environment",
                    "Use a src/ layout",
                    "Declare dependencies in pyproject.toml",
                    "Add pytest as a test extra",
                ],
            },
            {
                "type": "code",
                "content": "python -m venv .venv\n. .venv/bin/activate\npip install -e '.[test]'\npytest\n",
                "codeLanguage": "bash",
                "showLineNumbers": True,
                "theme": "dark",
                "copyButton": True,
            },
            {
                "type": "quote",
                "content": "Simple is better than complex.",
                "formatting": {"italic": True},
            },
        ],
    },
    {
        "name": "Retirement Planning 101",
        "description": "Essential guide to planning for retirement and financial independence",
        "createdAt": "2024-03-14T09:00:00+00:00",
        "updatedAt": "2024-03-15T11:20:00+00:00",
        "blocks": [
            {"type": "heading", "content": "Your Path to Financial Independence", "level": 1},
            {
                "type": "image",
                "imageUrl": "https://example.com/images/compound-interest.png",
                "altText": "Compound interest growth chart",
                "width": "600px",
                "height": "400px",
                "alignment": "center",
                "caption": "Compound interest over 30 years",
            },
            {
                "type": "numbered_list",
                "items": [
                    "Start saving early",
                    "Use tax-advantaged accounts first",
                    "Diversify your investments",
                    "Plan for healthcare costs",
                ],
            },
            {
                "type": "paragraph",
                "content": "The 4% rule: withdrawing 4% of savings in the first year, then adjusting for "
                "inflation, has historically lasted through a 30-year retirement.",
                "formatting": {"bold": True, "underline": True},
            },
            {
                "type": "quote",
                "content": "The best time to start saving was yesterday. The second best time is today.",
                "formatting": {"italic": True},
            },
        ],
    },
    {
        "name": "Startup Founder's Playbook",
        "description": "Launching and growing an early-stage company",
        "createdAt": "2024-03-13T15:00:00+00:00",
        "updatedAt": "2024-03-15T09:45:00+00:00",
        "blocks": [
            {"type": "heading", "content": "From Idea to Launch", "level": 1},
            {"type": "subheading", "content": "Phase 1: Validation", "level": 2},
            {
                "type": "bulleted_list",
                "items": [
                    "Identify your target market",
                    "Interview customers",
                    "Build a minimum viable product",
                    "Test your assumptions",
                ],
            },
            {
                "type": "code",
                "content": "def runway_months(cash: float, monthly_burn: float) -> float:\n"
                "    return cash / monthly_burn\n",
                "codeLanguage": "python",
                "showLineNumbers": True,
                "theme": "dark",
                "copyButton": True,
                "collapsible": True,
            },
            {
                "type": "quote",
                "content": "Make something people want.",
                "formatting": {"italic": True, "bold": True},
            },
        ],
    },
]


def sample_documents() -> list[Document]:
    """Fresh copies of the sample documents, each with new identifiers."""
    return [document_from_dict(data) for data in SAMPLE_DATA]
