"""docblocks - Block-based documents with a plain-text editing dialect."""

__version__ = "0.1.0"
