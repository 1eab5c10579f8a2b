from __future__ import annotations

from collections.abc import Callable, Iterator
from pathlib import Path

import pytest


@pytest.fixture
def temp_data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Isolated data directory for the document store and image store."""
    data_dir = tmp_path / "docblocks-data"
    data_dir.mkdir()
    monkeypatch.setenv("DOCBLOCKS_DATA_DIR", str(data_dir))

    import docblocks.docs_db as docs_db

    docs_db.close_connection()

    yield data_dir

    docs_db.close_connection()


@pytest.fixture
def sequential_ids() -> Callable[[], str]:
    """Deterministic identifier factory: b1, b2, b3, ..."""
    counter = iter(range(1, 1_000_000))

    def new_id() -> str:
        return f"b{next(counter)}"

    return new_id
