"""Storage backends for the grade ledger.

The ledger talks to a LedgerStore; it never touches files itself.

- JsonFileStore: one JSON document, rewritten in full on every save
- InMemoryStore: keeps the last saved document in memory (tests, dry runs)
"""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any, Protocol

import structlog

logger = structlog.get_logger(__name__)


class LedgerStore(Protocol):
    """Persistence port for the ledger document."""

    def load(self) -> dict[str, Any] | None:
        """Return the stored document, or None when there is nothing usable."""
        ...

    def save(self, document: dict[str, Any]) -> bool:
        """Persist the document. Returns False when the write failed."""
        ...


class JsonFileStore:
    """Ledger document kept in a single JSON file."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> dict[str, Any] | None:
        """Read the document.

        A missing, unreadable or malformed file yields None so the ledger
        starts empty instead of failing.
        """
        if not self.path.exists():
            logger.info("store.no_database_found", path=str(self.path))
            return None

        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("store.load_failed", path=str(self.path), error=str(e))
            return None

        if not isinstance(data, dict):
            logger.warning("store.invalid_document", path=str(self.path))
            return None

        return data

    def save(self, document: dict[str, Any]) -> bool:
        """Rewrite the whole file.

        Write errors are logged and reported through the return value; the
        in-memory ledger stays ahead of disk until the next successful save.
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=2, ensure_ascii=False)
        except (OSError, TypeError) as e:
            logger.error("store.save_failed", path=str(self.path), error=str(e))
            return False

        logger.debug("store.saved", path=str(self.path))
        return True


class InMemoryStore:
    """Ledger document held in memory."""

    def __init__(self, document: dict[str, Any] | None = None):
        self.document = copy.deepcopy(document) if document is not None else None
        self.save_count = 0

    def load(self) -> dict[str, Any] | None:
        return copy.deepcopy(self.document) if self.document is not None else None

    def save(self, document: dict[str, Any]) -> bool:
        self.document = copy.deepcopy(document)
        self.save_count += 1
        return True
