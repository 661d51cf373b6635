"""Ledger persistence.

Provides:
- Course / Assessment records (models)
- LedgerStore backends: JsonFileStore, InMemoryStore (store)
- GradeLedger with write-through persistence (ledger)
"""

from courseflow.db.ledger import GradeLedger, SaveResult
from courseflow.db.models import Assessment, Course
from courseflow.db.store import InMemoryStore, JsonFileStore, LedgerStore

__all__ = [
    "Assessment",
    "Course",
    "GradeLedger",
    "InMemoryStore",
    "JsonFileStore",
    "LedgerStore",
    "SaveResult",
]
